from typing import Any
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import get_db
from trustcore.core import deps
from trustcore.modules.users.models import User
from trustcore.modules.moderation.classifier import ContentClassifier, get_classifier
from trustcore.modules.visibility.service import Viewer
from trustcore.modules.content import schemas, service

router = APIRouter()

@router.post("/posts", response_model=schemas.SubmissionResult, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_in: schemas.PostCreate,
    current_user: User = Depends(deps.get_current_user),
    classifier: ContentClassifier = Depends(get_classifier),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.create_post(db, classifier, current_user, post_in.content)

@router.get("/posts", response_model=schemas.PostPage)
async def feed(
    scope: str = "all",
    limit: int = 20,
    offset: int = 0,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_posts(db, Viewer.of(current_user), scope=scope, limit=limit, offset=offset)

@router.get("/posts/{post_id}", response_model=schemas.PostRead)
async def read_post(
    post_id: int,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.get_post(db, Viewer.of(current_user), post_id)

@router.post("/posts/{post_id}/comments", response_model=schemas.SubmissionResult, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: int,
    comment_in: schemas.CommentCreate,
    current_user: User = Depends(deps.get_current_user),
    classifier: ContentClassifier = Depends(get_classifier),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.create_comment(db, classifier, current_user, post_id, comment_in.content)

@router.get("/posts/{post_id}/comments", response_model=schemas.CommentPage)
async def list_comments(
    post_id: int,
    limit: int = 20,
    offset: int = 0,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_comments(db, Viewer.of(current_user), post_id, limit=limit, offset=offset)

@router.post("/posts/{post_id}/reactions", response_model=schemas.ReactionResult)
async def toggle_reaction(
    post_id: int,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    reacted = await service.toggle_reaction(db, current_user, post_id)
    return {"reacted": reacted}

@router.get("/users/{user_id}/posts", response_model=schemas.PostPage)
async def user_posts(
    user_id: int,
    limit: int = 20,
    offset: int = 0,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_posts(db, Viewer.of(current_user), author_id=user_id, limit=limit, offset=offset)
