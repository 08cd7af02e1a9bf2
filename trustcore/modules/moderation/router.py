from typing import Any, List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import get_db
from trustcore.core import deps
from trustcore.modules.users.models import User
from trustcore.modules.bans import schemas as ban_schemas, service as ban_service
from trustcore.modules.moderation import schemas, service

router = APIRouter()

@router.get("/ban-status", response_model=ban_schemas.BanStatus)
async def my_ban_status(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.check_user_ban_status(db, current_user.id)

@router.get("/users/{user_id}/ban-status", response_model=ban_schemas.BanStatus)
async def user_ban_status(
    user_id: int,
    current_user: User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.check_user_ban_status(db, user_id)

@router.get("/users/{user_id}/bans", response_model=List[ban_schemas.BanRead])
async def user_bans(
    user_id: int,
    current_user: User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await ban_service.list_bans(db, user_id)

@router.post("/bans/{ban_id}/lift", response_model=ban_schemas.BanRead)
async def lift_ban(
    ban_id: int,
    current_user: User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await ban_service.lift_ban(db, ban_id, current_user.id)

@router.get("/users/{user_id}/logs", response_model=List[schemas.ModerationLogRead])
async def user_moderation_logs(
    user_id: int,
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.list_moderation_logs(db, user_id, limit=limit)
