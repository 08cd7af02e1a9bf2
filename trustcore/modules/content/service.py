"""Post, comment and reaction submission plus the visible listings.

Every write goes through the same gates in the same order: text limits, the
ban gate, (for engagement) visibility and the owner's engagement policy, then
moderation inside the creating transaction.
"""

import logging
from typing import Optional, Union

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.config import settings
from trustcore.core.db import is_unique_violation
from trustcore.core.errors import NotFound, PolicyViolation, ValidationError, store_errors
from trustcore.modules.bans import service as ban_service
from trustcore.modules.content.models import Comment, Post, Reaction
from trustcore.modules.moderation import service as moderation_service
from trustcore.modules.moderation.classifier import ContentClassifier
from trustcore.modules.moderation.schemas import ModerationAction, ModerationResult
from trustcore.modules.users.models import User
from trustcore.modules.visibility import service as visibility
from trustcore.modules.visibility.service import EngagementKind, Viewer

logger = logging.getLogger(__name__)

SUBMISSION_STATUS = {
    ModerationAction.APPROVED: "published",
    ModerationAction.MANUAL_REVIEW: "pending_review",
    ModerationAction.REMOVED: "rejected",
}

FEED_SCOPES = ("all", "campus")

def submission_status(result: ModerationResult) -> str:
    # Hidden content is never reported as published.
    if result.action == ModerationAction.APPROVED and result.flagged:
        return "pending_review"
    return SUBMISSION_STATUS[result.action]

def _outcome(item_id: int, result: ModerationResult) -> dict:
    # Escalation fields stay server-side.
    return {
        "status": submission_status(result),
        "id": item_id,
        "moderation": {"action": result.action, "flagged": result.flagged, "violations": result.violations},
    }

def _clean_text(text: Optional[str], max_length: int, label: str) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError(f"{label} cannot be empty")
    if len(text) > max_length:
        raise ValidationError(f"{label} cannot exceed {max_length} characters")
    return text

def _check_page(limit: int, offset: int) -> None:
    if limit < 1 or limit > settings.FEED_PAGE_MAX:
        raise ValidationError(f"Limit must be between 1 and {settings.FEED_PAGE_MAX}")
    if offset < 0:
        raise ValidationError("Offset cannot be negative")

async def ensure_not_banned(db: AsyncSession, user_id: int) -> None:
    status = await moderation_service.check_user_ban_status(db, user_id)
    if status.is_banned:
        logger.info(f"[Content] Submission by banned user {user_id} refused ({status.ban_type.value})")
        raise PolicyViolation("Your account is restricted from posting")

async def _visible_post(db: AsyncSession, viewer: Viewer, post_id: int) -> Post:
    post = await db.get(Post, post_id)
    if not post or not await visibility.is_visible(db, viewer, post):
        raise NotFound("Post not found")
    return post

async def _moderate_and_store(
    db: AsyncSession,
    classifier: ContentClassifier,
    actor: User,
    item: Union[Post, Comment],
    content_type: str,
) -> ModerationResult:
    # Inserted hidden so no reader can ever see it unmoderated.
    item.flagged = True
    db.add(item)
    await db.flush()

    result = await moderation_service.moderate(classifier, item.content, content_type, item.id, actor.id)
    item.flagged = result.flagged or result.action == ModerationAction.REMOVED
    item.moderation_action = result.action.value
    await moderation_service.record_decision(db, result, content_type, item.id, actor.id)

    if result.should_ban_user:
        reason = "Automated moderation: " + (", ".join(result.violations) or result.action.value)
        await ban_service.record_ban(db, actor.id, result.ban_duration, reason)

    await db.commit()
    return result

async def create_post(db: AsyncSession, classifier: ContentClassifier, actor: User, text: Optional[str]) -> dict:
    text = _clean_text(text, settings.MAX_POST_LENGTH, "Post content")

    with store_errors("create post", actor_id=actor.id, content_type="post"):
        await ensure_not_banned(db, actor.id)
        post = Post(user_id=actor.id, university_id=actor.university_id, content=text)
        result = await _moderate_and_store(db, classifier, actor, post, "post")

    outcome = _outcome(post.id, result)
    logger.info(f"[Content] Post {post.id} by {actor.id} -> {outcome['status']}")
    return outcome

async def create_comment(
    db: AsyncSession,
    classifier: ContentClassifier,
    actor: User,
    post_id: int,
    text: Optional[str],
) -> dict:
    text = _clean_text(text, settings.MAX_COMMENT_LENGTH, "Comment")
    viewer = Viewer.of(actor)

    with store_errors("create comment", actor_id=actor.id, content_type="comment"):
        await ensure_not_banned(db, actor.id)
        post = await _visible_post(db, viewer, post_id)
        if not await visibility.can_engage(db, viewer, post.user_id, EngagementKind.COMMENT):
            raise PolicyViolation("You cannot comment on this post")

        comment = Comment(post_id=post.id, user_id=actor.id, content=text)
        result = await _moderate_and_store(db, classifier, actor, comment, "comment")

    outcome = _outcome(comment.id, result)
    logger.info(f"[Content] Comment {comment.id} on post {post_id} by {actor.id} -> {outcome['status']}")
    return outcome

async def toggle_reaction(db: AsyncSession, actor: User, post_id: int) -> bool:
    """Returns True if the actor now reacts to the post."""
    viewer = Viewer.of(actor)

    with store_errors("toggle reaction", actor_id=actor.id, content_type="post", content_id=post_id):
        await ensure_not_banned(db, actor.id)
        post = await _visible_post(db, viewer, post_id)
        if not await visibility.can_engage(db, viewer, post.user_id, EngagementKind.REACT):
            raise PolicyViolation("You cannot react to this post")

        removed = await db.execute(
            delete(Reaction).where(Reaction.post_id == post.id, Reaction.user_id == actor.id)
        )
        if (removed.rowcount or 0) > 0:
            await db.commit()
            return False

        db.add(Reaction(post_id=post.id, user_id=actor.id))
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if not is_unique_violation(e):
                raise
    return True

async def get_post(db: AsyncSession, viewer: Viewer, post_id: int) -> Post:
    with store_errors("get post", actor_id=viewer.user_id, content_type="post", content_id=post_id):
        return await _visible_post(db, viewer, post_id)

async def _visible_page(db: AsyncSession, viewer: Viewer, query, order_by, limit: int, offset: int) -> dict:
    # Visibility is part of the WHERE clause, so the count and the window are
    # both post-filter and only one page of rows is ever loaded.
    total = await db.scalar(select(func.count()).select_from(query.subquery()))
    result = await db.execute(query.order_by(*order_by).limit(limit).offset(offset))
    rows = result.scalars().all()
    data = await visibility.filter_visible(db, viewer, rows)
    return {"data": data, "total_count": total, "has_more": offset + len(rows) < total}

async def list_posts(
    db: AsyncSession,
    viewer: Viewer,
    scope: str = "all",
    author_id: Optional[int] = None,
    limit: int = 20,
    offset: int = 0,
) -> dict:
    _check_page(limit, offset)
    if scope not in FEED_SCOPES:
        raise ValidationError("Invalid scope. Must be all or campus")
    if scope == "campus" and viewer.university_id is None:
        return {"data": [], "total_count": 0, "has_more": False}

    query = select(Post).where(visibility.visible_clause(viewer, Post.user_id, Post.flagged))
    if scope == "campus":
        query = query.where(Post.university_id == viewer.university_id)
    if author_id is not None:
        query = query.where(Post.user_id == author_id)

    with store_errors("list posts", actor_id=viewer.user_id, content_type="post"):
        return await _visible_page(db, viewer, query, (Post.created_at.desc(), Post.id.desc()), limit, offset)

async def list_comments(
    db: AsyncSession,
    viewer: Viewer,
    post_id: int,
    limit: int = 20,
    offset: int = 0,
) -> dict:
    _check_page(limit, offset)

    with store_errors("list comments", actor_id=viewer.user_id, content_type="post", content_id=post_id):
        post = await _visible_post(db, viewer, post_id)
        query = (
            select(Comment)
            .where(Comment.post_id == post.id)
            .where(visibility.visible_clause(viewer, Comment.user_id, Comment.flagged))
        )
        return await _visible_page(db, viewer, query, (Comment.created_at.desc(), Comment.id.desc()), limit, offset)
