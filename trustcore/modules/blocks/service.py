import logging
from typing import Iterable, List, Set

from sqlalchemy import select, delete, or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import is_unique_violation
from trustcore.core.errors import NotFound, PolicyViolation, store_errors
from trustcore.modules.blocks import models, schemas
from trustcore.modules.users import service as user_service

logger = logging.getLogger(__name__)

async def block_user(db: AsyncSession, blocker_id: int, target_id: int) -> bool:
    """Block ``target_id``. Returns True if a new edge was written, False if
    it already existed. Both outcomes are success."""
    if blocker_id == target_id:
        raise PolicyViolation("You cannot block yourself")

    with store_errors("block user", actor_id=blocker_id, content_type="user", content_id=target_id):
        target = await user_service.get_user(db, target_id)
        if not target:
            raise NotFound("Target user not found")

        db.add(models.BlockEdge(blocker_id=blocker_id, blocked_id=target_id))
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if not is_unique_violation(e):
                raise
            # A concurrent or repeated block already wrote the edge.
            logger.info(f"[Blocks] {blocker_id} -> {target_id} already blocked")
            return False

    logger.info(f"[Blocks] {blocker_id} blocked {target_id}")
    return True

async def unblock_user(db: AsyncSession, blocker_id: int, target_id: int) -> bool:
    """Remove the edge if present. Returns whether anything was deleted."""
    with store_errors("unblock user", actor_id=blocker_id, content_type="user", content_id=target_id):
        result = await db.execute(
            delete(models.BlockEdge).where(
                models.BlockEdge.blocker_id == blocker_id,
                models.BlockEdge.blocked_id == target_id,
            )
        )
        await db.commit()

    removed = (result.rowcount or 0) > 0
    logger.info(f"[Blocks] {blocker_id} unblocked {target_id} (removed={removed})")
    return removed

async def list_blocked_users(db: AsyncSession, blocker_id: int) -> List[schemas.BlockedUserRead]:
    with store_errors("list blocked users", actor_id=blocker_id):
        result = await db.execute(
            select(models.BlockEdge)
            .where(models.BlockEdge.blocker_id == blocker_id)
            .order_by(models.BlockEdge.created_at.desc(), models.BlockEdge.id.desc())
        )
        edges = result.scalars().all()
        info = await user_service.get_display_info(db, [e.blocked_id for e in edges])

    response = []
    for edge in edges:
        user_info = info.get(edge.blocked_id) or {"username": "Unknown User", "university_name": None}
        response.append(schemas.BlockedUserRead(
            id=edge.id,
            blocked_user_id=edge.blocked_id,
            created_at=edge.created_at,
            blocked_user_info=schemas.BlockedUserInfo(**user_info),
        ))
    return response

def _either_way(a: int, b: int):
    return or_(
        and_(models.BlockEdge.blocker_id == a, models.BlockEdge.blocked_id == b),
        and_(models.BlockEdge.blocker_id == b, models.BlockEdge.blocked_id == a),
    )

async def is_blocked_either_way(db: AsyncSession, a: int, b: int) -> bool:
    result = await db.execute(select(models.BlockEdge.id).where(_either_way(a, b)).limit(1))
    return result.first() is not None

async def blocked_user_ids(db: AsyncSession, viewer_id: int, among: Iterable[int]) -> Set[int]:
    """Users in ``among`` that the viewer blocked or that blocked the viewer."""
    ids = set(among)
    ids.discard(viewer_id)
    if not ids:
        return set()

    outgoing = await db.execute(
        select(models.BlockEdge.blocked_id).where(
            models.BlockEdge.blocker_id == viewer_id,
            models.BlockEdge.blocked_id.in_(ids),
        )
    )
    incoming = await db.execute(
        select(models.BlockEdge.blocker_id).where(
            models.BlockEdge.blocked_id == viewer_id,
            models.BlockEdge.blocker_id.in_(ids),
        )
    )
    return set(outgoing.scalars().all()) | set(incoming.scalars().all())
