import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import utcnow
from trustcore.core.errors import NotFound, ValidationError, store_errors
from trustcore.modules.bans.models import Ban, BanType
from trustcore.modules.admin import service as admin_service

logger = logging.getLogger(__name__)

async def record_ban(
    db: AsyncSession,
    user_id: int,
    ban_duration_days: Optional[int],
    reason: str,
    created_by: Optional[int] = None,
) -> Ban:
    """Materialise a ban from an escalation signal.

    ``ban_duration_days=None`` means permanent. Joins the caller's
    transaction: nothing is committed here.
    """
    if ban_duration_days is not None and ban_duration_days <= 0:
        raise ValidationError("Ban duration must be a positive number of days")

    now = utcnow()
    ban = Ban(
        user_id=user_id,
        ban_type=BanType.PERMANENT_BAN if ban_duration_days is None else BanType.SHADOW_BAN,
        ban_duration_days=ban_duration_days,
        expires_at=None if ban_duration_days is None else now + timedelta(days=ban_duration_days),
        reason=reason,
        is_active=True,
        created_by=created_by,
        created_at=now,
    )
    db.add(ban)
    await db.flush()

    await admin_service.create_audit_log(
        db,
        action="moderation.ban.create",
        user_id=created_by,
        target_type="user",
        target_id=user_id,
        metadata={
            "ban_id": ban.id,
            "ban_type": ban.ban_type.value,
            "ban_duration_days": ban_duration_days,
            "reason": reason,
        },
    )
    logger.warning(f"[Bans] {ban.ban_type.value} recorded for user {user_id} (days={ban_duration_days}): {reason}")
    return ban

async def lift_ban(db: AsyncSession, ban_id: int, admin_id: int) -> Ban:
    with store_errors("lift ban", actor_id=admin_id, content_type="ban", content_id=ban_id):
        ban = await db.get(Ban, ban_id)
        if not ban:
            raise NotFound("Ban not found")

        ban.is_active = False
        await admin_service.create_audit_log(
            db,
            action="moderation.ban.lift",
            user_id=admin_id,
            target_type="ban",
            target_id=ban.id,
            metadata={"user_id": ban.user_id},
        )
        await db.commit()

    logger.info(f"[Bans] Ban {ban_id} on user {ban.user_id} lifted by {admin_id}")
    return ban

async def list_bans(db: AsyncSession, user_id: int) -> List[Ban]:
    with store_errors("list bans", content_type="user", content_id=user_id):
        result = await db.execute(
            select(Ban).where(Ban.user_id == user_id).order_by(Ban.created_at.desc(), Ban.id.desc())
        )
        return list(result.scalars().all())
