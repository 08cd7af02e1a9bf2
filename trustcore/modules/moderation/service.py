import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.config import settings
from trustcore.core.db import utcnow
from trustcore.core.errors import store_errors
from trustcore.modules.bans.models import Ban
from trustcore.modules.bans.schemas import BanStatus
from trustcore.modules.moderation.classifier import ContentClassifier
from trustcore.modules.moderation.models import ModerationLog
from trustcore.modules.moderation.schemas import ModerationAction, ModerationResult

logger = logging.getLogger(__name__)

def safe_default(content_id: Optional[int] = None) -> ModerationResult:
    """Used whenever the classifier cannot give a usable answer: hold the
    content for a human, hide nothing, accuse no one."""
    return ModerationResult(
        content_id=content_id,
        approved=False,
        flagged=False,
        action=ModerationAction.MANUAL_REVIEW,
        violations=[],
        used_fallback=True,
    )

async def moderate(
    classifier: ContentClassifier,
    content: str,
    content_type: str,
    content_id: int,
    user_id: int,
    timeout: Optional[float] = None,
) -> ModerationResult:
    """Always returns a definite decision, never raises."""
    timeout = settings.CLASSIFIER_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        payload = await asyncio.wait_for(
            classifier.submit(content, content_type, content_id, user_id),
            timeout=timeout,
        )
        result = ModerationResult.model_validate(payload)
    except asyncio.TimeoutError:
        logger.warning(f"[Moderation] Classifier timed out after {timeout}s for {content_type} {content_id}, holding for review")
        return safe_default(content_id)
    except Exception as e:
        logger.warning(f"[Moderation] Classifier failed for {content_type} {content_id}, holding for review: {e.__class__.__name__}: {e}")
        return safe_default(content_id)

    updates = {"content_id": content_id, "used_fallback": False}
    if result.action == ModerationAction.REMOVED and not result.flagged:
        updates["flagged"] = True
    result = result.model_copy(update=updates)

    logger.info(
        f"[Moderation] {content_type} {content_id} by {user_id}: action={result.action.value} "
        f"flagged={result.flagged} violations={result.violations}"
    )
    return result

async def record_decision(
    db: AsyncSession,
    result: ModerationResult,
    content_type: str,
    content_id: int,
    user_id: int,
) -> ModerationLog:
    log = ModerationLog(
        content_type=content_type,
        content_id=content_id,
        user_id=user_id,
        flagged=result.flagged,
        action=result.action.value,
        violations=list(result.violations),
        used_fallback=result.used_fallback,
        processed_at=utcnow(),
    )
    db.add(log)
    await db.flush()
    return log

async def check_user_ban_status(db: AsyncSession, user_id: int) -> BanStatus:
    """Derived on every call from the ban rows; nothing is cached."""
    with store_errors("check ban status", actor_id=user_id):
        result = await db.execute(
            select(Ban)
            .where(Ban.user_id == user_id, Ban.in_effect(utcnow()))
            .order_by(Ban.created_at.desc(), Ban.id.desc())
            .limit(1)
        )
        ban = result.scalars().first()

    if ban is None:
        return BanStatus(is_banned=False)
    return BanStatus(is_banned=True, ban_type=ban.ban_type, expires_at=ban.expires_at)

async def list_moderation_logs(db: AsyncSession, user_id: int, limit: int = 50):
    with store_errors("list moderation logs", content_type="user", content_id=user_id):
        result = await db.execute(
            select(ModerationLog)
            .where(ModerationLog.user_id == user_id)
            .order_by(ModerationLog.processed_at.desc(), ModerationLog.id.desc())
            .limit(limit)
        )
        return result.scalars().all()
