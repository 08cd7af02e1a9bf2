from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from trustcore.modules.admin.models import AuditLog

async def create_audit_log(
    db: AsyncSession,
    action: str,
    user_id: Optional[int] = None,
    target_type: Optional[str] = None,
    target_id: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    # Part of the caller's unit of work: the entry is written only if the
    # enforcement action it describes commits.
    log = AuditLog(
        user_id=user_id,
        action=action,
        target_type=target_type,
        target_id=str(target_id) if target_id is not None else None,
        metadata_json=metadata,
    )
    db.add(log)
    await db.flush()
    return log

async def get_audit_logs(db: AsyncSession, limit: int = 50):
    result = await db.execute(
        select(AuditLog).order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit)
    )
    return result.scalars().all()
