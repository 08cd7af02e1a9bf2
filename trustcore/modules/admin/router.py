from typing import Any, List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import get_db
from trustcore.core import deps
from trustcore.core.errors import store_errors
from trustcore.modules.users.models import User
from trustcore.modules.admin import schemas, service

router = APIRouter()

@router.get("/audit-logs", response_model=List[schemas.AuditLogRead])
async def list_audit_logs(
    limit: int = Query(50, ge=1, le=200),
    current_user: User = Depends(deps.get_current_admin),
    db: AsyncSession = Depends(get_db)
) -> Any:
    with store_errors("list audit logs", actor_id=current_user.id):
        return await service.get_audit_logs(db, limit=limit)
