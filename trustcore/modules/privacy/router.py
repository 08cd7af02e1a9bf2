from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import get_db
from trustcore.core import deps
from trustcore.modules.users.models import User
from trustcore.modules.privacy import schemas, service

router = APIRouter()

@router.get("", response_model=schemas.PrivacySettingsRead)
async def read_privacy_settings(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.get_privacy_settings(db, current_user.id)

@router.patch("", response_model=schemas.PrivacySettingsRead)
async def update_privacy_settings(
    settings_in: schemas.PrivacySettingsUpdate,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    return await service.update_privacy_settings(db, current_user.id, settings_in)
