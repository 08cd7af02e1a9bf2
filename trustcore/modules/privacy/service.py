import logging
from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import is_unique_violation
from trustcore.core.errors import ValidationError, store_errors
from trustcore.modules.privacy import models, schemas

logger = logging.getLogger(__name__)

async def get_privacy_settings(db: AsyncSession, user_id: int) -> schemas.PrivacySettingsRead:
    row = await db.get(models.PrivacySettings, user_id)
    if row is None:
        return schemas.PrivacySettingsRead()
    return schemas.PrivacySettingsRead.model_validate(row)

async def get_settings_for_users(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, schemas.PrivacySettingsRead]:
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(models.PrivacySettings).where(models.PrivacySettings.user_id.in_(ids))
    )
    found = {row.user_id: schemas.PrivacySettingsRead.model_validate(row) for row in result.scalars().all()}
    return {user_id: found.get(user_id, schemas.PrivacySettingsRead()) for user_id in ids}

async def update_privacy_settings(
    db: AsyncSession,
    user_id: int,
    update_in: schemas.PrivacySettingsUpdate
) -> schemas.PrivacySettingsRead:
    updates = update_in.model_dump(exclude_none=True)
    if not updates:
        raise ValidationError("At least one privacy setting must be provided")

    with store_errors("update privacy settings", actor_id=user_id, content_type="user", content_id=user_id):
        row = await db.get(models.PrivacySettings, user_id)
        if row is None:
            row = models.PrivacySettings(user_id=user_id, **{**schemas.PrivacySettingsRead().model_dump(), **updates})
            db.add(row)
        else:
            for field, value in updates.items():
                setattr(row, field, value)

        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if not is_unique_violation(e):
                raise
            # First save raced with another request; the row exists now.
            row = await db.get(models.PrivacySettings, user_id)
            for field, value in updates.items():
                setattr(row, field, value)
            await db.commit()

    logger.info(f"[Privacy] User {user_id} updated settings: {updates}")
    return schemas.PrivacySettingsRead.model_validate(row)
