from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from trustcore.core.db import get_db
from trustcore.core import deps
from trustcore.modules.users.models import User
from trustcore.modules.blocks import schemas, service

router = APIRouter()

@router.get("", response_model=schemas.BlockedUserList)
async def list_blocked(
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    blocked = await service.list_blocked_users(db, current_user.id)
    return {"data": blocked, "count": len(blocked)}

@router.put("/{user_id}", response_model=schemas.BlockResult)
async def block(
    user_id: int,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    created = await service.block_user(db, current_user.id, user_id)
    return {"message": "User blocked" if created else "User is already blocked"}

@router.delete("/{user_id}", response_model=schemas.BlockResult)
async def unblock(
    user_id: int,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_db)
) -> Any:
    await service.unblock_user(db, current_user.id, user_id)
    return {"message": "User unblocked"}
