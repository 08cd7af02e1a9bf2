from typing import Dict, Iterable, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from trustcore.modules.users.models import User, University

async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)

async def get_display_info(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, dict]:
    """username + university name per user, resolved at read time."""
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(User.id, User.username, University.name)
        .outerjoin(University, User.university_id == University.id)
        .where(User.id.in_(ids))
    )
    return {
        user_id: {"username": username, "university_name": university_name}
        for user_id, username, university_name in result.all()
    }
