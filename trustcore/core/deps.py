from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from trustcore.core.config import settings
from trustcore.core.db import get_db
from trustcore.core import security
from trustcore.core.errors import AuthError, PolicyViolation
from trustcore.modules.users.models import User, UserRole
from trustcore.modules.users.schemas import TokenData

# auto_error=False so a missing header goes through our AuthError (401 with our envelope)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)

async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    if not token:
        raise AuthError("Missing authorization header")

    try:
        payload = security.decode_access_token(token)
        subject = payload.get("sub")
        if subject is None:
            raise AuthError("Invalid or expired token")
        token_data = TokenData(id=int(subject))
    except (JWTError, ValueError):
        raise AuthError("Invalid or expired token")

    user = await db.get(User, token_data.id)
    if user is None or not user.is_active:
        raise AuthError("Invalid or expired token")
    return user

async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    if current_user.role != UserRole.ADMIN:
        raise PolicyViolation("Admin only")
    return current_user
