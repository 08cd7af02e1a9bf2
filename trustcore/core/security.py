from datetime import timedelta
from typing import Any, Optional

from jose import jwt

from trustcore.core.config import settings
from trustcore.core.db import utcnow

def create_access_token(subject: Any, expires_delta: Optional[timedelta] = None) -> str:
    # Sessions are issued by the auth service; this mirrors its token shape
    # for local tooling and tests.
    expire = utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_access_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
