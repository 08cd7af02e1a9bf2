from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

class BlockedUserInfo(BaseModel):
    username: str
    university_name: Optional[str] = None

class BlockedUserRead(BaseModel):
    id: int
    blocked_user_id: int
    created_at: datetime
    blocked_user_info: BlockedUserInfo

class BlockedUserList(BaseModel):
    data: List[BlockedUserRead]
    count: int

class BlockResult(BaseModel):
    success: bool = True
    message: str
