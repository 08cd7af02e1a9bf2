from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict
from trustcore.modules.bans.models import BanType

class BanRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    ban_type: BanType
    ban_duration_days: Optional[int] = None
    expires_at: Optional[datetime] = None
    reason: str
    is_active: bool
    created_by: Optional[int] = None
    created_at: datetime

class BanStatus(BaseModel):
    is_banned: bool
    ban_type: Optional[BanType] = None
    expires_at: Optional[datetime] = None
