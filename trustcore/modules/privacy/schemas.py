from typing import Optional
from pydantic import BaseModel, ConfigDict
from trustcore.modules.privacy.models import (
    ProfileVisibility,
    EngagementAudience,
    DEFAULT_PROFILE_VISIBILITY,
    DEFAULT_WHO_CAN_REACT,
    DEFAULT_WHO_CAN_COMMENT,
)

class PrivacySettingsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    profile_visibility: ProfileVisibility = DEFAULT_PROFILE_VISIBILITY
    who_can_react: EngagementAudience = DEFAULT_WHO_CAN_REACT
    who_can_comment: EngagementAudience = DEFAULT_WHO_CAN_COMMENT

class PrivacySettingsUpdate(BaseModel):
    profile_visibility: Optional[ProfileVisibility] = None
    who_can_react: Optional[EngagementAudience] = None
    who_can_comment: Optional[EngagementAudience] = None
