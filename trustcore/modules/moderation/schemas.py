import enum
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt

class ModerationAction(str, enum.Enum):
    APPROVED = "approved"
    REMOVED = "removed"
    MANUAL_REVIEW = "manual_review"

class ModerationResult(BaseModel):
    """Classifier verdict. Parsed from the camelCase wire shape, also
    constructible by field name."""
    model_config = ConfigDict(populate_by_name=True)

    content_id: Optional[int] = Field(None, alias="contentId")
    approved: bool
    flagged: bool
    action: ModerationAction
    violations: List[str] = Field(default_factory=list)
    should_ban_user: Optional[bool] = Field(None, alias="shouldBanUser")
    # None with should_ban_user=True means permanent
    ban_duration: Optional[PositiveInt] = Field(None, alias="banDuration")
    # Set by the engine when the safe default replaced the classifier verdict
    used_fallback: bool = Field(False, exclude=True)

class ModerationLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content_type: str
    content_id: int
    user_id: int
    flagged: bool
    action: str
    violations: List[str]
    used_fallback: bool
    processed_at: datetime
