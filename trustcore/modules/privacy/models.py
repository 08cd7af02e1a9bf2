import enum
from sqlalchemy import Column, Integer, DateTime, Enum, ForeignKey
from trustcore.core.db import Base, utcnow

class ProfileVisibility(str, enum.Enum):
    EVERYONE = "everyone"
    UNIVERSITY = "university"
    NOBODY = "nobody"

class EngagementAudience(str, enum.Enum):
    EVERYONE = "everyone"
    UNIVERSITY = "university"

# Applied when a user never saved settings.
DEFAULT_PROFILE_VISIBILITY = ProfileVisibility.UNIVERSITY
DEFAULT_WHO_CAN_REACT = EngagementAudience.EVERYONE
DEFAULT_WHO_CAN_COMMENT = EngagementAudience.EVERYONE

class PrivacySettings(Base):
    __tablename__ = "privacy_settings"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    profile_visibility = Column(Enum(ProfileVisibility), default=DEFAULT_PROFILE_VISIBILITY, nullable=False)
    who_can_react = Column(Enum(EngagementAudience), default=DEFAULT_WHO_CAN_REACT, nullable=False)
    who_can_comment = Column(Enum(EngagementAudience), default=DEFAULT_WHO_CAN_COMMENT, nullable=False)

    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
