import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum, ForeignKey, and_, or_
from sqlalchemy.ext.hybrid import hybrid_method
from trustcore.core.db import Base, utcnow, as_utc

class BanType(str, enum.Enum):
    SHADOW_BAN = "shadow_ban"
    PERMANENT_BAN = "permanent_ban"

class Ban(Base):
    __tablename__ = "user_bans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    ban_type = Column(Enum(BanType), nullable=False)
    ban_duration_days = Column(Integer, nullable=True) # None = permanent
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    reason = Column(String, nullable=False)

    # Never flipped by expiry; see in_effect().
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True) # None = automated

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @hybrid_method
    def in_effect(self, now: datetime) -> bool:
        """The one definition of "currently banned"."""
        if not self.is_active:
            return False
        expires_at = as_utc(self.expires_at)
        return expires_at is None or expires_at > now

    @in_effect.expression
    def in_effect(cls, now: datetime):
        return and_(
            cls.is_active.is_(True),
            or_(cls.expires_at.is_(None), cls.expires_at > now),
        )
