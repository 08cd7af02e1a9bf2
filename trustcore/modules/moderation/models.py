from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON
from trustcore.core.db import Base, utcnow

class ModerationLog(Base):
    __tablename__ = "moderation_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_type = Column(String, nullable=False) # "post" | "comment"
    content_id = Column(Integer, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    flagged = Column(Boolean, nullable=False)
    action = Column(String, nullable=False)
    violations = Column(JSON, nullable=False, default=list)
    used_fallback = Column(Boolean, default=False, nullable=False)

    processed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
