from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import JSONB

from trustcore.core.db import Base, utcnow

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True) # None for automated enforcement

    action = Column(String, nullable=False, index=True) # e.g. "moderation.ban.create", "report.review.dismissed"
    target_type = Column(String, nullable=True) # e.g. "user", "report", "ban"
    target_id = Column(String, nullable=True)

    metadata_json = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
