import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, UniqueConstraint
from trustcore.core.db import Base, utcnow

class ReportContentType(str, enum.Enum):
    POST = "post"
    COMMENT = "comment"
    USER = "user"

class ReportStatus(str, enum.Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    DISMISSED = "dismissed"

class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        UniqueConstraint("reporter_id", "content_type", "content_id", name="reports_unique_per_user_content"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content_type = Column(Enum(ReportContentType), nullable=False)
    content_id = Column(Integer, nullable=False)

    reason = Column(String(500), nullable=False) # stored trimmed

    # Only status and the reviewer fields ever change after insert.
    status = Column(Enum(ReportStatus), default=ReportStatus.PENDING, nullable=False, index=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
