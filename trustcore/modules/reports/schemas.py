from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Any, Optional
from trustcore.modules.reports.models import ReportContentType, ReportStatus

class ReportCreate(BaseModel):
    # Kept loose so the service can reject bad values with its own messages.
    content_type: Any = None
    content_id: Any = None
    reason: Optional[str] = None

class ReportReview(BaseModel):
    status: str # "reviewed" | "dismissed"

class ReportedContentPreview(BaseModel):
    content: str
    author_username: Optional[str] = None
    created_at: Optional[datetime] = None
    is_deleted: bool = False

class ReportRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reporter_id: int
    content_type: ReportContentType
    content_id: int
    reason: str
    status: ReportStatus
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime

class ReportWithContent(ReportRead):
    reported_content: Optional[ReportedContentPreview] = None
