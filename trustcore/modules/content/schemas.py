from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from trustcore.modules.moderation.schemas import ModerationAction

class PostCreate(BaseModel):
    content: str

class CommentCreate(BaseModel):
    content: str

class PostRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    university_id: Optional[int] = None
    content: str
    flagged: bool
    moderation_action: Optional[str] = None
    created_at: datetime

class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    user_id: int
    content: str
    flagged: bool
    moderation_action: Optional[str] = None
    created_at: datetime

class ModerationSummary(BaseModel):
    action: ModerationAction
    flagged: bool
    violations: List[str]

class SubmissionResult(BaseModel):
    status: str # published | pending_review | rejected
    id: int
    moderation: ModerationSummary

class ReactionResult(BaseModel):
    reacted: bool

class PostPage(BaseModel):
    data: List[PostRead]
    total_count: int
    has_more: bool

class CommentPage(BaseModel):
    data: List[CommentRead]
    total_count: int
    has_more: bool
