from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python. Reads ORM rows directly."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SessionOut(ApiModel):
    id: int
    token: str
    user_id: Optional[int] = None
    college_code: Optional[str] = None
    nickname: Optional[str] = None
    daily_confession_count: int
    last_reset_date: str


class SessionResponse(ApiModel):
    session: SessionOut
    is_new: bool


class SessionUpdateInput(ApiModel):
    nickname: Optional[str] = None
    college_code: Optional[str] = None


class DailyLimitResponse(ApiModel):
    used: int
    limit: int
    remaining: int


class CollegeOut(ApiModel):
    id: int
    name: str
    code: str
    is_active: bool


class CollegeInput(ApiModel):
    name: str
    code: str


class ConfessionInput(ApiModel):
    content: str
    category: str
    college_code: str
    nickname: Optional[str] = None


class ConfessionOut(ApiModel):
    id: int
    content: str
    category: str
    college_code: str
    nickname: Optional[str] = None
    is_approved: bool
    likes: int
    comment_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None


class ConfessionCreatedResponse(ConfessionOut):
    remaining_today: int


class CommentInput(ApiModel):
    content: str
    nickname: Optional[str] = None


class CommentOut(ApiModel):
    id: int
    content: str
    confession_id: int
    nickname: Optional[str] = None
    is_approved: bool
    created_at: datetime


class LikeResponse(ApiModel):
    action: str
    likes: int


class SuccessResponse(ApiModel):
    success: bool
    message: Optional[str] = None


class PendingOverview(ApiModel):
    confessions: int
    comments: int
    direct_messages: Optional[int] = None
