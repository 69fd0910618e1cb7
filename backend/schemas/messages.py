from datetime import datetime
from typing import Literal, Optional

from schemas.common import ApiModel


class DirectMessageInput(ApiModel):
    to_session_id: int
    content: str


class DirectMessageOut(ApiModel):
    id: int
    content: str
    from_session_id: int
    to_session_id: int
    status: Literal["pending", "approved", "rejected"]
    admin_note: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class DirectMessageReview(ApiModel):
    admin_note: Optional[str] = None


class ChatRoomOut(ApiModel):
    id: int
    name: str
    college_code: str
    is_active: bool
    max_participants: int
    online: int = 0


class ChatMessageInput(ApiModel):
    content: str
    nickname: Optional[str] = None
    is_public: bool = True


class ChatMessageOut(ApiModel):
    id: int
    content: str
    room_id: int
    session_id: Optional[int] = None
    nickname: Optional[str] = None
    is_public: bool
    created_at: datetime
