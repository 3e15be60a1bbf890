from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

VIDEO_CALL_MARKER = "__VIDEO_CALL_STARTED__"

class MessageCreate(BaseModel):
    receiver_id: UUID
    message: str = Field(min_length=1, max_length=5000)

class MessageResponse(BaseModel):
    id: UUID
    sender_id: UUID
    receiver_id: UUID
    sender_type: str
    message: str
    read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True

class UnreadCountResponse(BaseModel):
    unread: int

class VideoCallRequest(BaseModel):
    participant_id: UUID

class VideoRoom(BaseModel):
    room_name: str
    url: str
