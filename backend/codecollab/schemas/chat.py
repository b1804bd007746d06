"""
Pydantic schemas for project chat
"""

from datetime import datetime
from typing import Optional
from pydantic import Field, StrictBool

from codecollab.schemas.common import CamelModel, NonBlankStr


class ChatMessageCreate(CamelModel):
    project_id: str = Field(..., min_length=1)
    message: NonBlankStr
    reply_to_id: Optional[str] = None
    audio_data: Optional[str] = None


class ChatAuthor(CamelModel):
    id: str
    name: str
    avatar: Optional[str] = None


class ReplyPreview(CamelModel):
    id: str
    message: str
    user_name: str


class ChatMessageResponse(CamelModel):
    id: str
    project_id: str
    user_id: str
    message: str
    audio_data: Optional[str] = None
    is_pinned: bool = False
    reply_to_id: Optional[str] = None
    created_at: datetime
    user: ChatAuthor
    reply_to: Optional[ReplyPreview] = None


class PinRequest(CamelModel):
    is_pinned: StrictBool


class PinResponse(CamelModel):
    success: bool = True
    message_id: str
    is_pinned: bool
    message: str


class DeleteMessageResponse(CamelModel):
    success: bool = True
    message_id: str
