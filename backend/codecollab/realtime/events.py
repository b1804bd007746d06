"""
Realtime event names and inbound payload models.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from loguru import logger


class ClientEvent:
    """Events sent by clients."""
    JOIN_DOCUMENT = "join-document"
    LEAVE_DOCUMENT = "leave-document"
    JOIN_PROJECT_CHAT = "join-project-chat"
    SEND_CHAT_MESSAGE = "send-chat-message"
    CODE_CHANGE = "code-change"
    CURSOR_CHANGE = "cursor-change"


class ServerEvent:
    """Events emitted by the server."""
    USER_JOINED = "user-joined"
    USERS_IN_DOCUMENT = "users-in-document"
    CODE_UPDATE = "code-update"
    CURSOR_UPDATE = "cursor-update"
    NEW_CHAT_MESSAGE = "new-chat-message"
    USER_LEFT = "user-left"


class InboundPayload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class JoinDocumentPayload(InboundPayload):
    document_id: str = Field(..., min_length=1)
    user_id: Any = None
    user_name: Any = None


class LeaveDocumentPayload(InboundPayload):
    document_id: str = Field(..., min_length=1)


class JoinProjectPayload(InboundPayload):
    project_id: str = Field(..., min_length=1)


class ChatMessagePayload(InboundPayload):
    project_id: str = Field(..., min_length=1)
    message: Any = Field(...)


class CodeChangePayload(InboundPayload):
    document_id: str = Field(..., min_length=1)
    code: str
    user_id: Any = None


class CursorChangePayload(InboundPayload):
    document_id: str = Field(..., min_length=1)
    position: Any = Field(...)
    user_id: Any = None
    user_name: Any = None


def parse_payload(model, event: str, sid: str, data: Any):
    """
    Validate an inbound payload; returns None for malformed data
    """
    if not isinstance(data, dict):
        logger.debug(f"Dropping {event} from {sid}: payload is not an object")
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug(f"Dropping {event} from {sid}: {e.error_count()} validation error(s)")
        return None


def parse_project_id(sid: str, data: Any) -> Optional[str]:
    """join-project-chat accepts a bare project id or ``{"projectId": ...}``"""
    if isinstance(data, str):
        return data or None
    payload = parse_payload(JoinProjectPayload, ClientEvent.JOIN_PROJECT_CHAT, sid, data)
    return payload.project_id if payload else None
