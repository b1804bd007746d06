from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.collaboration.permissions import ProjectRole, can_manage_permissions
from codecollab.core.config import get_settings
from codecollab.core.error_handlers import NotFoundError, PermissionDeniedError
from codecollab.db.database import get_db
from codecollab.models import ChatMessage
from codecollab.schemas import ChatMessageCreate, ChatMessageResponse, PinRequest, PinResponse
from codecollab.schemas.chat import ChatAuthor, DeleteMessageResponse, ReplyPreview
from codecollab.services.access_service import get_project_role, require_project_access

router = APIRouter(prefix="/chat", tags=["chat"])


def serialize_message(message: ChatMessage) -> ChatMessageResponse:
    reply_to = None
    if message.reply_to is not None:
        reply_to = ReplyPreview(
            id=message.reply_to.id,
            message=message.reply_to.message,
            user_name=message.reply_to.user.name,
        )
    return ChatMessageResponse(
        id=message.id,
        project_id=message.project_id,
        user_id=message.user_id,
        message=message.message,
        audio_data=message.audio_data,
        is_pinned=message.is_pinned,
        reply_to_id=message.reply_to_id,
        created_at=message.created_at,
        user=ChatAuthor.model_validate(message.user),
        reply_to=reply_to,
    )


def _get_message_or_404(db: Session, message_id: str) -> ChatMessage:
    message = db.get(ChatMessage, message_id)
    if message is None:
        raise NotFoundError("Message not found")
    return message


@router.get("/project/{project_id}", response_model=List[ChatMessageResponse])
async def get_chat_history(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    The most recent messages of a project, oldest first
    """
    project = require_project_access(db, project_id, user_id)
    recent = (
        db.query(ChatMessage)
        .filter(ChatMessage.project_id == project.id)
        .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
        .limit(get_settings().chat_history_limit)
        .all()
    )
    return [serialize_message(message) for message in reversed(recent)]


@router.post("", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    body: ChatMessageCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    project = require_project_access(db, body.project_id, user_id)

    reply_to_id = None
    if body.reply_to_id:
        parent = db.get(ChatMessage, body.reply_to_id)
        if parent is not None and parent.project_id == project.id:
            reply_to_id = parent.id

    message = ChatMessage(
        project_id=project.id,
        user_id=user_id,
        message=body.message,
        audio_data=body.audio_data,
        reply_to_id=reply_to_id,
    )
    db.add(message)
    db.commit()
    db.refresh(message)
    return serialize_message(message)


@router.put("/{message_id}/pin", response_model=PinResponse)
async def pin_message(
    message_id: str,
    body: PinRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Pin or unpin a message (project owner or ADMIN)
    """
    message = _get_message_or_404(db, message_id)
    is_owner, role = get_project_role(db, message.project, user_id)
    if not can_manage_permissions(is_owner, role):
        raise PermissionDeniedError("Only project owner or admin can pin messages")

    message.is_pinned = body.is_pinned
    db.commit()
    return PinResponse(
        message_id=message.id,
        is_pinned=body.is_pinned,
        message="Message pinned" if body.is_pinned else "Message unpinned",
    )


@router.delete("/{message_id}", response_model=DeleteMessageResponse)
async def delete_message(
    message_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a message; allowed for its author, the project owner and ADMINs
    """
    message = _get_message_or_404(db, message_id)
    is_owner, role = get_project_role(db, message.project, user_id)
    if message.user_id != user_id and not is_owner and role != ProjectRole.ADMIN:
        raise PermissionDeniedError("You can only delete your own messages")

    db.delete(message)
    db.commit()
    return DeleteMessageResponse(message_id=message_id)
