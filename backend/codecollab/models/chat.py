from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from codecollab.db.database import Base
from codecollab.models.base import id_column, utcnow


class ChatMessage(Base):
    """Project chat message, optionally a reply to another message"""
    __tablename__ = "chat_messages"

    id = id_column()
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    audio_data = Column(Text, nullable=True)
    is_pinned = Column(Boolean, default=False, nullable=False)
    reply_to_id = Column(String(36), ForeignKey("chat_messages.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    project = relationship("Project", back_populates="chat_messages")
    user = relationship("User")
    reply_to = relationship("ChatMessage", remote_side=[id])
