from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from codecollab.collaboration.permissions import Grant
from codecollab.db.database import Base
from codecollab.models.base import TimestampMixin, id_column, utcnow


class Folder(TimestampMixin, Base):
    """SQLAlchemy model for folders; folders nest through parent_id"""
    __tablename__ = "folders"

    id = id_column()
    name = Column(String(255), nullable=False)
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_id = Column(String(36), ForeignKey("folders.id", ondelete="CASCADE"), nullable=True, index=True)

    project = relationship("Project", back_populates="folders")
    parent = relationship("Folder", remote_side=[id], back_populates="children")
    children = relationship("Folder", back_populates="parent", cascade="all, delete-orphan")
    documents = relationship("Document", back_populates="folder", cascade="all, delete-orphan")
    permissions = relationship("FolderPermission", back_populates="folder", cascade="all, delete-orphan")


class Document(TimestampMixin, Base):
    """SQLAlchemy model for documents; a document without folder is a root document"""
    __tablename__ = "documents"

    id = id_column()
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    folder_id = Column(String(36), ForeignKey("folders.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    language = Column(String(50), default="javascript", nullable=False)
    content = Column(Text, nullable=True)

    project = relationship("Project", back_populates="documents")
    folder = relationship("Folder", back_populates="documents")
    permissions = relationship("DocumentPermission", back_populates="document", cascade="all, delete-orphan")


class _GrantMixin:
    can_edit = Column(Boolean, default=False, nullable=False)
    can_delete = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def to_grant(self) -> Grant:
        return Grant(can_edit=bool(self.can_edit), can_delete=bool(self.can_delete))


class FolderPermission(_GrantMixin, Base):
    __tablename__ = "folder_permissions"
    __table_args__ = (UniqueConstraint("folder_id", "user_id", name="uq_folder_permissions_folder_user"),)

    id = id_column()
    folder_id = Column(String(36), ForeignKey("folders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    folder = relationship("Folder", back_populates="permissions")
    user = relationship("User")


class DocumentPermission(_GrantMixin, Base):
    __tablename__ = "document_permissions"
    __table_args__ = (UniqueConstraint("document_id", "user_id", name="uq_document_permissions_document_user"),)

    id = id_column()
    document_id = Column(String(36), ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    document = relationship("Document", back_populates="permissions")
    user = relationship("User")
