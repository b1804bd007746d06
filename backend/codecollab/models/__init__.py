from .user import User, UserRole, AuthSession
from .project import Project, ProjectMember, ProjectInvitation, InvitationStatus
from .document import Folder, Document, FolderPermission, DocumentPermission
from .chat import ChatMessage

__all__ = [
    "User", "UserRole", "AuthSession",
    "Project", "ProjectMember", "ProjectInvitation", "InvitationStatus",
    "Folder", "Document", "FolderPermission", "DocumentPermission",
    "ChatMessage",
]
