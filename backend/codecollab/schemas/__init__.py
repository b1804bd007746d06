"""
Pydantic schemas for request/response models
"""

from .common import CamelModel, SuccessResponse
from .user import (
    UserSummary, UserResponse, GoogleLoginRequest, AuthResponse,
    RefreshRequest, RefreshResponse, LogoutRequest
)
from .document import (
    DocumentCreate, DocumentRename, DocumentMove, DocumentContentUpdate,
    DocumentResponse, FolderCreate, FolderRename, FolderResponse, FolderTreeResponse
)
from .project import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectDetailResponse,
    MemberResponse, MemberListResponse, RoleUpdate, InvitationCreate,
    InvitationCreatedResponse, InvitationResponse, PendingInvitationResponse,
    InvitationAcceptResponse
)
from .chat import ChatMessageCreate, ChatMessageResponse, PinRequest, PinResponse
from .permission import (
    GrantRequest, DocumentPermissionResponse, FolderPermissionResponse,
    DocumentAccessResponse, FolderAccessResponse, MemberGrantRequest,
    MemberPermissionUpdate, MemberPermissionEntry
)

__all__ = [
    "CamelModel", "SuccessResponse",
    # User schemas
    "UserSummary", "UserResponse", "GoogleLoginRequest", "AuthResponse",
    "RefreshRequest", "RefreshResponse", "LogoutRequest",
    # Document schemas
    "DocumentCreate", "DocumentRename", "DocumentMove", "DocumentContentUpdate",
    "DocumentResponse", "FolderCreate", "FolderRename", "FolderResponse", "FolderTreeResponse",
    # Project schemas
    "ProjectCreate", "ProjectUpdate", "ProjectResponse", "ProjectDetailResponse",
    "MemberResponse", "MemberListResponse", "RoleUpdate", "InvitationCreate",
    "InvitationCreatedResponse", "InvitationResponse", "PendingInvitationResponse",
    "InvitationAcceptResponse",
    # Chat schemas
    "ChatMessageCreate", "ChatMessageResponse", "PinRequest", "PinResponse",
    # Permission schemas
    "GrantRequest", "DocumentPermissionResponse", "FolderPermissionResponse",
    "DocumentAccessResponse", "FolderAccessResponse", "MemberGrantRequest",
    "MemberPermissionUpdate", "MemberPermissionEntry",
]
