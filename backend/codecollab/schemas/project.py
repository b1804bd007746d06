"""
Pydantic schemas for projects, members and invitations
"""

from datetime import datetime
from typing import List, Optional
from pydantic import EmailStr, Field

from codecollab.collaboration.permissions import ProjectRole
from codecollab.models.project import InvitationStatus
from codecollab.schemas.common import CamelModel, NonBlankStr
from codecollab.schemas.document import DocumentResponse
from codecollab.schemas.user import UserSummary


class ProjectCreate(CamelModel):
    name: NonBlankStr = Field(..., max_length=255)
    description: Optional[str] = None
    is_public: bool = False


class ProjectUpdate(CamelModel):
    """Partial update; omitted fields are left unchanged"""
    name: Optional[NonBlankStr] = Field(None, max_length=255)
    description: Optional[str] = None
    is_public: Optional[bool] = None


class ProjectCounts(CamelModel):
    documents: int = 0
    members: int = 0


class ProjectResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    is_public: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime
    owner: UserSummary
    count: Optional[ProjectCounts] = Field(None, alias="_count")


class ProjectDetailResponse(ProjectResponse):
    documents: List[DocumentResponse] = []


class ProjectInfo(CamelModel):
    id: str
    name: str
    description: Optional[str] = None


class MemberResponse(CamelModel):
    id: str
    project_id: str
    user_id: str
    role: ProjectRole
    joined_at: datetime
    user: UserSummary


class MemberListResponse(CamelModel):
    owner: str
    members: List[MemberResponse]


class RoleUpdate(CamelModel):
    role: str


class InvitationCreate(CamelModel):
    project_id: str = Field(..., min_length=1)
    email: EmailStr
    role: ProjectRole = ProjectRole.EDITOR


class InvitationSummary(CamelModel):
    id: str
    email: str
    project_name: str
    inviter_name: str
    token: str


class InvitationCreatedResponse(CamelModel):
    message: str = "Invitation sent successfully"
    invitation: InvitationSummary


class InviterSummary(CamelModel):
    name: str
    email: str
    avatar: Optional[str] = None


class InvitationResponse(CamelModel):
    id: str
    project_id: str
    email: str
    role: ProjectRole
    status: InvitationStatus
    invited_by: str
    expires_at: datetime
    created_at: datetime
    inviter: InviterSummary


class PendingInvitationResponse(InvitationResponse):
    project: ProjectInfo


class InvitationAcceptResponse(CamelModel):
    message: str = "Invitation accepted successfully"
    project: ProjectInfo
