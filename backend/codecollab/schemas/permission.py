"""
Pydantic schemas for document and folder grants
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import Field

from codecollab.collaboration.permissions import ProjectRole
from codecollab.schemas.common import CamelModel
from codecollab.schemas.user import UserSummary

ResourceType = Literal["folder", "document"]


class GrantRequest(CamelModel):
    """Grant on a single document or folder; missing flags default to False"""
    user_id: str = Field(..., min_length=1)
    can_edit: Optional[bool] = None
    can_delete: Optional[bool] = None


class DocumentPermissionResponse(CamelModel):
    id: str
    document_id: str
    user_id: str
    can_edit: bool
    can_delete: bool
    created_at: datetime
    user: UserSummary


class FolderPermissionResponse(CamelModel):
    id: str
    folder_id: str
    user_id: str
    can_edit: bool
    can_delete: bool
    created_at: datetime
    user: UserSummary


class DocumentAccessResponse(CamelModel):
    can_edit: bool
    can_view: bool
    is_owner: bool
    role: Optional[ProjectRole] = None
    reason: Optional[str] = None


class FolderAccessResponse(CamelModel):
    can_edit: bool
    is_owner: bool
    role: Optional[ProjectRole] = None


class MemberGrantRequest(CamelModel):
    """Grant issued from the member screen; can_edit defaults to True here"""
    user_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    type: ResourceType
    resource_id: str = Field(..., min_length=1)
    can_edit: Optional[bool] = None
    can_delete: Optional[bool] = None


class MemberPermissionUpdate(CamelModel):
    type: ResourceType
    can_edit: Optional[bool] = None
    can_delete: Optional[bool] = None


class MemberPermissionEntry(CamelModel):
    id: str
    type: ResourceType
    resource_id: str
    resource_name: Optional[str] = None
    can_edit: bool
    can_delete: bool
