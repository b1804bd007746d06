"""
Document and folder permission resolution.

Pure functions over data already loaded from the store. The edit decision
for a document is evaluated in a fixed order and the first match wins:

1. project owner or ADMIN member
2. explicit document grant with ``can_edit``
3. folder grant with ``can_edit`` when the document lives in a folder
4. root document (no folder): denied, whatever the project role
5. folder document without a usable folder grant: denied

An EDITOR role on its own never grants edit access to a root document.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ProjectRole(str, Enum):
    """Role of a member inside a project. Ownership is tracked separately."""
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


class DenialReason(str, Enum):
    NO_FOLDER_ACCESS = "No folder access granted"
    ROOT_FILE_REQUIRES_PERMISSION = "Root file requires explicit permission"


@dataclass(frozen=True)
class Grant:
    """Explicit per-user permission attached to a document or a folder"""
    can_edit: bool = False
    can_delete: bool = False


@dataclass(frozen=True)
class PermissionContext:
    user_id: str
    document_id: str
    is_owner: bool = False
    member_role: Optional[ProjectRole] = None
    document_grant: Optional[Grant] = None
    folder_grant: Optional[Grant] = None
    folder_id: Optional[str] = None
    is_public: bool = False

    @property
    def is_member(self) -> bool:
        return self.member_role is not None

    @property
    def is_root_document(self) -> bool:
        return self.folder_id is None


@dataclass(frozen=True)
class AccessDecision:
    can_view: bool
    can_edit: bool
    reason: Optional[DenialReason] = None

    def to_dict(self) -> dict:
        body = {"canView": self.can_view, "canEdit": self.can_edit}
        if self.reason is not None:
            body["reason"] = self.reason.value
        return body


def _edit_branch(ctx: PermissionContext) -> Optional[DenialReason]:
    """Walk the decision order; None means allowed."""
    if ctx.is_owner or ctx.member_role == ProjectRole.ADMIN:
        return None
    if ctx.document_grant is not None and ctx.document_grant.can_edit:
        return None
    if not ctx.is_root_document:
        if ctx.folder_grant is not None and ctx.folder_grant.can_edit:
            return None
        return DenialReason.NO_FOLDER_ACCESS
    return DenialReason.ROOT_FILE_REQUIRES_PERMISSION


def resolve_edit_permission(ctx: PermissionContext) -> bool:
    return _edit_branch(ctx) is None


def resolve_view_permission(ctx: PermissionContext) -> bool:
    return ctx.is_owner or ctx.is_member or ctx.is_public


def evaluate_document_access(ctx: PermissionContext) -> AccessDecision:
    """
    Combine the view and edit decisions so callers can tell
    "visible but read-only" apart from "not visible at all".
    """
    reason = _edit_branch(ctx)
    return AccessDecision(
        can_view=resolve_view_permission(ctx),
        can_edit=reason is None,
        reason=reason,
    )


def resolve_folder_edit_permission(
    is_owner: bool,
    member_role: Optional[ProjectRole],
    folder_grant: Optional[Grant] = None,
) -> bool:
    if is_owner or member_role == ProjectRole.ADMIN:
        return True
    return folder_grant is not None and folder_grant.can_edit


def can_manage_structure(is_owner: bool, member_role: Optional[ProjectRole]) -> bool:
    """Create, rename, move and delete documents and folders."""
    return is_owner or member_role in (ProjectRole.ADMIN, ProjectRole.EDITOR)


def can_manage_permissions(is_owner: bool, member_role: Optional[ProjectRole]) -> bool:
    """Grant and revoke document/folder permissions, pin chat messages."""
    return is_owner or member_role == ProjectRole.ADMIN
