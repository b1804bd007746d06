"""
Authorization rules for collaborative documents.
"""

from .permissions import (
    AccessDecision,
    DenialReason,
    Grant,
    PermissionContext,
    ProjectRole,
    can_manage_permissions,
    can_manage_structure,
    evaluate_document_access,
    resolve_edit_permission,
    resolve_folder_edit_permission,
    resolve_view_permission,
)

__all__ = [
    "AccessDecision",
    "DenialReason",
    "Grant",
    "PermissionContext",
    "ProjectRole",
    "can_manage_permissions",
    "can_manage_structure",
    "evaluate_document_access",
    "resolve_edit_permission",
    "resolve_folder_edit_permission",
    "resolve_view_permission",
]
