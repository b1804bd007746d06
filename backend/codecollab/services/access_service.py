"""
Store lookups feeding the permission rules.

Everything here reads from the database and hands plain values to
``codecollab.collaboration.permissions``; no decision logic lives here.
"""
from typing import Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from codecollab.collaboration.permissions import (
    AccessDecision,
    PermissionContext,
    ProjectRole,
    can_manage_permissions,
    can_manage_structure,
    evaluate_document_access,
)
from codecollab.core.error_handlers import NotFoundError, PermissionDeniedError
from codecollab.models import (
    Document,
    DocumentPermission,
    Folder,
    FolderPermission,
    Project,
    ProjectMember,
)


def get_membership(db: Session, project_id: str, user_id: str) -> Optional[ProjectMember]:
    return (
        db.query(ProjectMember)
        .filter(ProjectMember.project_id == project_id, ProjectMember.user_id == user_id)
        .first()
    )


def get_project_role(db: Session, project: Project, user_id: str) -> Tuple[bool, Optional[ProjectRole]]:
    """Return (is_owner, member_role) of a user in a project"""
    member = get_membership(db, project.id, user_id)
    return project.owner_id == user_id, member.role if member else None


def find_accessible_project(
    db: Session,
    project_id: str,
    user_id: str,
    include_public: bool = True
) -> Optional[Project]:
    """
    Load a project the user owns, belongs to, or (optionally) that is public
    """
    conditions = [
        Project.owner_id == user_id,
        Project.members.any(ProjectMember.user_id == user_id),
    ]
    if include_public:
        conditions.append(Project.is_public.is_(True))
    return db.query(Project).filter(Project.id == project_id, or_(*conditions)).first()


def require_project_access(
    db: Session,
    project_id: str,
    user_id: str,
    include_public: bool = False,
    message: str = "Access denied"
) -> Project:
    project = find_accessible_project(db, project_id, user_id, include_public=include_public)
    if project is None:
        raise PermissionDeniedError(message)
    return project


def require_structure_permission(db: Session, project: Project, user_id: str, message: str) -> None:
    """Owner, ADMIN or EDITOR; raises 403 with ``message`` otherwise"""
    is_owner, role = get_project_role(db, project, user_id)
    if not can_manage_structure(is_owner, role):
        raise PermissionDeniedError(message)


def require_permission_manager(db: Session, project: Project, user_id: str, message: str) -> None:
    """Owner or ADMIN; raises 403 with ``message`` otherwise"""
    is_owner, role = get_project_role(db, project, user_id)
    if not can_manage_permissions(is_owner, role):
        raise PermissionDeniedError(message)


def get_document_or_404(db: Session, document_id: str) -> Document:
    document = db.get(Document, document_id)
    if document is None:
        raise NotFoundError("Document not found")
    return document


def get_folder_or_404(db: Session, folder_id: str) -> Folder:
    folder = db.get(Folder, folder_id)
    if folder is None:
        raise NotFoundError("Folder not found")
    return folder


def get_folder_grant(db: Session, folder_id: str, user_id: str) -> Optional[FolderPermission]:
    return (
        db.query(FolderPermission)
        .filter(FolderPermission.folder_id == folder_id, FolderPermission.user_id == user_id)
        .first()
    )


def get_document_grant(db: Session, document_id: str, user_id: str) -> Optional[DocumentPermission]:
    return (
        db.query(DocumentPermission)
        .filter(DocumentPermission.document_id == document_id, DocumentPermission.user_id == user_id)
        .first()
    )


def load_permission_context(db: Session, document_id: str, user_id: str) -> Optional[PermissionContext]:
    """
    Gather everything the resolver needs for one (document, user) pair

    Returns:
        The context, or None when the document does not exist
    """
    document = db.get(Document, document_id)
    if document is None:
        return None

    project = document.project
    is_owner, role = get_project_role(db, project, user_id)

    document_grant = get_document_grant(db, document.id, user_id)
    folder_grant = None
    if document.folder_id is not None:
        folder_grant = get_folder_grant(db, document.folder_id, user_id)

    return PermissionContext(
        user_id=user_id,
        document_id=document.id,
        is_owner=is_owner,
        member_role=role,
        document_grant=document_grant.to_grant() if document_grant else None,
        folder_grant=folder_grant.to_grant() if folder_grant else None,
        folder_id=document.folder_id,
        is_public=bool(project.is_public),
    )


def check_document_access(db: Session, document_id: str, user_id: str) -> Tuple[PermissionContext, AccessDecision]:
    """Context and decision for a document; 404 when it does not exist"""
    ctx = load_permission_context(db, document_id, user_id)
    if ctx is None:
        raise NotFoundError("Document not found")
    return ctx, evaluate_document_access(ctx)
