"""
Per-member view of document and folder grants inside one project
"""
from typing import List, Union

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.core.error_handlers import NotFoundError, ValidationException
from codecollab.db.database import get_db
from codecollab.models import Document, DocumentPermission, Folder, FolderPermission, Project
from codecollab.schemas import (
    MemberGrantRequest, MemberPermissionEntry, MemberPermissionUpdate, SuccessResponse
)
from codecollab.schemas.permission import ResourceType
from codecollab.services.access_service import (
    get_document_grant,
    get_folder_grant,
    get_membership,
    require_permission_manager,
)

router = APIRouter(prefix="/member-permissions", tags=["permissions"])

GrantRow = Union[FolderPermission, DocumentPermission]


def _entry(permission: GrantRow, kind: ResourceType) -> MemberPermissionEntry:
    if kind == "folder":
        resource_id, resource = permission.folder_id, permission.folder
    else:
        resource_id, resource = permission.document_id, permission.document
    return MemberPermissionEntry(
        id=permission.id,
        type=kind,
        resource_id=resource_id,
        resource_name=resource.name if resource is not None else None,
        can_edit=permission.can_edit,
        can_delete=permission.can_delete,
    )


def _get_project_for_manager(db: Session, project_id: str, user_id: str, message: str) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    require_permission_manager(db, project, user_id, message)
    return project


def _load_resource(db: Session, kind: ResourceType, resource_id: str) -> Union[Folder, Document]:
    model = Folder if kind == "folder" else Document
    resource = db.get(model, resource_id)
    if resource is None:
        raise NotFoundError(f"{kind.capitalize()} not found")
    return resource


@router.get("/user/{member_user_id}/project/{project_id}", response_model=List[MemberPermissionEntry])
async def list_member_permissions(
    member_user_id: str,
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Folder grants followed by document grants of one member
    """
    project = _get_project_for_manager(db, project_id, user_id, "Only owner/admin can view member permissions")

    folder_grants = (
        db.query(FolderPermission)
        .join(Folder, FolderPermission.folder_id == Folder.id)
        .filter(FolderPermission.user_id == member_user_id, Folder.project_id == project.id)
        .all()
    )
    document_grants = (
        db.query(DocumentPermission)
        .join(Document, DocumentPermission.document_id == Document.id)
        .filter(DocumentPermission.user_id == member_user_id, Document.project_id == project.id)
        .all()
    )
    return [_entry(p, "folder") for p in folder_grants] + [_entry(p, "document") for p in document_grants]


@router.post("/grant", response_model=MemberPermissionEntry)
async def grant_member_permission(
    body: MemberGrantRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create or update a grant; canEdit defaults to true, canDelete to false
    """
    project = _get_project_for_manager(db, body.project_id, user_id, "Only owner/admin can grant permissions")
    if get_membership(db, project.id, body.user_id) is None:
        raise ValidationException("User is not a member of this project")

    resource = _load_resource(db, body.type, body.resource_id)
    if resource.project_id != project.id:
        raise ValidationException(f"{body.type.capitalize()} does not belong to this project")

    if body.type == "folder":
        permission = get_folder_grant(db, resource.id, body.user_id)
        if permission is None:
            permission = FolderPermission(folder_id=resource.id, user_id=body.user_id)
            db.add(permission)
    else:
        permission = get_document_grant(db, resource.id, body.user_id)
        if permission is None:
            permission = DocumentPermission(document_id=resource.id, user_id=body.user_id)
            db.add(permission)

    permission.can_edit = True if body.can_edit is None else body.can_edit
    permission.can_delete = bool(body.can_delete)
    db.commit()
    db.refresh(permission)
    return _entry(permission, body.type)


@router.put("/{permission_id}", response_model=MemberPermissionEntry)
async def update_member_permission(
    permission_id: str,
    body: MemberPermissionUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Change the flags of an existing grant; omitted flags keep their value
    """
    model = FolderPermission if body.type == "folder" else DocumentPermission
    permission = db.get(model, permission_id)
    if permission is None:
        raise NotFoundError("Permission not found")

    resource = permission.folder if body.type == "folder" else permission.document
    require_permission_manager(db, resource.project, user_id, "Access denied")

    if body.can_edit is not None:
        permission.can_edit = body.can_edit
    if body.can_delete is not None:
        permission.can_delete = body.can_delete
    db.commit()
    db.refresh(permission)
    return _entry(permission, body.type)


@router.delete("/user/{member_user_id}/type/{kind}/resource/{resource_id}", response_model=SuccessResponse)
async def revoke_member_permission(
    member_user_id: str,
    kind: str,
    resource_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    if kind not in ("folder", "document"):
        raise ValidationException("Invalid type")

    resource = _load_resource(db, kind, resource_id)
    require_permission_manager(db, resource.project, user_id, "Access denied")

    if kind == "folder":
        db.query(FolderPermission).filter(
            FolderPermission.folder_id == resource.id, FolderPermission.user_id == member_user_id
        ).delete(synchronize_session=False)
    else:
        db.query(DocumentPermission).filter(
            DocumentPermission.document_id == resource.id, DocumentPermission.user_id == member_user_id
        ).delete(synchronize_session=False)
    db.commit()
    return SuccessResponse()
