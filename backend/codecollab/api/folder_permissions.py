from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.collaboration.permissions import resolve_folder_edit_permission
from codecollab.core.error_handlers import PermissionDeniedError, ValidationException
from codecollab.db.database import get_db
from codecollab.models import FolderPermission
from codecollab.schemas import FolderAccessResponse, FolderPermissionResponse, GrantRequest, SuccessResponse
from codecollab.services.access_service import (
    get_folder_grant,
    get_folder_or_404,
    get_membership,
    get_project_role,
    require_permission_manager,
)

router = APIRouter(prefix="/folder-permissions", tags=["permissions"])


@router.get("/{folder_id}", response_model=List[FolderPermissionResponse])
async def list_folder_permissions(
    folder_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    folder = get_folder_or_404(db, folder_id)
    is_owner, role = get_project_role(db, folder.project, user_id)
    if not is_owner and role is None:
        raise PermissionDeniedError("Access denied")

    return db.query(FolderPermission).filter(FolderPermission.folder_id == folder.id).all()


@router.post("/{folder_id}/grant", response_model=FolderPermissionResponse)
async def grant_folder_permission(
    folder_id: str,
    body: GrantRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create or replace a member's grant on a folder (owner or ADMIN)
    """
    folder = get_folder_or_404(db, folder_id)
    require_permission_manager(db, folder.project, user_id, "Only project owner or admin can grant folder permissions")
    if get_membership(db, folder.project_id, body.user_id) is None:
        raise ValidationException("User is not a member of this project")

    permission = get_folder_grant(db, folder.id, body.user_id)
    if permission is None:
        permission = FolderPermission(folder_id=folder.id, user_id=body.user_id)
        db.add(permission)
    permission.can_edit = bool(body.can_edit)
    permission.can_delete = bool(body.can_delete)
    db.commit()
    db.refresh(permission)
    return permission


@router.delete("/{folder_id}/revoke/{target_user_id}", response_model=SuccessResponse)
async def revoke_folder_permission(
    folder_id: str,
    target_user_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    folder = get_folder_or_404(db, folder_id)
    require_permission_manager(db, folder.project, user_id, "Only project owner or admin can revoke permissions")

    db.query(FolderPermission).filter(
        FolderPermission.folder_id == folder.id,
        FolderPermission.user_id == target_user_id,
    ).delete(synchronize_session=False)
    db.commit()
    return SuccessResponse()


@router.get("/{folder_id}/can-edit", response_model=FolderAccessResponse)
async def can_edit_folder(
    folder_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    folder = get_folder_or_404(db, folder_id)
    is_owner, role = get_project_role(db, folder.project, user_id)
    grant = get_folder_grant(db, folder.id, user_id)
    return FolderAccessResponse(
        can_edit=resolve_folder_edit_permission(is_owner, role, grant.to_grant() if grant else None),
        is_owner=is_owner,
        role=role,
    )
