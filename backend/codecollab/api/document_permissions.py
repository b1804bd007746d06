from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.core.error_handlers import PermissionDeniedError, ValidationException
from codecollab.db.database import get_db
from codecollab.models import DocumentPermission
from codecollab.schemas import DocumentAccessResponse, DocumentPermissionResponse, GrantRequest, SuccessResponse
from codecollab.services.access_service import (
    check_document_access,
    get_document_grant,
    get_document_or_404,
    get_membership,
    get_project_role,
    require_permission_manager,
)

router = APIRouter(prefix="/document-permissions", tags=["permissions"])


@router.get("/{document_id}", response_model=List[DocumentPermissionResponse])
async def list_document_permissions(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    document = get_document_or_404(db, document_id)
    is_owner, role = get_project_role(db, document.project, user_id)
    if not is_owner and role is None:
        raise PermissionDeniedError("Access denied")

    return db.query(DocumentPermission).filter(DocumentPermission.document_id == document.id).all()


@router.post("/{document_id}/grant", response_model=DocumentPermissionResponse)
async def grant_document_permission(
    document_id: str,
    body: GrantRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create or replace a member's grant on a document (owner or ADMIN)
    """
    document = get_document_or_404(db, document_id)
    require_permission_manager(
        db, document.project, user_id, "Only project owner or admin can grant document permissions"
    )
    if get_membership(db, document.project_id, body.user_id) is None:
        raise ValidationException("User is not a member of this project")

    permission = get_document_grant(db, document.id, body.user_id)
    if permission is None:
        permission = DocumentPermission(document_id=document.id, user_id=body.user_id)
        db.add(permission)
    permission.can_edit = bool(body.can_edit)
    permission.can_delete = bool(body.can_delete)
    db.commit()
    db.refresh(permission)
    return permission


@router.delete("/{document_id}/revoke/{target_user_id}", response_model=SuccessResponse)
async def revoke_document_permission(
    document_id: str,
    target_user_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    document = get_document_or_404(db, document_id)
    require_permission_manager(db, document.project, user_id, "Only project owner or admin can revoke permissions")

    db.query(DocumentPermission).filter(
        DocumentPermission.document_id == document.id,
        DocumentPermission.user_id == target_user_id,
    ).delete(synchronize_session=False)
    db.commit()
    return SuccessResponse()


@router.get("/{document_id}/can-edit", response_model=DocumentAccessResponse)
async def can_edit_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Whether the caller may edit the document, and why not if denied
    """
    ctx, decision = check_document_access(db, document_id, user_id)
    return DocumentAccessResponse(
        can_edit=decision.can_edit,
        can_view=decision.can_view,
        is_owner=ctx.is_owner,
        role=ctx.member_role,
        reason=decision.reason.value if decision.reason else None,
    )
