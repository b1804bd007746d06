from typing import List, Optional

from fastapi import APIRouter, Depends, status
from loguru import logger
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.core.config import get_settings
from codecollab.core.error_handlers import PermissionDeniedError, ValidationException
from codecollab.db.database import get_db
from codecollab.models import Document, Folder
from codecollab.schemas import (
    DocumentContentUpdate, DocumentCreate, DocumentMove, DocumentRename,
    DocumentResponse, SuccessResponse
)
from codecollab.services.access_service import (
    check_document_access,
    get_document_or_404,
    require_project_access,
    require_structure_permission,
)

router = APIRouter(prefix="/documents", tags=["documents"])

EDIT_DENIED_MESSAGE = "You do not have permission to edit this document"


def _check_folder(db: Session, folder_id: Optional[str], project_id: str) -> Optional[str]:
    """Folder ids must point at a folder of the same project"""
    if not folder_id:
        return None
    folder = db.get(Folder, folder_id)
    if folder is None or folder.project_id != project_id:
        raise ValidationException("Folder does not belong to this project")
    return folder.id


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a document at the project root or inside a folder
    """
    project = require_project_access(db, body.project_id, user_id)
    require_structure_permission(db, project, user_id, "You do not have permission to create documents")

    document = Document(
        project_id=project.id,
        folder_id=_check_folder(db, body.folder_id, project.id),
        name=body.name,
        language=body.language,
        content=get_settings().default_document_content,
    )
    db.add(document)
    db.commit()
    db.refresh(document)

    logger.info(f"Document {document.id} created in project {project.id}")
    return document


@router.get("/project/{project_id}", response_model=List[DocumentResponse])
async def list_project_documents(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    project = require_project_access(db, project_id, user_id)
    return (
        db.query(Document)
        .filter(Document.project_id == project.id)
        .order_by(Document.updated_at.desc())
        .all()
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    _, decision = check_document_access(db, document_id, user_id)
    if not decision.can_view:
        raise PermissionDeniedError("Access denied")
    return get_document_or_404(db, document_id)


@router.put("/{document_id}/rename", response_model=DocumentResponse)
async def rename_document(
    document_id: str,
    body: DocumentRename,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    document = get_document_or_404(db, document_id)
    require_structure_permission(db, document.project, user_id, "You do not have permission to rename this document")

    document.name = body.name
    db.commit()
    db.refresh(document)
    return document


@router.put("/{document_id}/move", response_model=DocumentResponse)
async def move_document(
    document_id: str,
    body: DocumentMove,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Move a document into a folder, or back to the root with a null folderId
    """
    document = get_document_or_404(db, document_id)
    require_structure_permission(db, document.project, user_id, "You do not have permission to move this document")

    document.folder_id = _check_folder(db, body.folder_id, document.project_id)
    db.commit()
    db.refresh(document)
    return document


@router.put("/{document_id}/content", response_model=DocumentResponse)
async def save_document_content(
    document_id: str,
    body: DocumentContentUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Save document content

    Gated by the edit rules: owner or ADMIN, an explicit document grant,
    or a folder grant for documents inside a folder. Denials carry the
    reason so clients can show the file as read-only.
    """
    _, decision = check_document_access(db, document_id, user_id)
    if not decision.can_view:
        raise PermissionDeniedError("Access denied")
    if not decision.can_edit:
        logger.info(f"Edit denied on document {document_id} for {user_id}: {decision.reason.value}")
        raise PermissionDeniedError(
            EDIT_DENIED_MESSAGE,
            extra={"reason": decision.reason.value, "canView": True, "canEdit": False},
        )

    document = get_document_or_404(db, document_id)
    document.content = body.content
    db.commit()
    db.refresh(document)
    return document


@router.delete("/{document_id}", response_model=SuccessResponse)
async def delete_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    document = get_document_or_404(db, document_id)
    require_structure_permission(db, document.project, user_id, "You do not have permission to delete this document")

    db.delete(document)
    db.commit()
    return SuccessResponse()
