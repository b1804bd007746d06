from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.core.error_handlers import ValidationException
from codecollab.db.database import get_db
from codecollab.models import Folder
from codecollab.schemas import FolderCreate, FolderRename, FolderResponse, FolderTreeResponse, SuccessResponse
from codecollab.services.access_service import (
    get_folder_or_404,
    require_project_access,
    require_structure_permission,
)

router = APIRouter(prefix="/folders", tags=["folders"])


@router.get("/project/{project_id}", response_model=List[FolderTreeResponse])
async def list_project_folders(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Every folder of the project with its direct children and documents
    """
    project = require_project_access(db, project_id, user_id)
    return (
        db.query(Folder)
        .filter(Folder.project_id == project.id)
        .order_by(Folder.name.asc())
        .all()
    )


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    body: FolderCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    project = require_project_access(db, body.project_id, user_id)
    require_structure_permission(db, project, user_id, "You do not have permission to create folders")

    parent_id = None
    if body.parent_id:
        parent = db.get(Folder, body.parent_id)
        if parent is None or parent.project_id != project.id:
            raise ValidationException("Parent folder does not belong to this project")
        parent_id = parent.id

    folder = Folder(project_id=project.id, name=body.name, parent_id=parent_id)
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return folder


@router.put("/{folder_id}", response_model=FolderResponse)
async def rename_folder(
    folder_id: str,
    body: FolderRename,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    folder = get_folder_or_404(db, folder_id)
    require_structure_permission(db, folder.project, user_id, "You do not have permission to rename folders")

    folder.name = body.name
    db.commit()
    db.refresh(folder)
    return folder


@router.delete("/{folder_id}", response_model=SuccessResponse)
async def delete_folder(
    folder_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Delete a folder together with its sub-folders and documents
    """
    folder = get_folder_or_404(db, folder_id)
    require_structure_permission(db, folder.project, user_id, "You do not have permission to delete folders")

    db.delete(folder)
    db.commit()
    return SuccessResponse()
