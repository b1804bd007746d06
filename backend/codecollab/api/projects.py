from typing import List

from fastapi import APIRouter, Depends, status
from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.collaboration.permissions import ProjectRole
from codecollab.core.error_handlers import NotFoundError
from codecollab.db.database import get_db
from codecollab.models import Document, Project, ProjectMember
from codecollab.schemas import (
    DocumentResponse, MemberResponse, ProjectCreate, ProjectDetailResponse,
    ProjectResponse, ProjectUpdate, SuccessResponse
)
from codecollab.schemas.project import ProjectCounts
from codecollab.schemas.user import UserSummary
from codecollab.services.access_service import find_accessible_project

router = APIRouter(prefix="/projects", tags=["projects"])


def _counts(db: Session, project_id: str) -> ProjectCounts:
    documents = db.query(func.count(Document.id)).filter(Document.project_id == project_id).scalar()
    members = db.query(func.count(ProjectMember.id)).filter(ProjectMember.project_id == project_id).scalar()
    return ProjectCounts(documents=documents or 0, members=members or 0)


def serialize_project(db: Session, project: Project) -> ProjectResponse:
    return ProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        is_public=project.is_public,
        owner_id=project.owner_id,
        created_at=project.created_at,
        updated_at=project.updated_at,
        owner=UserSummary.model_validate(project.owner),
        count=_counts(db, project.id),
    )


def _get_owned_project(db: Session, project_id: str, user_id: str) -> Project:
    project = db.query(Project).filter(Project.id == project_id, Project.owner_id == user_id).first()
    if project is None:
        raise NotFoundError("Project not found or access denied")
    return project


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Projects the user owns, belongs to, or that are public
    """
    projects = (
        db.query(Project)
        .filter(or_(
            Project.owner_id == user_id,
            Project.members.any(ProjectMember.user_id == user_id),
            Project.is_public.is_(True),
        ))
        .order_by(Project.updated_at.desc())
        .all()
    )
    return [serialize_project(db, project) for project in projects]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Create a project; the creator is also recorded as an ADMIN member
    """
    project = Project(
        name=body.name,
        description=(body.description or "").strip() or None,
        is_public=body.is_public,
        owner_id=user_id,
    )
    project.members.append(ProjectMember(user_id=user_id, role=ProjectRole.ADMIN))
    db.add(project)
    db.commit()
    db.refresh(project)

    logger.info(f"Project {project.id} created by {user_id}")
    return serialize_project(db, project)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    project = find_accessible_project(db, project_id, user_id, include_public=True)
    if project is None:
        raise NotFoundError("Project not found")

    documents = (
        db.query(Document)
        .filter(Document.project_id == project.id)
        .order_by(Document.updated_at.desc())
        .all()
    )
    summary = serialize_project(db, project)
    return ProjectDetailResponse(
        **summary.model_dump(),
        documents=[DocumentResponse.model_validate(document) for document in documents],
    )


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    body: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Rename or edit a project (owner only)
    """
    project = _get_owned_project(db, project_id, user_id)

    if body.name:
        project.name = body.name
    if "description" in body.model_fields_set:
        project.description = (body.description or "").strip() or None
    if body.is_public is not None:
        project.is_public = body.is_public

    db.commit()
    db.refresh(project)
    return serialize_project(db, project)


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    project = _get_owned_project(db, project_id, user_id)
    db.delete(project)
    db.commit()

    logger.info(f"Project {project_id} deleted by {user_id}")
    return SuccessResponse(message="Project deleted successfully")


@router.get("/{project_id}/members", response_model=List[MemberResponse])
async def list_project_members(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    project = find_accessible_project(db, project_id, user_id, include_public=True)
    if project is None:
        raise NotFoundError("Project not found or access denied")

    return (
        db.query(ProjectMember)
        .filter(ProjectMember.project_id == project.id)
        .order_by(ProjectMember.joined_at.asc())
        .all()
    )
