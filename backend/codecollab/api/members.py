from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user_id
from codecollab.collaboration.permissions import ProjectRole
from codecollab.core.error_handlers import NotFoundError, PermissionDeniedError, ValidationException
from codecollab.db.database import get_db
from codecollab.models import ProjectMember
from codecollab.schemas import MemberListResponse, MemberResponse, RoleUpdate, SuccessResponse
from codecollab.services.access_service import require_project_access

router = APIRouter(prefix="/members", tags=["members"])


def _get_member_for_owner(db: Session, member_id: str, user_id: str, message: str) -> ProjectMember:
    member = db.get(ProjectMember, member_id)
    if member is None:
        raise NotFoundError("Member not found")
    if member.project.owner_id != user_id:
        raise PermissionDeniedError(message)
    return member


@router.get("/project/{project_id}", response_model=MemberListResponse)
async def list_members(
    project_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    project = require_project_access(db, project_id, user_id)
    members = db.query(ProjectMember).filter(ProjectMember.project_id == project.id).all()
    return MemberListResponse(
        owner=project.owner_id,
        members=[MemberResponse.model_validate(member) for member in members],
    )


@router.put("/{member_id}/role", response_model=MemberResponse)
async def change_member_role(
    member_id: str,
    body: RoleUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Change a member's role (project owner only)
    """
    try:
        role = ProjectRole(body.role)
    except ValueError:
        raise ValidationException("Invalid role")

    member = _get_member_for_owner(db, member_id, user_id, "Only project owner can change roles")
    member.role = role
    db.commit()
    db.refresh(member)

    logger.info(f"Member {member_id} of project {member.project_id} is now {role.value}")
    return member


@router.delete("/{member_id}", response_model=SuccessResponse)
async def remove_member(
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    member = _get_member_for_owner(db, member_id, user_id, "Only project owner can remove members")
    db.delete(member)
    db.commit()
    return SuccessResponse()
