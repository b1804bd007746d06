import secrets
from datetime import timedelta
from typing import List

from fastapi import APIRouter, Depends, status
from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session

from codecollab.auth.dependencies import get_current_user
from codecollab.core.config import get_settings
from codecollab.core.error_handlers import NotFoundError, PermissionDeniedError, ValidationException
from codecollab.db.database import get_db
from codecollab.models import (
    InvitationStatus, Project, ProjectInvitation, ProjectMember, User
)
from codecollab.models.base import utcnow
from codecollab.schemas import (
    InvitationAcceptResponse, InvitationCreate, InvitationCreatedResponse,
    InvitationResponse, PendingInvitationResponse, SuccessResponse
)
from codecollab.schemas.project import InvitationSummary, ProjectInfo

router = APIRouter(prefix="/invitations", tags=["invitations"])


def _get_invitation_for_user(db: Session, invitation_id: str, user: User) -> ProjectInvitation:
    invitation = db.get(ProjectInvitation, invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")
    if invitation.email.lower() != user.email.lower():
        raise PermissionDeniedError("This invitation is not for you")
    return invitation


@router.post("", response_model=InvitationCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    body: InvitationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Invite an email address to a project (project owner only)
    """
    project = (
        db.query(Project)
        .filter(Project.id == body.project_id, Project.owner_id == current_user.id)
        .first()
    )
    if project is None:
        raise PermissionDeniedError("You do not have permission to invite users to this project")

    email = str(body.email).lower()
    already_member = (
        db.query(ProjectMember)
        .join(User, ProjectMember.user_id == User.id)
        .filter(ProjectMember.project_id == project.id, func.lower(User.email) == email)
        .first()
    )
    if already_member:
        raise ValidationException("User is already a member of this project")

    invitation = (
        db.query(ProjectInvitation)
        .filter(ProjectInvitation.project_id == project.id, ProjectInvitation.email == email)
        .first()
    )
    if invitation is not None and invitation.status == InvitationStatus.PENDING and not invitation.is_expired:
        raise ValidationException("Invitation already sent to this email")

    expires_at = utcnow() + timedelta(days=get_settings().invitation_expire_days)
    token = secrets.token_hex(32)
    if invitation is None:
        invitation = ProjectInvitation(project_id=project.id, email=email)
        db.add(invitation)
    # one row per (project, email); a closed invitation is reissued in place
    invitation.role = body.role
    invitation.invited_by = current_user.id
    invitation.status = InvitationStatus.PENDING
    invitation.token = token
    invitation.expires_at = expires_at
    invitation.created_at = utcnow()
    db.commit()
    db.refresh(invitation)

    logger.info(f"Invitation {invitation.id} sent to {email} for project {project.id}")
    return InvitationCreatedResponse(
        invitation=InvitationSummary(
            id=invitation.id,
            email=invitation.email,
            project_name=project.name,
            inviter_name=current_user.name,
            token=invitation.token,
        )
    )


@router.get("/pending", response_model=List[PendingInvitationResponse])
async def list_pending_invitations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return (
        db.query(ProjectInvitation)
        .filter(
            func.lower(ProjectInvitation.email) == current_user.email.lower(),
            ProjectInvitation.status == InvitationStatus.PENDING,
            ProjectInvitation.expires_at > utcnow(),
        )
        .order_by(ProjectInvitation.created_at.desc())
        .all()
    )


@router.post("/{invitation_id}/accept", response_model=InvitationAcceptResponse)
async def accept_invitation(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Accept an invitation and join the project with the invited role
    """
    invitation = _get_invitation_for_user(db, invitation_id, current_user)

    if invitation.status != InvitationStatus.PENDING:
        raise ValidationException("Invitation has already been processed")

    if invitation.is_expired:
        invitation.status = InvitationStatus.EXPIRED
        db.commit()
        raise ValidationException("Invitation has expired")

    member = (
        db.query(ProjectMember)
        .filter(ProjectMember.project_id == invitation.project_id, ProjectMember.user_id == current_user.id)
        .first()
    )
    if member is None:
        db.add(ProjectMember(project_id=invitation.project_id, user_id=current_user.id, role=invitation.role))
    invitation.status = InvitationStatus.ACCEPTED
    db.commit()

    logger.info(f"{current_user.email} joined project {invitation.project_id}")
    return InvitationAcceptResponse(project=ProjectInfo.model_validate(invitation.project))


@router.post("/{invitation_id}/reject", response_model=SuccessResponse)
async def reject_invitation(
    invitation_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    invitation = _get_invitation_for_user(db, invitation_id, current_user)
    invitation.status = InvitationStatus.REJECTED
    db.commit()
    return SuccessResponse(message="Invitation rejected")


@router.get("/project/{project_id}", response_model=List[InvitationResponse])
async def list_project_invitations(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    project = (
        db.query(Project)
        .filter(Project.id == project_id, Project.owner_id == current_user.id)
        .first()
    )
    if project is None:
        raise PermissionDeniedError("Access denied")

    return (
        db.query(ProjectInvitation)
        .filter(ProjectInvitation.project_id == project.id)
        .order_by(ProjectInvitation.created_at.desc())
        .all()
    )
