from fastapi import APIRouter

from .auth import router as auth_router
from .projects import router as projects_router
from .documents import router as documents_router
from .folders import router as folders_router
from .members import router as members_router
from .invitations import router as invitations_router
from .chat import router as chat_router
from .document_permissions import router as document_permissions_router
from .folder_permissions import router as folder_permissions_router
from .member_permissions import router as member_permissions_router
from .health import router as health_router

api_router = APIRouter(prefix="/api")
for _router in (
    auth_router,
    projects_router,
    documents_router,
    folders_router,
    members_router,
    invitations_router,
    chat_router,
    document_permissions_router,
    folder_permissions_router,
    member_permissions_router,
):
    api_router.include_router(_router)

__all__ = ["api_router", "health_router"]
