from .auth_service import AuthService
from .access_service import load_permission_context

__all__ = ["AuthService", "load_permission_context"]
