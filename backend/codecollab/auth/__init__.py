from .dependencies import get_current_user, get_current_user_id
from .google import GoogleIdentity, verify_google_id_token

__all__ = ["get_current_user", "get_current_user_id", "GoogleIdentity", "verify_google_id_token"]
