from app.db import get_db
from app.services.auth_dependencies import get_otp_provider, require_user_auth

__all__ = [
    "get_db",
    "get_otp_provider",
    "require_user_auth",
]
