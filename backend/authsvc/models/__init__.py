from authsvc.models.password_reset import PasswordReset
from authsvc.models.session import UserSession
from authsvc.models.user import User

__all__ = [
    "PasswordReset",
    "User",
    "UserSession",
]
