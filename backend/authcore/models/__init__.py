from authcore.models.refresh_token import RefreshToken
from authcore.models.user import User

__all__ = [
    "RefreshToken",
    "User",
]
