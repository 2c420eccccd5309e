from app.models.user import User
from app.models.refresh_token import RefreshToken
from app.models.category import Category
from app.models.post import Post
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "RefreshToken",
    "Category",
    "Post",
    "AuditLog",
]
