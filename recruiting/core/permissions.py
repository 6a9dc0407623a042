"""
Authorization guard.

The caller is resolved once per request into an AdminCapability; services
take the capability instead of re-checking the user's role themselves.
"""

from dataclasses import dataclass
from typing import Any

from recruiting.core.exceptions import PermissionDenied
from recruiting.models.user import User, UserRole


@dataclass(frozen=True)
class AdminCapability:
    """Proof that the acting user holds the admin role."""

    user_id: str


def require_admin(user: User, detail: str = "Only admin can perform this action") -> AdminCapability:
    """Helper function to verify admin access"""
    if user is None or not user.is_active or user.role != UserRole.ADMIN:
        raise PermissionDenied(detail)
    return AdminCapability(user_id=user.id)


def ensure_admin(admin: Any, detail: str) -> AdminCapability:
    """Reject anything that is not a capability issued by require_admin."""
    if not isinstance(admin, AdminCapability):
        raise PermissionDenied(detail)
    return admin
