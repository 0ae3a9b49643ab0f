# accounts/authz.py
"""
Authorization utilities for MagnaPorta.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require / require_any / require_role: Check and raise if not granted

Permissions are checked:
1. First by role ("admin": implicit allow)
2. Every other role: only the permission keys assigned to the role
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import ADMIN_ROLE, ApiPermission, Role
from companies.models import Company

User = get_user_model()


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor.

    Attributes:
        user: The authenticated user
        role: The user's role (may be None for legacy rows)
        company: The company the user belongs to, if any
        perms: Permission keys granted through the role
    """
    user: object  # User model
    role: Optional[Role]
    company: Optional[Company]
    perms: FrozenSet[str]

    def has(self, code: str) -> bool:
        if not self.user.is_active or self.user.is_deleted:
            return False
        if self.is_admin:
            return True
        return code in self.perms

    @property
    def is_admin(self) -> bool:
        return bool(self.role and self.role.is_active and self.role.name == ADMIN_ROLE)

    @property
    def role_name(self) -> str:
        return self.role.name if self.role else ""


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    The user row, its role and the role's permissions are loaded FRESH
    from the database, so role changes take effect on the next request.

    Raises:
        NotAuthenticated: If user is not authenticated
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    user = User.objects.select_related("role", "company").get(pk=user.pk)
    role = user.role

    if role is not None and role.is_active:
        perms = frozenset(
            ApiPermission.objects.filter(roles=role).values_list("key", flat=True)
        )
    else:
        perms = frozenset()

    return ActorContext(
        user=user,
        role=role,
        company=user.company,
        perms=perms,
    )


def require(actor: ActorContext, code: str) -> None:
    """
    Require that the actor has a specific permission.

    Example:
        require(actor, "currency.manage")
        # If we get here, permission is granted
    """
    if not actor.has(code):
        raise PermissionDenied(f"Permission denied: {code}")


def require_any(actor: ActorContext, *codes: str) -> None:
    for code in codes:
        if actor.has(code):
            return

    raise PermissionDenied(f"Permission denied: requires one of {', '.join(codes)}")


def require_role(actor: ActorContext, *role_names: str) -> None:
    """Require one of the named roles (admin-only endpoints)."""
    if actor.role is None or not actor.role.is_active or actor.role.name not in role_names:
        raise PermissionDenied(f"Requires role: {', '.join(role_names)}")
