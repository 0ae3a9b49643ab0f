# accounts/permissions.py
from __future__ import annotations

from django.db import transaction

from accounts.models import ApiPermission, Role, RolePermission
from accounts.permission_defaults import PERMISSION_DESCRIPTIONS, ROLE_DEFAULTS


def ensure_permissions(codes) -> list:
    """Create missing ApiPermission rows for ``codes`` and return all of them."""
    codes = set(codes)
    existing = set(ApiPermission.objects.filter(key__in=codes).values_list("key", flat=True))
    missing = [c for c in sorted(codes) if c not in existing]
    if missing:
        ApiPermission.objects.bulk_create(
            [ApiPermission(key=c, description=PERMISSION_DESCRIPTIONS.get(c, "")) for c in missing],
            ignore_conflicts=True,
        )
    return list(ApiPermission.objects.filter(key__in=codes))


@transaction.atomic
def grant_role_defaults(role: Role, overwrite: bool = False) -> int:
    """
    Grant default permissions for the role name.

    - Idempotent by default: only grants missing codes.
    - If overwrite=True: first removes existing grants then grants defaults.
    Returns number of permissions newly granted.
    """
    default_codes = ROLE_DEFAULTS.get(role.name, set())

    if overwrite:
        RolePermission.objects.filter(role=role).delete()

    perms = ensure_permissions(default_codes)

    already = set(
        RolePermission.objects.filter(role=role).values_list("permission_id", flat=True)
    )
    to_create = [RolePermission(role=role, permission=p) for p in perms if p.id not in already]
    RolePermission.objects.bulk_create(to_create, ignore_conflicts=True)
    return len(to_create)


@transaction.atomic
def seed_default_roles() -> dict:
    """Create the built-in roles and grant their defaults. Returns grants per role."""
    granted = {}
    for name in ROLE_DEFAULTS:
        role, _ = Role.objects.get_or_create(name=name, defaults={"description": f"Built-in {name} role"})
        granted[name] = grant_role_defaults(role)
    return granted
