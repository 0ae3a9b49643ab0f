# accounts/commands.py
"""
Command layer for accounts operations.

ALL mutations of users, roles and permissions go through these commands:
- Login / token issuing
- User creation/updates, activation and soft delete
- Admin password resets
- Permission creation and role assignment

Commands return a CommandResult; they never raise for expected failures.
"""

import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.db import transaction
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.models import ApiPermission, Role, RolePermission, UserType
from companies.models import Company
from magnaporta_backend.results import CommandResult, ErrorKind

logger = logging.getLogger(__name__)

User = get_user_model()


def _clean_phone(value):
    value = (value or "").strip()
    return value or None


# =============================================================================
# Authentication
# =============================================================================

def issue_tokens(user) -> dict:
    """Create a tracked refresh token (OutstandingToken row) and its access token."""
    refresh = RefreshToken.for_user(user)
    refresh["email"] = user.email
    refresh["role"] = user.role_name
    access = refresh.access_token
    return {
        "access_token": str(access),
        "refresh_token": str(refresh),
        "token_type": "Bearer",
        "expires_in": int(access.lifetime.total_seconds()),
    }


def login(email: str, password: str) -> CommandResult:
    """
    Validate credentials and issue a token pair.

    Inactive and soft-deleted users get the same answer as a wrong
    password.
    """
    email = email.lower().strip()
    user = (
        User.objects.select_related("role", "company")
        .filter(email=email, is_active=True, is_deleted=False)
        .first()
    )
    if user is None or not user.check_password(password):
        logger.info("Login rejected", extra={"email": email})
        return CommandResult.fail("Invalid credentials", ErrorKind.UNAUTHORIZED)

    update_last_login(None, user)
    return CommandResult.ok({"user": user, **issue_tokens(user)}, message="Login Success")


# =============================================================================
# User validation helpers
# =============================================================================

def _check_unique_contact(email=None, phone_number=None, exclude_pk=None):
    qs = User.objects.all()
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if email and qs.filter(email=email).exists():
        return CommandResult.conflict(f"User with email '{email}' already exists.")
    if phone_number and qs.filter(phone_number=phone_number).exists():
        return CommandResult.conflict(f"User with phone number '{phone_number}' already exists.")
    return None


def _resolve_relations(data: dict):
    """Turn role_id/company_id/user_type_id into instances. Returns (fields, error)."""
    fields = {}
    if "role_id" in data:
        role = Role.objects.filter(pk=data["role_id"]).first()
        if role is None:
            return None, CommandResult.not_found(f"Role {data['role_id']} not found.")
        fields["role"] = role
    if "company_id" in data:
        company = None
        if data["company_id"] is not None:
            company = Company.objects.filter(pk=data["company_id"], is_deleted=False).first()
            if company is None:
                return None, CommandResult.not_found(f"Company {data['company_id']} not found.")
        fields["company"] = company
    if "user_type_id" in data:
        user_type = None
        if data["user_type_id"] is not None:
            user_type = UserType.objects.filter(pk=data["user_type_id"]).first()
            if user_type is None:
                return None, CommandResult.not_found(f"User type {data['user_type_id']} not found.")
        fields["user_type"] = user_type
    return fields, None


def _get_user(user_id, include_deleted=False):
    qs = User.objects.select_related("role", "company", "user_type")
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    return qs.filter(pk=user_id).first()


# =============================================================================
# User commands
# =============================================================================

@transaction.atomic
def create_user(data: dict) -> CommandResult:
    email = data["email"]
    phone_number = _clean_phone(data.get("phone_number"))

    conflict = _check_unique_contact(email=email, phone_number=phone_number)
    if conflict:
        return conflict

    relations, error = _resolve_relations(data)
    if error:
        return error

    user = User.objects.create_user(
        email=email,
        password=data["password"],
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        phone_number=phone_number,
        is_active=data.get("is_active", True),
        is_verified=data.get("is_verified", False),
        **relations,
    )
    logger.info("User created", extra={"user_id": user.pk, "role": user.role_name})
    return CommandResult.ok(user, message="User created successfully")


@transaction.atomic
def update_user(user_id, data: dict, require_current_password: bool = True, include_deleted: bool = False) -> CommandResult:
    """
    Partial update of a user.

    A password change needs ``current_password`` unless
    ``require_current_password`` is False (admin path).
    """
    user = _get_user(user_id, include_deleted=include_deleted)
    if user is None:
        return CommandResult.not_found(f"User {user_id} not found.")

    data = dict(data)
    if "phone_number" in data:
        data["phone_number"] = _clean_phone(data["phone_number"])

    conflict = _check_unique_contact(
        email=data.get("email") if data.get("email") != user.email else None,
        phone_number=data.get("phone_number") if data.get("phone_number") != user.phone_number else None,
        exclude_pk=user.pk,
    )
    if conflict:
        return conflict

    relations, error = _resolve_relations(data)
    if error:
        return error

    new_password = data.pop("password", None)
    current_password = data.pop("current_password", None)
    if new_password:
        if require_current_password:
            if not current_password:
                return CommandResult.fail("Current password is required to change the password.")
            if not user.check_password(current_password):
                return CommandResult.fail("Current password is incorrect.")
        user.set_password(new_password)

    for field in ("email", "first_name", "last_name", "phone_number", "is_verified", "sca_setup"):
        if field in data:
            setattr(user, field, data[field])
    for field, value in relations.items():
        setattr(user, field, value)

    user.save()
    logger.info("User updated", extra={"user_id": user.pk, "fields": sorted(data.keys())})
    return CommandResult.ok(user, message="User updated successfully")


@transaction.atomic
def soft_delete_user(user_id) -> CommandResult:
    user = _get_user(user_id)
    if user is None:
        return CommandResult.not_found(f"User {user_id} not found.")

    user.is_deleted = True
    user.is_active = False
    user.save(update_fields=["is_deleted", "is_active", "updated_at"])
    logger.info("User soft-deleted", extra={"user_id": user.pk})
    return CommandResult.ok(user, message="User deleted successfully")


@transaction.atomic
def activate_user(user_id) -> CommandResult:
    """Set is_active only; a soft-deleted user stays deleted."""
    user = _get_user(user_id, include_deleted=True)
    if user is None:
        return CommandResult.not_found(f"User {user_id} not found.")

    user.is_active = True
    user.save(update_fields=["is_active", "updated_at"])
    return CommandResult.ok(user, message="User activated successfully")


@transaction.atomic
def admin_activate_user(user_id) -> CommandResult:
    """Set is_active and restore a soft-deleted user."""
    user = _get_user(user_id, include_deleted=True)
    if user is None:
        return CommandResult.not_found(f"User {user_id} not found.")

    user.is_active = True
    user.is_deleted = False
    user.save(update_fields=["is_active", "is_deleted", "updated_at"])
    logger.info("User restored by admin", extra={"user_id": user.pk})
    return CommandResult.ok(user, message="User activated successfully")


@transaction.atomic
def deactivate_user(user_id) -> CommandResult:
    user = _get_user(user_id, include_deleted=True)
    if user is None:
        return CommandResult.not_found(f"User {user_id} not found.")

    user.is_active = False
    user.save(update_fields=["is_active", "updated_at"])
    return CommandResult.ok(user, message="User deactivated successfully")


@transaction.atomic
def reset_password(user_id, new_password: str) -> CommandResult:
    user = _get_user(user_id, include_deleted=True)
    if user is None:
        return CommandResult.not_found(f"User {user_id} not found.")
    if not new_password or len(new_password) < 8:
        return CommandResult.fail("Password must be at least 8 characters.")

    user.set_password(new_password)
    user.save(update_fields=["password", "updated_at"])
    logger.info("Password reset by admin", extra={"user_id": user.pk})
    return CommandResult.ok({"message": "Password reset successfully"}, message="Password reset successfully")


# =============================================================================
# Permission commands
# =============================================================================

@transaction.atomic
def create_permission(key: str, description: str = "") -> CommandResult:
    key = key.strip()
    if ApiPermission.objects.filter(key=key).exists():
        return CommandResult.conflict(f"Permission '{key}' already exists.")

    permission = ApiPermission.objects.create(key=key, description=description)
    return CommandResult.ok(permission, message="Permission created successfully")


@transaction.atomic
def update_permission(permission_id, key: str = None, description: str = None) -> CommandResult:
    permission = ApiPermission.objects.filter(pk=permission_id).first()
    if permission is None:
        return CommandResult.not_found(f"Permission {permission_id} not found.")

    if key is not None and key != permission.key:
        if ApiPermission.objects.filter(key=key).exclude(pk=permission.pk).exists():
            return CommandResult.conflict(f"Permission '{key}' already exists.")
        permission.key = key
    if description is not None:
        permission.description = description

    permission.save()
    return CommandResult.ok(permission, message="Permission updated successfully")


@transaction.atomic
def assign_permission(role_id, permission_id) -> CommandResult:
    """Idempotent: assigning an already-granted permission is a no-op."""
    role = Role.objects.filter(pk=role_id).first()
    if role is None:
        return CommandResult.not_found(f"Role {role_id} not found.")
    permission = ApiPermission.objects.filter(pk=permission_id).first()
    if permission is None:
        return CommandResult.not_found(f"Permission {permission_id} not found.")

    _, created = RolePermission.objects.get_or_create(role=role, permission=permission)
    if created:
        logger.info("Permission assigned", extra={"role": role.name, "permission": permission.key})
    return CommandResult.ok(role, message="Permission assigned successfully")
