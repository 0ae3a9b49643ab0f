# accounts/serializers.py
"""
Serializers for auth, users, admin and permission endpoints.

Input serializers validate shape only; uniqueness and existence checks
live in the commands so they report 404/409 consistently.
"""

from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import ApiPermission, Role, UserType

User = get_user_model()

MIN_PASSWORD_LENGTH = 8


# =============================================================================
# Output
# =============================================================================

class ApiPermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ApiPermission
        fields = ["id", "key", "description", "created_at", "updated_at"]


class RoleSerializer(serializers.ModelSerializer):
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = Role
        fields = ["id", "name", "description", "is_active", "permissions"]

    def get_permissions(self, obj):
        return sorted(p.key for p in obj.permissions.all())


class UserTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserType
        fields = ["id", "name", "description", "is_active"]


class UserSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()
    company = serializers.SerializerMethodField()
    user_type = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "phone_number",
            "is_active",
            "is_verified",
            "is_deleted",
            "sca_setup",
            "role",
            "company",
            "user_type",
            "last_login",
            "created_at",
            "updated_at",
        ]

    def get_role(self, obj):
        if not obj.role_id:
            return None
        return {"id": obj.role_id, "name": obj.role.name}

    def get_company(self, obj):
        if not obj.company_id:
            return None
        return {
            "id": obj.company_id,
            "name": obj.company.name,
            "airwallex_account_id": obj.company.airwallex_account_id,
        }

    def get_user_type(self, obj):
        if not obj.user_type_id:
            return None
        return {"id": obj.user_type_id, "name": obj.user_type.name}


class ProfileSerializer(UserSerializer):
    permissions = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ["permissions"]

    def get_permissions(self, obj):
        return sorted(self.context.get("perms", ()))


# =============================================================================
# Auth input
# =============================================================================

class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=MIN_PASSWORD_LENGTH)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True)
    company_name = serializers.CharField(max_length=255)

    def validate_email(self, value):
        return value.lower().strip()

    def validate_company_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Company name is required.")
        return value


class RefreshTokenSerializer(serializers.Serializer):
    refresh_token = serializers.CharField()


# =============================================================================
# User input
# =============================================================================

class UserCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=MIN_PASSWORD_LENGTH)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    role_id = serializers.IntegerField()
    company_id = serializers.IntegerField(required=False, allow_null=True)
    user_type_id = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)
    is_verified = serializers.BooleanField(required=False, default=False)

    def validate_email(self, value):
        return value.lower().strip()


class UserUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    first_name = serializers.CharField(max_length=150, required=False)
    last_name = serializers.CharField(max_length=150, required=False)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    role_id = serializers.IntegerField(required=False)
    company_id = serializers.IntegerField(required=False, allow_null=True)
    user_type_id = serializers.IntegerField(required=False, allow_null=True)
    is_verified = serializers.BooleanField(required=False)
    sca_setup = serializers.BooleanField(required=False)
    password = serializers.CharField(write_only=True, required=False, min_length=MIN_PASSWORD_LENGTH)
    current_password = serializers.CharField(write_only=True, required=False)

    def validate_email(self, value):
        return value.lower().strip()


class ResetPasswordSerializer(serializers.Serializer):
    new_password = serializers.CharField(write_only=True, min_length=MIN_PASSWORD_LENGTH)


class UserListQuerySerializer(serializers.Serializer):
    user_type_id = serializers.IntegerField(required=False)


# =============================================================================
# Permission input
# =============================================================================

class PermissionCreateSerializer(serializers.Serializer):
    key = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class PermissionUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    key = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
