# accounts/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authorization, response formatting.
Commands handle: business logic, validation, persistence.

Endpoints:
- /auth/        login, register, me, refresh, logout
- /users/       user management (permission keys users.view / users.manage)
- /admin/       admin-only user management and stats (role "admin")
- /permissions/ permission keys and role assignments
"""

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from accounts.authz import require, require_role, resolve_actor
from accounts.models import ADMIN_ROLE, ApiPermission, Role, UserType
from accounts.registration import register_signup
from accounts.throttles import LoginThrottle, RegistrationThrottle
from companies.models import Company
from logs.models import LogEntry
from magnaporta_backend.pagination import paginate, parse_page_params
from magnaporta_backend.responses import created, envelope, fail_response, failure
from ops.health import uptime_seconds

from . import commands
from .serializers import (
    ApiPermissionSerializer,
    LoginSerializer,
    PermissionCreateSerializer,
    PermissionUpdateSerializer,
    ProfileSerializer,
    RefreshTokenSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    RoleSerializer,
    UserCreateSerializer,
    UserListQuerySerializer,
    UserSerializer,
    UserTypeSerializer,
    UserUpdateSerializer,
)

# Set only by holders of users.manage; dropped from self-service edits
MANAGED_USER_FIELDS = frozenset({"role_id", "company_id", "user_type_id", "is_verified", "sca_setup"})

User = get_user_model()

USER_ORDER_FIELDS = ("created_at", "updated_at", "email", "first_name", "last_name")


def _users(include_deleted=False):
    qs = User.objects.select_related("role", "company", "user_type")
    if not include_deleted:
        qs = qs.filter(is_deleted=False)
    return qs


def _client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def _user_response(result, message=None, status_code=status.HTTP_200_OK):
    if not result.success:
        return fail_response(result)
    return envelope(UserSerializer(result.data).data, message or result.message, status_code)


# =============================================================================
# Auth Views
# =============================================================================

class LoginView(APIView):
    """POST /api/auth/login -> token pair and user."""
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.login(**serializer.validated_data)
        if not result.success:
            return fail_response(result)

        data = dict(result.data)
        data["user"] = UserSerializer(data["user"]).data
        return envelope(data, result.message)


class RegisterView(APIView):
    """POST /api/auth/register -> company + first user (see accounts.registration)."""
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [RegistrationThrottle]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = register_signup(
            serializer.validated_data,
            ip_address=_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )
        if not result.success:
            return fail_response(result)
        return created(result.data, result.message)


class MeView(APIView):
    """GET /api/auth/me -> current user, role, permission keys and company."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        perms = actor.perms
        if actor.is_admin:
            perms = frozenset(ApiPermission.objects.values_list("key", flat=True))
        data = ProfileSerializer(actor.user, context={"perms": perms}).data
        return envelope(data, "Profile retrieved successfully")


class RefreshView(APIView):
    """
    POST /api/auth/refresh -> new access token and rotated refresh token.

    Unknown, expired or blacklisted refresh tokens answer 401.
    """
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        refresh = TokenRefreshSerializer(data={"refresh": serializer.validated_data["refresh_token"]})
        try:
            refresh.is_valid(raise_exception=True)
        except (TokenError, InvalidToken):
            # answered here; without an authenticator DRF would turn a raised 401 into 403
            return failure("Invalid or expired refresh token", status.HTTP_401_UNAUTHORIZED)

        tokens = refresh.validated_data
        access = tokens["access"]
        return envelope(
            {
                "access_token": access,
                "refresh_token": tokens.get("refresh", serializer.validated_data["refresh_token"]),
                "token_type": "Bearer",
                "expires_in": int(RefreshToken.access_token_class.lifetime.total_seconds()),
            },
            "Token refreshed successfully",
        )


class LogoutView(APIView):
    """POST /api/auth/logout -> blacklist the presented refresh token."""
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = RefreshTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            RefreshToken(serializer.validated_data["refresh_token"]).blacklist()
        except TokenError:
            return failure("Invalid token", status.HTTP_400_BAD_REQUEST)
        return envelope(None, "Logout successful")


# =============================================================================
# User Views
# =============================================================================

class UserListCreateView(APIView):
    """
    GET  /api/users -> non-deleted users
    POST /api/users -> create user
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "users.view")

        users = _users().order_by("-created_at")
        return envelope(UserSerializer(users, many=True).data, "Users retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "users.manage")

        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_user(serializer.validated_data)
        return _user_response(result, status_code=status.HTTP_201_CREATED)


class UserPaginatedView(APIView):
    """GET /api/users/paginated?page=&limit=&order_by=&order=&user_type_id="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "users.view")

        params = parse_page_params(request.query_params, allowed_order_by=USER_ORDER_FIELDS)
        query = UserListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        users = _users()
        if "user_type_id" in query.validated_data:
            users = users.filter(user_type_id=query.validated_data["user_type_id"])
        return envelope(paginate(users, params, UserSerializer), "Users retrieved successfully")


class UsersByTypeView(APIView):
    """GET /api/users/by-type/<user_type_id> (paginated)"""
    permission_classes = [IsAuthenticated]

    def get(self, request, user_type_id):
        actor = resolve_actor(request)
        require(actor, "users.view")

        params = parse_page_params(request.query_params, allowed_order_by=USER_ORDER_FIELDS)
        users = _users().filter(user_type_id=user_type_id)
        return envelope(paginate(users, params, UserSerializer), "Users retrieved successfully")


class UserDetailView(APIView):
    """
    GET    /api/users/<id> -> 404 when missing or soft-deleted
    PATCH  /api/users/<id> -> update (password change needs current_password)
    DELETE /api/users/<id> -> soft delete

    A user may read and update their own record without users.* keys.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        if actor.user.pk != pk:
            require(actor, "users.view")

        user = _users().filter(pk=pk).first()
        if user is None:
            return failure(f"User {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(UserSerializer(user).data, "User retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        if actor.user.pk != pk:
            require(actor, "users.manage")

        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        if actor.user.pk == pk and not actor.has("users.manage"):
            data = {k: v for k, v in data.items() if k not in MANAGED_USER_FIELDS}

        result = commands.update_user(pk, data, require_current_password=True)
        return _user_response(result)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "users.manage")

        result = commands.soft_delete_user(pk)
        return _user_response(result)


class UserActivateView(APIView):
    """PATCH /api/users/<id>/activate -> is_active=True; is_deleted untouched."""
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "users.manage")

        result = commands.activate_user(pk)
        return _user_response(result)


class UserTypeListView(APIView):
    """GET /api/users/types/list -> active user types."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        resolve_actor(request)

        types = UserType.objects.filter(is_active=True)
        return envelope(UserTypeSerializer(types, many=True).data, "User types retrieved successfully")


# =============================================================================
# Admin Views
# =============================================================================

class AdminStatsView(APIView):
    """GET /api/admin/stats -> user, company and log totals plus uptime."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        users = User.objects.aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(is_active=True, is_deleted=False)),
            inactive=Count("id", filter=Q(is_active=False, is_deleted=False)),
            deleted=Count("id", filter=Q(is_deleted=True)),
        )
        companies = Company.objects.aggregate(
            total=Count("id", filter=Q(is_deleted=False)),
            active=Count("id", filter=Q(is_active=True, is_deleted=False)),
            deleted=Count("id", filter=Q(is_deleted=True)),
        )
        logs = LogEntry.objects.aggregate(
            total=Count("id"),
            errors=Count("id", filter=Q(level=LogEntry.Level.ERROR)),
        )
        return envelope(
            {
                "users": users,
                "companies": companies,
                "logs": logs,
                "uptime_seconds": uptime_seconds(),
            },
            "Stats retrieved successfully",
        )


class AdminUserListCreateView(APIView):
    """
    GET  /api/admin/users -> paginated, includes soft-deleted users
    POST /api/admin/users -> create user
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        params = parse_page_params(request.query_params, allowed_order_by=USER_ORDER_FIELDS)
        users = _users(include_deleted=True)
        return envelope(paginate(users, params, UserSerializer), "Users retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        serializer = UserCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_user(serializer.validated_data)
        return _user_response(result, status_code=status.HTTP_201_CREATED)


class AdminUserDetailView(APIView):
    """
    GET    /api/admin/users/<id> -> includes soft-deleted users
    PATCH  /api/admin/users/<id> -> update without current_password
    DELETE /api/admin/users/<id> -> soft delete
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        user = _users(include_deleted=True).filter(pk=pk).first()
        if user is None:
            return failure(f"User {pk} not found.", status.HTTP_404_NOT_FOUND)
        return envelope(UserSerializer(user).data, "User retrieved successfully")

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        serializer = UserUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.update_user(
            pk,
            serializer.validated_data,
            require_current_password=False,
            include_deleted=True,
        )
        return _user_response(result)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        result = commands.soft_delete_user(pk)
        return _user_response(result)


class AdminUserActivateView(APIView):
    """PATCH /api/admin/users/<id>/activate -> is_active=True and is_deleted=False."""
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        result = commands.admin_activate_user(pk)
        return _user_response(result)


class AdminUserDeactivateView(APIView):
    """PATCH /api/admin/users/<id>/deactivate"""
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        result = commands.deactivate_user(pk)
        return _user_response(result)


class AdminResetPasswordView(APIView):
    """POST /api/admin/users/<id>/reset-password"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.reset_password(pk, serializer.validated_data["new_password"])
        if not result.success:
            return fail_response(result)
        return envelope(result.data, result.message)


class AdminUserTypeListView(APIView):
    """GET /api/admin/user-types -> all user types."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_role(actor, ADMIN_ROLE)

        return envelope(
            UserTypeSerializer(UserType.objects.all(), many=True).data,
            "User types retrieved successfully",
        )


# =============================================================================
# Permission Views
# =============================================================================

class PermissionListCreateView(APIView):
    """
    GET  /api/permissions -> all permission keys
    POST /api/permissions -> create a permission key (duplicate -> 409)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "permissions.view")

        perms = ApiPermission.objects.all()
        return envelope(ApiPermissionSerializer(perms, many=True).data, "Permissions retrieved successfully")

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "permissions.manage")

        serializer = PermissionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = commands.create_permission(**serializer.validated_data)
        if not result.success:
            return fail_response(result)
        return created(ApiPermissionSerializer(result.data).data, result.message)


class PermissionPaginatedView(APIView):
    """GET /api/permissions/paginated"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "permissions.view")

        params = parse_page_params(request.query_params, allowed_order_by=("created_at", "key"))
        return envelope(
            paginate(ApiPermission.objects.all(), params, ApiPermissionSerializer),
            "Permissions retrieved successfully",
        )


class RoleListView(APIView):
    """GET /api/permissions/roles -> roles with their permission keys."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "permissions.view")

        roles = Role.objects.prefetch_related("permissions")
        return envelope(RoleSerializer(roles, many=True).data, "Roles retrieved successfully")


class PermissionUpdateView(APIView):
    """POST /api/permissions/update {id, key?, description?}"""
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "permissions.manage")

        serializer = PermissionUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = commands.update_permission(
            data["id"],
            key=data.get("key"),
            description=data.get("description"),
        )
        if not result.success:
            return fail_response(result)
        return envelope(ApiPermissionSerializer(result.data).data, result.message)


class PermissionAssignView(APIView):
    """POST /api/permissions/assign/<role_id>/<permission_id> (idempotent)"""
    permission_classes = [IsAuthenticated]

    def post(self, request, role_id, permission_id):
        actor = resolve_actor(request)
        require(actor, "permissions.manage")

        result = commands.assign_permission(role_id, permission_id)
        if not result.success:
            return fail_response(result)

        role = Role.objects.prefetch_related("permissions").get(pk=result.data.pk)
        return envelope(RoleSerializer(role).data, result.message)
