# accounts/urls.py
"""
URL configuration for the accounts API.

Endpoints:
- /auth/        - Authentication (login, register, me, refresh, logout)
- /users/       - User management
- /admin/       - Admin-only user management and stats
- /permissions/ - Permission keys and role assignment
"""

from django.urls import path

from .views import (
    # Auth
    LoginView,
    RegisterView,
    MeView,
    RefreshView,
    LogoutView,
    # Users
    UserListCreateView,
    UserPaginatedView,
    UsersByTypeView,
    UserDetailView,
    UserActivateView,
    UserTypeListView,
    # Admin
    AdminStatsView,
    AdminUserListCreateView,
    AdminUserDetailView,
    AdminUserActivateView,
    AdminUserDeactivateView,
    AdminResetPasswordView,
    AdminUserTypeListView,
    # Permissions
    PermissionListCreateView,
    PermissionPaginatedView,
    RoleListView,
    PermissionUpdateView,
    PermissionAssignView,
)

app_name = "accounts"

urlpatterns = [
    # ==========================================================================
    # Authentication
    # ==========================================================================
    path("auth/login", LoginView.as_view(), name="login"),
    path("auth/register", RegisterView.as_view(), name="register"),
    path("auth/me", MeView.as_view(), name="me"),
    path("auth/refresh", RefreshView.as_view(), name="token-refresh"),
    path("auth/logout", LogoutView.as_view(), name="logout"),

    # ==========================================================================
    # Users
    # ==========================================================================
    path("users", UserListCreateView.as_view(), name="user-list"),
    path("users/paginated", UserPaginatedView.as_view(), name="user-paginated"),
    path("users/types/list", UserTypeListView.as_view(), name="user-type-list"),
    path("users/by-type/<int:user_type_id>", UsersByTypeView.as_view(), name="user-by-type"),
    path("users/<int:pk>", UserDetailView.as_view(), name="user-detail"),
    path("users/<int:pk>/activate", UserActivateView.as_view(), name="user-activate"),

    # ==========================================================================
    # Admin
    # ==========================================================================
    path("admin/stats", AdminStatsView.as_view(), name="admin-stats"),
    path("admin/users", AdminUserListCreateView.as_view(), name="admin-user-list"),
    path("admin/users/<int:pk>", AdminUserDetailView.as_view(), name="admin-user-detail"),
    path("admin/users/<int:pk>/activate", AdminUserActivateView.as_view(), name="admin-user-activate"),
    path("admin/users/<int:pk>/deactivate", AdminUserDeactivateView.as_view(), name="admin-user-deactivate"),
    path("admin/users/<int:pk>/reset-password", AdminResetPasswordView.as_view(), name="admin-user-reset-password"),
    path("admin/user-types", AdminUserTypeListView.as_view(), name="admin-user-types"),

    # ==========================================================================
    # Permissions
    # ==========================================================================
    path("permissions", PermissionListCreateView.as_view(), name="permission-list"),
    path("permissions/paginated", PermissionPaginatedView.as_view(), name="permission-paginated"),
    path("permissions/roles", RoleListView.as_view(), name="role-list"),
    path("permissions/update", PermissionUpdateView.as_view(), name="permission-update"),
    path(
        "permissions/assign/<int:role_id>/<int:permission_id>",
        PermissionAssignView.as_view(),
        name="permission-assign",
    ),
]
