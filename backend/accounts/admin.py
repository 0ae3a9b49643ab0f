from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import ApiPermission, RegistrationAttempt, Role, RolePermission, User, UserType


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password", "first_name", "last_name", "phone_number")}),
        ("Organisation", {"fields": ("role", "company", "user_type")}),
        ("Status", {"fields": ("is_active", "is_verified", "is_deleted", "sca_setup", "is_staff", "is_superuser")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "role", "password1", "password2")}),
    )
    list_display = ("email", "first_name", "last_name", "role", "company", "is_active", "is_deleted")
    list_filter = ("is_active", "is_deleted", "role")
    search_fields = ("email", "first_name", "last_name", "phone_number")
    ordering = ("email",)


class RolePermissionInline(admin.TabularInline):
    model = RolePermission
    extra = 0


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")
    inlines = [RolePermissionInline]


@admin.register(ApiPermission)
class ApiPermissionAdmin(admin.ModelAdmin):
    list_display = ("key", "description")
    search_fields = ("key",)


@admin.register(UserType)
class UserTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")


@admin.register(RegistrationAttempt)
class RegistrationAttemptAdmin(admin.ModelAdmin):
    list_display = ("email", "company_name", "state", "airwallex_account_id", "created_at")
    list_filter = ("state",)
    readonly_fields = ("created_at", "updated_at")
