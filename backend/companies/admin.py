from django.contrib import admin

from .models import Company, Plan, PlanType


@admin.register(PlanType)
class PlanTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "display_name", "is_active", "is_deleted")
    list_filter = ("is_active", "is_deleted")
    search_fields = ("name", "display_name")


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    list_display = ("name", "plan_type", "is_active", "is_deleted", "created_at")
    list_filter = ("is_active", "is_deleted", "plan_type")
    search_fields = ("name",)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "airwallex_account_id", "plan", "is_active", "is_verified", "is_deleted")
    list_filter = ("is_active", "is_verified", "is_deleted", "plan")
    search_fields = ("name", "phone_number", "airwallex_account_id")
    readonly_fields = ("airwallex_account_id", "created_at", "updated_at")
