from django.contrib import admin

from .models import CompanyCurrencyRate, Currency, CurrencyGroup, PlanCurrencyRate, TransferMarkupRate


class CurrencyInline(admin.TabularInline):
    model = Currency
    extra = 0


@admin.register(CurrencyGroup)
class CurrencyGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")
    inlines = [CurrencyInline]


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "symbol", "group", "is_active")
    list_filter = ("group", "is_active")
    search_fields = ("code", "name")


@admin.register(CompanyCurrencyRate)
class CompanyCurrencyRateAdmin(admin.ModelAdmin):
    list_display = ("company", "group", "aw_rate", "mp_rate", "conversion_rate", "is_active")
    list_filter = ("group", "is_active")
    readonly_fields = ("conversion_rate",)


@admin.register(PlanCurrencyRate)
class PlanCurrencyRateAdmin(admin.ModelAdmin):
    list_display = ("plan", "group", "aw_rate", "mp_rate", "conversion_rate", "is_active")
    list_filter = ("plan", "group", "is_active")
    readonly_fields = ("conversion_rate",)


@admin.register(TransferMarkupRate)
class TransferMarkupRateAdmin(admin.ModelAdmin):
    list_display = (
        "plan",
        "country_code",
        "currency",
        "transfer_method",
        "transaction_type",
        "fee_our_percentage",
        "fee_our_minimum",
        "is_deleted",
    )
    list_filter = ("plan", "transfer_method", "region", "is_deleted")
    search_fields = ("country", "country_code", "currency")
