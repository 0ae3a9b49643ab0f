# currency/serializers.py

from rest_framework import serializers

from .models import CompanyCurrencyRate, Currency, CurrencyGroup, PlanCurrencyRate, TransferMarkupRate, TransferMethod


# =============================================================================
# Output
# =============================================================================

class CurrencySerializer(serializers.ModelSerializer):
    group_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Currency
        fields = ["id", "code", "name", "symbol", "is_active", "group_id", "created_at", "updated_at"]


class CurrencyGroupSerializer(serializers.ModelSerializer):
    currencies = CurrencySerializer(many=True, read_only=True)

    class Meta:
        model = CurrencyGroup
        fields = ["id", "name", "description", "is_active", "currencies", "created_at", "updated_at"]


class _RateSerializer(serializers.ModelSerializer):
    group_id = serializers.IntegerField(read_only=True)
    group_name = serializers.CharField(source="group.name", read_only=True)

    RATE_FIELDS = [
        "id",
        "group_id",
        "group_name",
        "conversion_rate",
        "aw_rate",
        "mp_rate",
        "is_active",
        "notes",
        "created_at",
        "updated_at",
    ]


class CompanyRateSerializer(_RateSerializer):
    company_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = CompanyCurrencyRate
        fields = ["company_id"] + _RateSerializer.RATE_FIELDS


class PlanRateSerializer(_RateSerializer):
    plan_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = PlanCurrencyRate
        fields = ["plan_id"] + _RateSerializer.RATE_FIELDS


# =============================================================================
# Input
# =============================================================================

class CurrencyGroupCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    is_active = serializers.BooleanField(required=False, default=True)


class CurrencyCreateSerializer(serializers.Serializer):
    code = serializers.CharField(min_length=3, max_length=3)
    name = serializers.CharField(max_length=100)
    symbol = serializers.CharField(max_length=5)
    group_id = serializers.IntegerField()
    is_active = serializers.BooleanField(required=False, default=True)


class CurrencyUpdateSerializer(serializers.Serializer):
    code = serializers.CharField(min_length=3, max_length=3, required=False)
    name = serializers.CharField(max_length=100, required=False)
    symbol = serializers.CharField(max_length=5, required=False)
    group_id = serializers.IntegerField(required=False)
    is_active = serializers.BooleanField(required=False)


class AssignCurrencyGroupSerializer(serializers.Serializer):
    group_id = serializers.IntegerField()


class ConversionRateQuerySerializer(serializers.Serializer):
    # "from" is a keyword, so it is declared through the class namespace
    locals()["from"] = serializers.CharField(max_length=3)
    to = serializers.CharField(max_length=3)


class _RateInputSerializer(serializers.Serializer):
    group_id = serializers.IntegerField()
    aw_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, required=False, allow_null=True)
    mp_rate = serializers.DecimalField(max_digits=10, decimal_places=4, min_value=0, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CompanyRateCreateSerializer(_RateInputSerializer):
    company_id = serializers.IntegerField()


class PlanRateCreateSerializer(_RateInputSerializer):
    plan_id = serializers.IntegerField()


class CompanyRateBulkSerializer(serializers.Serializer):
    rates = CompanyRateCreateSerializer(many=True, allow_empty=False)


class PlanRateBulkSerializer(serializers.Serializer):
    rates = PlanRateCreateSerializer(many=True, allow_empty=False)


class RateUpdateSerializer(serializers.Serializer):
    group_id = serializers.IntegerField(required=False)
    aw_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, required=False, allow_null=True)
    mp_rate = serializers.DecimalField(max_digits=10, decimal_places=4, min_value=0, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


# =============================================================================
# Transfer markup rates
# =============================================================================

class TransferMarkupRateSerializer(serializers.ModelSerializer):
    plan_id = serializers.IntegerField(read_only=True)
    plan_name = serializers.CharField(source="plan.name", read_only=True)

    class Meta:
        model = TransferMarkupRate
        fields = [
            "id",
            "plan_id",
            "plan_name",
            "region",
            "country",
            "country_code",
            "currency",
            "transaction_type",
            "transfer_method",
            "fee_sha_percentage",
            "fee_sha_minimum",
            "fee_our_percentage",
            "fee_our_minimum",
            "fee_currency",
            "is_deleted",
            "created_at",
            "updated_at",
        ]


def _percentage(**kwargs):
    return serializers.DecimalField(max_digits=10, decimal_places=3, min_value=0, max_value=100, **kwargs)


def _minimum(**kwargs):
    return serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, **kwargs)


class MarkupRateCreateSerializer(serializers.Serializer):
    plan_id = serializers.IntegerField()
    region = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    country_code = serializers.CharField(min_length=2, max_length=2)
    currency = serializers.CharField(min_length=3, max_length=3)
    transaction_type = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    transfer_method = serializers.ChoiceField(choices=TransferMethod.choices)
    fee_sha_percentage = _percentage(required=False, allow_null=True)
    fee_sha_minimum = _minimum(required=False, allow_null=True)
    fee_our_percentage = _percentage()
    fee_our_minimum = _minimum()
    fee_currency = serializers.CharField(min_length=3, max_length=3, required=False, allow_blank=True, allow_null=True)


class MarkupRateUpdateSerializer(serializers.Serializer):
    plan_id = serializers.IntegerField(required=False)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False, allow_blank=True)
    country_code = serializers.CharField(min_length=2, max_length=2, required=False)
    currency = serializers.CharField(min_length=3, max_length=3, required=False)
    transaction_type = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    transfer_method = serializers.ChoiceField(choices=TransferMethod.choices, required=False)
    fee_sha_percentage = _percentage(required=False, allow_null=True)
    fee_sha_minimum = _minimum(required=False, allow_null=True)
    fee_our_percentage = _percentage(required=False)
    fee_our_minimum = _minimum(required=False)
    fee_currency = serializers.CharField(min_length=3, max_length=3, required=False)


class MarkupFeeUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    fee_sha_percentage = _percentage(required=False, allow_null=True)
    fee_sha_minimum = _minimum(required=False, allow_null=True)
    fee_our_percentage = _percentage(required=False)
    fee_our_minimum = _minimum(required=False)


class MarkupBulkUpdateSerializer(serializers.Serializer):
    rates = MarkupFeeUpdateSerializer(many=True, allow_empty=False)


class MarkupFilterQuerySerializer(serializers.Serializer):
    plan_id = serializers.IntegerField(required=False)
    region = serializers.CharField(required=False, allow_blank=True)
    country_code = serializers.CharField(required=False, allow_blank=True)
    currency = serializers.CharField(required=False, allow_blank=True)
    transfer_method = serializers.ChoiceField(choices=TransferMethod.choices, required=False)


class MarkupSpecificRateQuerySerializer(serializers.Serializer):
    plan_id = serializers.IntegerField()
    country_code = serializers.CharField(min_length=2, max_length=2)
    currency = serializers.CharField(min_length=3, max_length=3)
    transfer_method = serializers.ChoiceField(choices=TransferMethod.choices)


class MarkupByAccountQuerySerializer(serializers.Serializer):
    account_id = serializers.CharField(max_length=255)
    currency = serializers.CharField(min_length=3, max_length=3)
    transfer_method = serializers.ChoiceField(choices=TransferMethod.choices)
    country_code = serializers.CharField(max_length=2, required=False, allow_blank=True)
    transaction_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
