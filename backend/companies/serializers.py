# companies/serializers.py

from rest_framework import serializers

from .models import Company, Plan, PlanType


# =============================================================================
# Output
# =============================================================================

class PlanTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = PlanType
        fields = ["id", "name", "display_name", "description", "is_active", "is_deleted", "created_at", "updated_at"]


class PlanSerializer(serializers.ModelSerializer):
    plan_type_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Plan
        fields = ["id", "name", "description", "is_active", "plan_type_id", "is_deleted", "created_at", "updated_at"]


class CompanySerializer(serializers.ModelSerializer):
    plan = serializers.SerializerMethodField()

    class Meta:
        model = Company
        fields = [
            "id",
            "name",
            "phone_number",
            "airwallex_account_id",
            "is_active",
            "is_verified",
            "is_deleted",
            "plan",
            "created_at",
            "updated_at",
        ]

    def get_plan(self, obj):
        if not obj.plan_id:
            return None
        return {"id": obj.plan_id, "name": obj.plan.name}


# =============================================================================
# Input
# =============================================================================

class CompanyCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    airwallex_account_id = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=False)
    is_verified = serializers.BooleanField(required=False, default=False)
    plan_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Company name is required.")
        return value


class CompanyUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    phone_number = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False)
    is_verified = serializers.BooleanField(required=False)
    plan_id = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        if "airwallex_account_id" in self.initial_data:
            raise serializers.ValidationError(
                {"airwallex_account_id": ["airwallex_account_id cannot be changed."]}
            )
        return attrs


class AssignPlanSerializer(serializers.Serializer):
    plan_id = serializers.IntegerField()


class PlanCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_active = serializers.BooleanField(required=False, default=True)
    plan_type_id = serializers.IntegerField(required=False, allow_null=True)


class PlanUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    plan_type_id = serializers.IntegerField(required=False, allow_null=True)


class PlanTypeCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    display_name = serializers.CharField(max_length=150, required=False, allow_blank=True, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Plan type name is required.")
        return value


class PlanTypeUpdateSerializer(PlanTypeCreateSerializer):
    name = serializers.CharField(max_length=100, required=False)
    is_active = serializers.BooleanField(required=False)
