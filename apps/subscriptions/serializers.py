from rest_framework import serializers

from .models import SubscriptionPlan, Subscription, SubscriptionStatus, BillingPeriod


class SubscriptionPlanInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50, allow_blank=True)
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    currency = serializers.CharField(max_length=3, required=False)
    billing_period = serializers.ChoiceField(choices=BillingPeriod.choices, required=False)
    max_shops = serializers.IntegerField(required=False, default=1)
    max_customers = serializers.IntegerField(required=False, default=0)
    max_staff = serializers.IntegerField(required=False, default=0)
    max_sms_per_month = serializers.IntegerField(required=False, default=0)
    has_pos = serializers.BooleanField(required=False)
    has_wallet = serializers.BooleanField(required=False)
    has_reports = serializers.BooleanField(required=False)
    has_api_access = serializers.BooleanField(required=False)
    is_default = serializers.BooleanField(required=False, default=False)
    is_active = serializers.BooleanField(required=False)
    sort_order = serializers.IntegerField(required=False, default=0)


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    subscriber_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = SubscriptionPlan
        fields = [
            'id',
            'name',
            'display_name',
            'description',
            'price',
            'currency',
            'billing_period',
            'max_shops',
            'max_customers',
            'max_staff',
            'max_sms_per_month',
            'has_pos',
            'has_wallet',
            'has_reports',
            'has_api_access',
            'is_default',
            'is_active',
            'sort_order',
            'subscriber_count',
        ]
        read_only_fields = fields


class SubscriptionSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.name', read_only=True)
    business_slug = serializers.CharField(source='business.slug', read_only=True)
    business_active = serializers.BooleanField(source='business.is_active', read_only=True)
    plan_name = serializers.CharField(source='plan.display_name', read_only=True)
    plan_price = serializers.DecimalField(source='plan.price', max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Subscription
        fields = [
            'id',
            'business_name',
            'business_slug',
            'business_active',
            'plan_name',
            'plan_price',
            'status',
            'current_period_start',
            'current_period_end',
            'trial_ends_at',
            'last_payment_at',
            'last_payment_method',
            'cancelled_at',
            'created_at',
        ]
        read_only_fields = fields


class SubscriptionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SubscriptionStatus.choices)
