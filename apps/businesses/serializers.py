from rest_framework import serializers

from apps.accounts.serializers import UserPublicSerializer
from .models import Business, Shop, ShopMember, ShopPolicy, ShopRole, InterestType


# =============================================================================
# Input Serializers
# =============================================================================

class BusinessCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    slug = serializers.CharField(max_length=100)
    email = serializers.EmailField(required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')
    owner_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    owner_email = serializers.CharField(max_length=255, required=False, allow_blank=True)
    owner_password = serializers.CharField(required=False, allow_blank=True, write_only=True)


class BusinessUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    country = serializers.CharField(max_length=100, required=False)


class ActiveStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class ShopCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    slug = serializers.CharField(max_length=100)
    address = serializers.CharField(required=False, allow_blank=True, default='')
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    admin_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    admin_email = serializers.CharField(max_length=255, required=False, allow_blank=True)
    admin_password = serializers.CharField(required=False, allow_blank=True, write_only=True)


class ShopUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    address = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)


class ShopMemberCreateSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=255)
    role = serializers.ChoiceField(choices=[ShopRole.SHOP_ADMIN, ShopRole.SALES_STAFF])
    name = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    password = serializers.CharField(required=False, allow_blank=True, write_only=True)
    can_load_wallet = serializers.BooleanField(required=False, default=False)


class DebtCollectorCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, allow_blank=True)
    email = serializers.CharField(max_length=255, allow_blank=True)
    password = serializers.CharField(write_only=True, allow_blank=True)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')


class ShopPolicyInputSerializer(serializers.Serializer):
    interest_type = serializers.CharField()
    interest_rate = serializers.DecimalField(max_digits=7, decimal_places=2)
    grace_days = serializers.IntegerField()
    max_tenor_days = serializers.IntegerField()
    late_fee_fixed = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    late_fee_rate = serializers.DecimalField(max_digits=7, decimal_places=2, required=False, allow_null=True)


# =============================================================================
# Output Serializers
# =============================================================================

class BusinessSerializer(serializers.ModelSerializer):
    shop_count = serializers.IntegerField(read_only=True, required=False)
    customer_count = serializers.IntegerField(read_only=True, required=False)
    purchase_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Business
        fields = [
            'id',
            'name',
            'slug',
            'email',
            'phone',
            'address',
            'country',
            'is_active',
            'shop_count',
            'customer_count',
            'purchase_count',
            'created_at',
        ]
        read_only_fields = fields


class ShopSerializer(serializers.ModelSerializer):
    business_slug = serializers.SlugField(source='business.slug', read_only=True)
    product_count = serializers.IntegerField(read_only=True, required=False)
    customer_count = serializers.IntegerField(read_only=True, required=False)
    member_count = serializers.IntegerField(read_only=True, required=False)
    purchase_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Shop
        fields = [
            'id',
            'name',
            'slug',
            'business_slug',
            'address',
            'phone',
            'country',
            'is_active',
            'product_count',
            'customer_count',
            'member_count',
            'purchase_count',
            'created_at',
        ]
        read_only_fields = fields


class ShopMemberSerializer(serializers.ModelSerializer):
    user = UserPublicSerializer(read_only=True)

    class Meta:
        model = ShopMember
        fields = ['id', 'user', 'role', 'is_active', 'can_load_wallet', 'created_at']
        read_only_fields = fields


class DebtCollectorSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='user.get_display_name', read_only=True)
    email = serializers.EmailField(source='user.email', read_only=True)
    phone = serializers.CharField(source='user.phone', read_only=True)
    assigned_customers_count = serializers.IntegerField(read_only=True, default=0)
    total_collected = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True, default=0)

    class Meta:
        model = ShopMember
        fields = [
            'id',
            'name',
            'email',
            'phone',
            'is_active',
            'can_load_wallet',
            'assigned_customers_count',
            'total_collected',
            'created_at',
        ]
        read_only_fields = fields


class ShopPolicySerializer(serializers.ModelSerializer):
    interest_type = serializers.ChoiceField(choices=InterestType.choices)

    class Meta:
        model = ShopPolicy
        fields = [
            'interest_type',
            'interest_rate',
            'grace_days',
            'max_tenor_days',
            'late_fee_fixed',
            'late_fee_rate',
            'updated_at',
        ]
        read_only_fields = fields
