from rest_framework import serializers

from .models import Customer, PaymentPreference


class CustomerInputSerializer(serializers.Serializer):
    """Create/update payload. Required-field checks live in the service."""
    first_name = serializers.CharField(max_length=100, allow_blank=True)
    last_name = serializers.CharField(max_length=100, allow_blank=True)
    phone = serializers.CharField(max_length=30, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    id_type = serializers.CharField(max_length=50, required=False, allow_blank=True)
    id_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    preferred_payment = serializers.ChoiceField(choices=PaymentPreference.choices, required=False)
    assigned_collector_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class AssignCollectorSerializer(serializers.Serializer):
    collector_id = serializers.UUIDField(allow_null=True)


class CustomerSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)
    assigned_collector_id = serializers.UUIDField(read_only=True)
    assigned_collector_name = serializers.SerializerMethodField()

    # Summary annotations (list endpoint)
    total_purchases = serializers.IntegerField(read_only=True, required=False)
    active_purchases = serializers.IntegerField(read_only=True, required=False)
    total_owed = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True, required=False)
    total_paid = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True, required=False)

    class Meta:
        model = Customer
        fields = [
            'id',
            'first_name',
            'last_name',
            'full_name',
            'phone',
            'email',
            'id_type',
            'id_number',
            'address',
            'city',
            'region',
            'preferred_payment',
            'assigned_collector_id',
            'assigned_collector_name',
            'notes',
            'is_active',
            'wallet_balance',
            'total_purchases',
            'active_purchases',
            'total_owed',
            'total_paid',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_assigned_collector_name(self, obj):
        if obj.assigned_collector_id is None:
            return None
        return obj.assigned_collector.user.get_display_name()
