from rest_framework import serializers

from .models import Payment, PaymentMethod, PaymentStatus, Purchase, PurchaseItem, PurchaseStatus, PurchaseType


# =============================================================================
# Input Serializers
# =============================================================================

class SaleItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class SaleInputSerializer(serializers.Serializer):
    """Sale payload. Quantity, amount and tenor checks live in the service."""
    customer_id = serializers.UUIDField()
    purchase_type = serializers.ChoiceField(choices=PurchaseType.choices, default=PurchaseType.CREDIT)
    items = SaleItemInputSerializer(many=True, allow_empty=True)
    down_payment = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, default=0)
    tenor_days = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(
        choices=[c for c in PaymentMethod.choices if c[0] != PaymentMethod.WALLET],
        default=PaymentMethod.CASH,
    )
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class RejectPaymentSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True)


class PurchaseFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseStatus.choices, required=False)
    customer = serializers.UUIDField(required=False)
    search = serializers.CharField(required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class PurchaseItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = PurchaseItem
        fields = ['id', 'product_id', 'product_name', 'quantity', 'unit_price', 'total_price']
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    purchase_id = serializers.UUIDField(read_only=True)
    purchase_number = serializers.CharField(source='purchase.purchase_number', read_only=True)
    customer_name = serializers.CharField(source='purchase.customer.full_name', read_only=True)
    collector_id = serializers.UUIDField(read_only=True)
    collector_name = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            'id',
            'purchase_id',
            'purchase_number',
            'customer_name',
            'amount',
            'payment_method',
            'status',
            'collector_id',
            'collector_name',
            'is_confirmed',
            'confirmed_at',
            'rejected_at',
            'rejection_reason',
            'reference',
            'paid_at',
            'notes',
            'created_at',
        ]
        read_only_fields = fields

    def get_collector_name(self, obj):
        if obj.collector_id is None:
            return None
        return obj.collector.user.get_display_name()


class PurchaseSerializer(serializers.ModelSerializer):
    """Purchase with its items and payments."""
    customer_id = serializers.UUIDField(read_only=True)
    customer_name = serializers.CharField(source='customer.full_name', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True)
    items = PurchaseItemSerializer(many=True, read_only=True)
    payments = serializers.SerializerMethodField()

    class Meta:
        model = Purchase
        fields = [
            'id',
            'purchase_number',
            'customer_id',
            'customer_name',
            'customer_phone',
            'purchase_type',
            'status',
            'subtotal',
            'interest_amount',
            'total_amount',
            'amount_paid',
            'outstanding_balance',
            'down_payment',
            'installments',
            'start_date',
            'due_date',
            'interest_type',
            'interest_rate',
            'delivery_status',
            'notes',
            'items',
            'payments',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_payments(self, obj):
        payments = [p for p in obj.payments.all() if p.status != PaymentStatus.REJECTED]
        return [
            {
                'id': str(p.id),
                'amount': str(p.amount),
                'payment_method': p.payment_method,
                'status': p.status,
                'is_confirmed': p.is_confirmed,
                'paid_at': p.paid_at,
            }
            for p in payments
        ]
