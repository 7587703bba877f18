from rest_framework import serializers

from apps.purchases.models import PaymentMethod
from .models import TransactionStatus, TransactionType, WalletTransaction


class DepositInputSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_method = serializers.ChoiceField(
        choices=[c for c in PaymentMethod.choices if c[0] != PaymentMethod.WALLET],
        default=PaymentMethod.CASH,
    )
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')


class RejectTransactionSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True)


class WalletAdjustmentSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, help_text='Signed amount')
    description = serializers.CharField(required=False, allow_blank=True, default='')


class TransactionFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TransactionStatus.choices, required=False)
    type = serializers.ChoiceField(choices=TransactionType.choices, required=False)


class WalletTransactionSerializer(serializers.ModelSerializer):
    customer_id = serializers.UUIDField(read_only=True)
    customer_name = serializers.CharField(source='customer.full_name', read_only=True)
    purchase_id = serializers.UUIDField(read_only=True)
    created_by_name = serializers.SerializerMethodField()

    class Meta:
        model = WalletTransaction
        fields = [
            'id',
            'customer_id',
            'customer_name',
            'type',
            'status',
            'amount',
            'balance_before',
            'balance_after',
            'description',
            'reference',
            'payment_method',
            'purchase_id',
            'created_by_name',
            'confirmed_at',
            'rejected_reason',
            'created_at',
        ]
        read_only_fields = fields

    def get_created_by_name(self, obj):
        return obj.created_by.get_display_name() if obj.created_by_id else None
