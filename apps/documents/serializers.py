from rest_framework import serializers

from apps.purchases.models import DeliveryStatus, Purchase
from .models import ProgressInvoice, Waybill


class ProgressInvoiceSerializer(serializers.ModelSerializer):
    purchase_id = serializers.UUIDField(read_only=True)
    payment_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ProgressInvoice
        fields = [
            'id',
            'invoice_number',
            'purchase_id',
            'payment_id',
            'payment_amount',
            'previous_balance',
            'new_balance',
            'total_purchase_amount',
            'total_amount_paid',
            'payment_method',
            'collector_name',
            'confirmed_by_name',
            'customer_name',
            'customer_phone',
            'customer_address',
            'purchase_number',
            'purchase_type',
            'shop_name',
            'business_name',
            'is_purchase_completed',
            'waybill_number',
            'generated_at',
        ]
        read_only_fields = fields


class WaybillSerializer(serializers.ModelSerializer):
    purchase_id = serializers.UUIDField(read_only=True)
    purchase_number = serializers.CharField(source='purchase.purchase_number', read_only=True)
    delivery_status = serializers.CharField(source='purchase.delivery_status', read_only=True)
    generated_by_name = serializers.SerializerMethodField()
    delivered_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Waybill
        fields = [
            'id',
            'waybill_number',
            'purchase_id',
            'purchase_number',
            'delivery_status',
            'recipient_name',
            'recipient_phone',
            'delivery_address',
            'delivery_city',
            'delivery_region',
            'special_instructions',
            'generated_by_name',
            'generated_at',
            'scheduled_delivery',
            'delivered_at',
            'delivered_by_name',
            'received_by_name',
            'notes',
        ]
        read_only_fields = fields

    def get_generated_by_name(self, obj):
        return obj.generated_by.get_display_name() if obj.generated_by_id else None

    def get_delivered_by_name(self, obj):
        return obj.delivered_by.get_display_name() if obj.delivered_by_id else None


class GenerateWaybillSerializer(serializers.Serializer):
    purchase_id = serializers.UUIDField()
    recipient_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    recipient_phone = serializers.CharField(max_length=30, required=False, allow_blank=True)
    delivery_address = serializers.CharField(required=False, allow_blank=True)
    delivery_city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    delivery_region = serializers.CharField(max_length=100, required=False, allow_blank=True)
    special_instructions = serializers.CharField(required=False, allow_blank=True)
    scheduled_delivery = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class DeliveryStatusSerializer(serializers.Serializer):
    purchase_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=DeliveryStatus.choices)
    scheduled_delivery = serializers.DateTimeField(required=False, allow_null=True)
    received_by_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class ReadyForDeliverySerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.full_name', read_only=True)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True)

    class Meta:
        model = Purchase
        fields = [
            'id',
            'purchase_number',
            'customer_name',
            'customer_phone',
            'total_amount',
            'delivery_status',
            'updated_at',
        ]
        read_only_fields = fields
