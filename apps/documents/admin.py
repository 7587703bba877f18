from django.contrib import admin

from .models import ProgressInvoice, Waybill


@admin.register(ProgressInvoice)
class ProgressInvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'shop', 'purchase_number', 'customer_name', 'payment_amount', 'new_balance', 'generated_at']
    list_filter = ['is_purchase_completed', 'payment_method']
    search_fields = ['invoice_number', 'purchase_number', 'customer_name', 'customer_phone']
    raw_id_fields = ['shop', 'purchase', 'payment']
    readonly_fields = ['generated_at']


@admin.register(Waybill)
class WaybillAdmin(admin.ModelAdmin):
    list_display = ['waybill_number', 'shop', 'purchase', 'recipient_name', 'scheduled_delivery', 'delivered_at']
    search_fields = ['waybill_number', 'recipient_name', 'recipient_phone']
    raw_id_fields = ['shop', 'purchase', 'generated_by', 'delivered_by']
    readonly_fields = ['generated_at']
