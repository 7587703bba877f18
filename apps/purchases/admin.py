from django.contrib import admin
from django.utils.html import format_html

from .models import Payment, PaymentStatus, Purchase, PurchaseItem, PurchaseStatus

STATUS_COLORS = {
    PurchaseStatus.PENDING: ('#E5C49A', '#2C1810'),
    PurchaseStatus.ACTIVE: ('#5B84B1', 'white'),
    PurchaseStatus.COMPLETED: ('#6B8E5E', 'white'),
    PurchaseStatus.OVERDUE: ('#D98E04', 'white'),
    PurchaseStatus.DEFAULTED: ('#B85C5C', 'white'),
    PaymentStatus.REJECTED: ('#B85C5C', 'white'),
}


def badge(status, label):
    bg, fg = STATUS_COLORS.get(status, ('#ccc', '#666'))
    return format_html(
        '<span style="background: {}; color: {}; padding: 3px 8px; '
        'border-radius: 10px; font-size: 11px;">{}</span>',
        bg, fg, label
    )


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    fields = ['product', 'product_name', 'quantity', 'unit_price', 'total_price']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    fields = ['amount', 'payment_method', 'status', 'collector', 'is_confirmed', 'paid_at']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        """Payments go through the payment services."""
        return False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = [
        'purchase_number',
        'customer',
        'shop',
        'purchase_type',
        'total_amount',
        'outstanding_balance',
        'status_badge',
        'due_date',
    ]
    list_filter = ['status', 'purchase_type', 'delivery_status', 'shop']
    search_fields = ['purchase_number', 'customer__first_name', 'customer__last_name', 'customer__phone']
    raw_id_fields = ['shop', 'customer', 'created_by']
    readonly_fields = [
        'subtotal',
        'interest_amount',
        'total_amount',
        'amount_paid',
        'outstanding_balance',
        'stock_deducted',
        'created_at',
        'updated_at',
    ]
    inlines = [PurchaseItemInline, PaymentInline]
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        return badge(obj.status, obj.get_status_display())
    status_badge.short_description = 'Status'


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['purchase', 'amount', 'payment_method', 'status_badge', 'collector', 'is_confirmed', 'paid_at']
    list_filter = ['status', 'payment_method', 'is_confirmed']
    search_fields = ['purchase__purchase_number', 'reference']
    raw_id_fields = ['purchase', 'collector', 'recorded_by', 'confirmed_by']
    readonly_fields = ['confirmed_at', 'rejected_at', 'created_at', 'updated_at']

    def status_badge(self, obj):
        return badge(obj.status, obj.get_status_display())
    status_badge.short_description = 'Status'
