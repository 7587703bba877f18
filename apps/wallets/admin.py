from django.contrib import admin

from .models import WalletTransaction


@admin.register(WalletTransaction)
class WalletTransactionAdmin(admin.ModelAdmin):
    list_display = ['customer', 'shop', 'type', 'status', 'amount', 'balance_after', 'created_at']
    list_filter = ['type', 'status']
    search_fields = ['customer__first_name', 'customer__last_name', 'customer__phone', 'reference']
    raw_id_fields = ['customer', 'shop', 'purchase', 'created_by', 'confirmed_by']
    readonly_fields = ['balance_before', 'balance_after', 'confirmed_at', 'created_at', 'updated_at']
