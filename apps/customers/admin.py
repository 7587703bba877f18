from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'phone', 'shop', 'assigned_collector', 'wallet_balance', 'is_active']
    list_filter = ['is_active', 'preferred_payment', 'shop']
    search_fields = ['first_name', 'last_name', 'phone', 'email']
    raw_id_fields = ['shop', 'assigned_collector']
    readonly_fields = ['wallet_balance', 'created_at', 'updated_at']
