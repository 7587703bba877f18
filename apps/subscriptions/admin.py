from django.contrib import admin

from .models import SubscriptionPlan, Subscription


@admin.register(SubscriptionPlan)
class SubscriptionPlanAdmin(admin.ModelAdmin):
    list_display = ['name', 'display_name', 'price', 'billing_period', 'max_shops', 'is_default', 'is_active']
    list_filter = ['billing_period', 'is_default', 'is_active']
    search_fields = ['name', 'display_name']


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ['business', 'plan', 'status', 'current_period_end', 'trial_ends_at']
    list_filter = ['status', 'plan']
    search_fields = ['business__name', 'business__slug']
    raw_id_fields = ['business']
