from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['created_at', 'action', 'entity_type', 'entity_id', 'actor', 'business', 'shop']
    list_filter = ['action', 'entity_type', 'created_at']
    search_fields = ['entity_id', 'actor__email', 'action']
    readonly_fields = ['actor', 'business', 'shop', 'action', 'entity_type', 'entity_id', 'metadata', 'created_at']

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('actor', 'business', 'shop')

    def has_add_permission(self, request):
        return False
