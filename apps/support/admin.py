from django.contrib import admin

from .models import SupportTicket, TicketComment


class TicketCommentInline(admin.TabularInline):
    model = TicketComment
    extra = 0
    fields = ['author', 'content', 'is_internal', 'created_at']
    readonly_fields = ['created_at']


@admin.register(SupportTicket)
class SupportTicketAdmin(admin.ModelAdmin):
    list_display = ['ticket_number', 'subject', 'priority', 'status', 'business', 'created_by', 'assigned_to', 'created_at']
    list_filter = ['status', 'priority', 'category']
    search_fields = ['ticket_number', 'subject', 'created_by__email']
    raw_id_fields = ['business', 'created_by', 'assigned_to']
    readonly_fields = ['ticket_number', 'resolved_at', 'closed_at', 'created_at', 'updated_at']
    inlines = [TicketCommentInline]
