from rest_framework import serializers

from .models import SupportTicket, TicketComment, TicketPriority, TicketStatus


class TicketInputSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=200, allow_blank=True)
    description = serializers.CharField(allow_blank=True)
    priority = serializers.ChoiceField(choices=TicketPriority.choices, default=TicketPriority.MEDIUM)
    category = serializers.CharField(max_length=50, required=False, default='GENERAL')


class TicketStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TicketStatus.choices)


class TicketAssignSerializer(serializers.Serializer):
    assignee_id = serializers.UUIDField(allow_null=True)


class CommentInputSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=True)
    is_internal = serializers.BooleanField(default=False)


class TicketCommentSerializer(serializers.ModelSerializer):
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = TicketComment
        fields = ['id', 'author_name', 'content', 'is_internal', 'created_at']
        read_only_fields = fields

    def get_author_name(self, obj):
        return obj.author.get_display_name() if obj.author_id else None


class SupportTicketSerializer(serializers.ModelSerializer):
    business_name = serializers.CharField(source='business.name', read_only=True, default=None)
    created_by_email = serializers.EmailField(source='created_by.email', read_only=True)
    assigned_to_email = serializers.EmailField(source='assigned_to.email', read_only=True, default=None)

    class Meta:
        model = SupportTicket
        fields = [
            'id',
            'ticket_number',
            'subject',
            'description',
            'priority',
            'status',
            'category',
            'business_name',
            'created_by_email',
            'assigned_to_email',
            'resolved_at',
            'closed_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields
