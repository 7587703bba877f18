from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actor_email = serializers.EmailField(source='actor.email', read_only=True, default=None)
    shop_slug = serializers.SlugField(source='shop.slug', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = [
            'id',
            'action',
            'entity_type',
            'entity_id',
            'metadata',
            'actor',
            'actor_email',
            'shop_slug',
            'created_at',
        ]
        read_only_fields = fields


class AuditLogFilterSerializer(serializers.Serializer):
    action = serializers.CharField(required=False)
    entity_type = serializers.CharField(required=False)
    shop = serializers.SlugField(required=False)
