from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
import uuid


class AuditLog(models.Model):
    """
    Append-only record of a mutating action.

    Business and shop are denormalised onto the row so tenant-scoped
    listings never need to resolve the target entity.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Null for automated actions (management commands, imports without a user)
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries'
    )
    business = models.ForeignKey(
        'businesses.Business',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries'
    )
    shop = models.ForeignKey(
        'businesses.Shop',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_entries'
    )

    action = models.CharField(max_length=64, db_index=True)
    entity_type = models.CharField(max_length=64)
    entity_id = models.CharField(max_length=64)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['business', 'created_at'], name='audit_business_created_idx'),
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
        ]

    def __str__(self):
        return f"[{self.created_at:%Y-%m-%d %H:%M}] {self.actor} {self.action} {self.entity_type}({self.entity_id})"
