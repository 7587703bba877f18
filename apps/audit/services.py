"""Central audit logger."""

import logging
from typing import Optional

from apps.audit.models import AuditLog
from apps.businesses.models import Shop

logger = logging.getLogger(__name__)


def _resolve_tenant(entity, business, shop):
    if shop is None:
        shop = entity if isinstance(entity, Shop) else getattr(entity, 'shop', None)
    if business is None:
        business = getattr(shop, 'business', None) or getattr(entity, 'business', None)
    return business, shop


def log_action(
    *,
    action: str,
    entity,
    actor=None,
    business=None,
    shop=None,
    metadata: Optional[dict] = None,
) -> AuditLog:
    """
    Write one audit entry for an action on ``entity``.

    Business and shop default to the entity's own ``shop``/``business``
    attributes. Called inside the caller's transaction, so the entry is
    rolled back together with the change it describes.
    """
    business, shop = _resolve_tenant(entity, business, shop)

    entry = AuditLog.objects.create(
        actor=actor if getattr(actor, 'pk', None) else None,
        business=business,
        shop=shop,
        action=action,
        entity_type=entity.__class__.__name__,
        entity_id=str(entity.pk),
        metadata=metadata or {},
    )
    logger.debug("audit %s %s(%s)", action, entry.entity_type, entry.entity_id)
    return entry
