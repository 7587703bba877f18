"""
Waybills and delivery tracking.

A waybill can only be generated for a fully paid purchase. Completing a
purchase generates one automatically; staff may also generate it by hand
with recipient overrides.
"""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.services import log_action
from apps.businesses.models import Shop
from apps.documents.models import Waybill
from apps.purchases.models import DeliveryStatus, Purchase, PurchaseStatus

from .exceptions import DocumentNotFoundError, WaybillExistsError, WaybillValidationError
from .numbering import next_waybill_number

logger = logging.getLogger(__name__)

OVERRIDE_FIELDS = (
    'recipient_name',
    'recipient_phone',
    'delivery_address',
    'delivery_city',
    'delivery_region',
    'special_instructions',
    'scheduled_delivery',
    'notes',
)


def _create_waybill(*, purchase: Purchase, actor=None, **overrides) -> Waybill:
    customer = purchase.customer
    defaults = {
        'recipient_name': customer.full_name,
        'recipient_phone': customer.phone,
        'delivery_address': customer.address or 'N/A',
        'delivery_city': customer.city,
        'delivery_region': customer.region,
    }
    for field in OVERRIDE_FIELDS:
        value = overrides.get(field)
        if value not in (None, ''):
            defaults[field] = value

    waybill = Waybill.objects.create(
        waybill_number=next_waybill_number(purchase.shop),
        shop=purchase.shop,
        purchase=purchase,
        generated_by=actor if getattr(actor, 'pk', None) else None,
        **defaults,
    )

    if purchase.delivery_status == DeliveryStatus.PENDING:
        purchase.delivery_status = DeliveryStatus.SCHEDULED
        purchase.save(update_fields=['delivery_status', 'updated_at'])

    log_action(
        action='WAYBILL_GENERATED',
        entity=waybill,
        actor=actor,
        metadata={
            'waybillNumber': waybill.waybill_number,
            'purchaseNumber': purchase.purchase_number,
            'customerName': customer.full_name,
        },
    )
    logger.info("Waybill %s generated for purchase %s", waybill.waybill_number, purchase.id)
    return waybill


def _get_purchase(shop: Shop, purchase_id: UUID) -> Purchase:
    purchase = (
        Purchase.objects
        .select_for_update()
        .select_related('customer', 'shop')
        .filter(shop=shop, id=purchase_id)
        .first()
    )
    if purchase is None:
        raise DocumentNotFoundError("Purchase not found")
    return purchase


@transaction.atomic
def generate_waybill(*, actor, shop: Shop, purchase_id: UUID, **overrides) -> Waybill:
    """
    Raises:
        DocumentNotFoundError: Purchase not in this shop
        WaybillValidationError: Purchase not fully paid
        WaybillExistsError: Purchase already has a waybill
    """
    purchase = _get_purchase(shop, purchase_id)
    if purchase.status != PurchaseStatus.COMPLETED:
        raise WaybillValidationError("Purchase must be fully paid before generating a waybill")
    if Waybill.objects.filter(purchase=purchase).exists():
        raise WaybillExistsError("Waybill already exists for this purchase")
    return _create_waybill(purchase=purchase, actor=actor, **overrides)


def auto_generate_waybill(*, purchase: Purchase, actor=None) -> Optional[Waybill]:
    """Completion hook: generate the waybill unless one exists already."""
    if purchase.status != PurchaseStatus.COMPLETED:
        return None
    if Waybill.objects.filter(purchase=purchase).exists():
        return None
    return _create_waybill(purchase=purchase, actor=actor)


@transaction.atomic
def update_delivery_status(
    *,
    actor,
    shop: Shop,
    purchase_id: UUID,
    status: str,
    scheduled_delivery=None,
    received_by_name: str = '',
    notes: str = '',
) -> Purchase:
    """
    Move a purchase through delivery.

    SCHEDULED may carry a delivery time; DELIVERED stamps who delivered it
    and when, plus who received it.

    Raises:
        DocumentNotFoundError: Purchase not in this shop
        WaybillValidationError: Unknown status or no waybill yet
    """
    if status not in DeliveryStatus.values:
        raise WaybillValidationError("Invalid delivery status")

    purchase = _get_purchase(shop, purchase_id)
    waybill = Waybill.objects.select_for_update().filter(purchase=purchase).first()
    if waybill is None:
        raise WaybillValidationError("Generate a waybill before updating delivery")

    previous = purchase.delivery_status
    purchase.delivery_status = status
    purchase.save(update_fields=['delivery_status', 'updated_at'])

    if status == DeliveryStatus.SCHEDULED and scheduled_delivery:
        waybill.scheduled_delivery = scheduled_delivery
    elif status == DeliveryStatus.DELIVERED:
        waybill.delivered_at = timezone.now()
        waybill.delivered_by = actor
        waybill.received_by_name = (received_by_name or '').strip()
    if notes:
        waybill.notes = notes
    waybill.save()

    log_action(
        action='DELIVERY_STATUS_UPDATED',
        entity=purchase,
        actor=actor,
        metadata={
            'purchaseNumber': purchase.purchase_number,
            'waybillNumber': waybill.waybill_number,
            'previousStatus': previous,
            'newStatus': status,
        },
    )
    logger.info("Delivery of %s: %s -> %s", purchase.purchase_number, previous, status)
    return purchase


def list_waybills(*, shop: Shop, delivery_status: Optional[str] = None):
    queryset = Waybill.objects.filter(shop=shop).select_related('purchase').order_by('-generated_at')
    if delivery_status:
        queryset = queryset.filter(purchase__delivery_status=delivery_status)
    return queryset


def get_waybill(*, shop: Shop, waybill_id: UUID) -> Waybill:
    waybill = list_waybills(shop=shop).filter(id=waybill_id).first()
    if waybill is None:
        raise DocumentNotFoundError("Waybill not found")
    return waybill


def list_ready_for_delivery(*, shop: Shop):
    """Completed purchases not yet out for delivery."""
    return (
        Purchase.objects
        .filter(
            shop=shop,
            status=PurchaseStatus.COMPLETED,
            delivery_status__in=[DeliveryStatus.PENDING, DeliveryStatus.SCHEDULED],
        )
        .select_related('customer')
        .order_by('updated_at')
    )
