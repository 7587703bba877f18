"""
Balance settlement, completion and overdue tracking.

Every confirmed payment goes through ``settle_payment``. A purchase that
reaches a zero balance runs the completion hook exactly once: deferred
stock is taken out and a waybill is generated.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.businesses.models import ShopPolicy
from apps.documents.services import auto_generate_waybill, issue_progress_invoice
from apps.inventory.models import ShopProduct
from apps.purchases.models import Payment, Purchase, PurchaseStatus

logger = logging.getLogger(__name__)

OPEN_STATUSES = (PurchaseStatus.PENDING, PurchaseStatus.ACTIVE)


def apply_amount(purchase: Purchase, amount) -> None:
    """
    Add ``amount`` to the purchase's paid total and recompute its status.

    OVERDUE and DEFAULTED purchases keep their status until fully paid.
    """
    purchase.amount_paid += amount
    purchase.outstanding_balance = max(purchase.total_amount - purchase.amount_paid, 0)
    if purchase.outstanding_balance <= 0:
        purchase.status = PurchaseStatus.COMPLETED
    elif purchase.status in OPEN_STATUSES:
        purchase.status = PurchaseStatus.ACTIVE
    purchase.save(update_fields=['amount_paid', 'outstanding_balance', 'status', 'updated_at'])


def _deduct_deferred_stock(purchase: Purchase) -> None:
    for item in purchase.items.exclude(product__isnull=True):
        stock_item = (
            ShopProduct.objects
            .select_for_update()
            .filter(shop_id=purchase.shop_id, product_id=item.product_id)
            .first()
        )
        if stock_item is None:
            logger.warning("No stock row for %s in shop %s", item.product_name, purchase.shop_id)
            continue
        if stock_item.stock_quantity < item.quantity:
            logger.warning(
                "Stock of %s short by %s on completion of %s",
                item.product_name, item.quantity - stock_item.stock_quantity, purchase.purchase_number,
            )
        stock_item.stock_quantity = max(stock_item.stock_quantity - item.quantity, 0)
        stock_item.save(update_fields=['stock_quantity', 'updated_at'])

    purchase.stock_deducted = True
    purchase.save(update_fields=['stock_deducted', 'updated_at'])


def complete_purchase(*, purchase: Purchase, actor=None) -> None:
    """Completion hook. Safe to call more than once."""
    if not purchase.is_completed:
        return
    if not purchase.stock_deducted:
        _deduct_deferred_stock(purchase)
    auto_generate_waybill(purchase=purchase, actor=actor)
    logger.info("Purchase %s completed", purchase.id)


def settle_payment(*, payment: Payment, purchase: Purchase, actor=None):
    """
    Apply a confirmed payment to its (locked) purchase.

    Returns the progress invoice issued for the payment.
    """
    previous_balance = purchase.outstanding_balance
    apply_amount(purchase, payment.amount)
    if purchase.is_completed:
        complete_purchase(purchase=purchase, actor=actor)
    return issue_progress_invoice(
        payment=payment,
        previous_balance=previous_balance,
        confirmed_by=payment.confirmed_by,
    )


@transaction.atomic
def refresh_overdue_statuses(*, today: Optional[date] = None) -> dict:
    """
    Mark late purchases OVERDUE, and long-late ones DEFAULTED.

    A purchase is late once its due date plus the shop's grace days has
    passed with a balance still outstanding.
    """
    today = today or timezone.localdate()
    now = timezone.now()

    candidates = (
        Purchase.objects
        .filter(status__in=OPEN_STATUSES, outstanding_balance__gt=0, due_date__lt=today)
        .select_related('shop__policy')
    )
    overdue_ids = []
    for purchase in candidates:
        policy = getattr(purchase.shop, 'policy', None)
        grace_days = policy.grace_days if policy else ShopPolicy.DEFAULT_GRACE_DAYS
        if purchase.due_date + timedelta(days=grace_days) < today:
            overdue_ids.append(purchase.id)

    overdue = Purchase.objects.filter(id__in=overdue_ids).update(status=PurchaseStatus.OVERDUE, updated_at=now)

    default_after = getattr(settings, 'HIRE_PURCHASE_DEFAULT_AFTER_DAYS', 90)
    defaulted = Purchase.objects.filter(
        status=PurchaseStatus.OVERDUE,
        outstanding_balance__gt=0,
        due_date__lt=today - timedelta(days=default_after),
    ).update(status=PurchaseStatus.DEFAULTED, updated_at=now)

    if overdue or defaulted:
        logger.info("Purchase statuses refreshed: %s overdue, %s defaulted", overdue, defaulted)
    return {'overdue': overdue, 'defaulted': defaulted}
