"""
Payments against purchases.

Shop staff record payments that count immediately. Debt collectors record
payments in the field; those stay PENDING, leave the balances untouched
and wait for a shop admin to confirm or reject them.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.services import log_action
from apps.businesses.models import Shop, ShopMember, ShopRole
from apps.documents.services import receipt_number
from apps.purchases.models import Payment, PaymentMethod, PaymentStatus, Purchase, PurchaseStatus

from .exceptions import PaymentNotFoundError, PaymentValidationError, PurchaseNotFoundError
from .lifecycle import settle_payment
from .pricing import to_money

logger = logging.getLogger(__name__)


def _parse_amount(amount) -> Decimal:
    try:
        amount = to_money(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise PaymentValidationError("Payment amount must be greater than 0")
    if not amount.is_finite() or amount <= 0:
        raise PaymentValidationError("Payment amount must be greater than 0")
    return amount


def _check_against_balance(purchase: Purchase, amount: Decimal) -> None:
    if purchase.is_completed:
        raise PaymentValidationError("This purchase is already fully paid")
    if amount > purchase.outstanding_balance:
        raise PaymentValidationError("Payment amount cannot exceed outstanding balance")


def _lock_purchase(shop: Shop, purchase_id: UUID, **filters) -> Optional[Purchase]:
    return (
        Purchase.objects
        .select_for_update()
        .select_related('customer', 'shop__business')
        .filter(shop=shop, id=purchase_id, **filters)
        .first()
    )


@transaction.atomic
def record_payment(
    *,
    actor,
    shop: Shop,
    purchase_id: UUID,
    amount,
    payment_method: str = PaymentMethod.CASH,
    reference: str = '',
    notes: str = '',
) -> Payment:
    """
    Record a payment taken by shop staff. It is confirmed on entry.

    Raises:
        PurchaseNotFoundError: Purchase not in this shop
        PaymentValidationError: Bad amount, or purchase already paid off
    """
    amount = _parse_amount(amount)
    purchase = _lock_purchase(shop, purchase_id)
    if purchase is None:
        raise PurchaseNotFoundError("Purchase not found")
    _check_against_balance(purchase, amount)

    now = timezone.now()
    payment = Payment.objects.create(
        purchase=purchase,
        amount=amount,
        payment_method=payment_method,
        status=PaymentStatus.COMPLETED,
        recorded_by=actor,
        is_confirmed=True,
        confirmed_by=actor,
        confirmed_at=now,
        paid_at=now,
        reference=reference or '',
        notes=notes or '',
    )
    settle_payment(payment=payment, purchase=purchase, actor=actor)

    log_action(
        action='PAYMENT_RECORDED',
        entity=payment,
        actor=actor,
        shop=shop,
        metadata={
            'purchaseNumber': purchase.purchase_number,
            'amount': str(amount),
            'paymentMethod': payment_method,
            'newBalance': str(purchase.outstanding_balance),
        },
    )
    logger.info("Payment of %s recorded on %s", amount, purchase.purchase_number)
    return payment


@transaction.atomic
def record_collector_payment(
    *,
    actor,
    shop: Shop,
    membership: ShopMember,
    purchase_id: UUID,
    amount,
    payment_method: str = PaymentMethod.CASH,
    reference: str = '',
    notes: str = '',
) -> Payment:
    """
    Record a payment collected in the field, pending admin confirmation.

    Raises:
        PurchaseNotFoundError: Purchase not in the shop or customer not assigned to the collector
        PaymentValidationError: Bad amount, or purchase already paid off
    """
    purchase = _lock_purchase(shop, purchase_id, customer__assigned_collector=membership)
    if purchase is None:
        raise PurchaseNotFoundError("Purchase not found or customer not assigned to you")
    amount = _parse_amount(amount)
    _check_against_balance(purchase, amount)

    payment = Payment.objects.create(
        purchase=purchase,
        amount=amount,
        payment_method=payment_method,
        status=PaymentStatus.PENDING,
        collector=membership,
        recorded_by=actor,
        is_confirmed=False,
        paid_at=timezone.now(),
        reference=reference or '',
        notes=notes or '',
    )

    log_action(
        action='COLLECTOR_PAYMENT_RECORDED',
        entity=payment,
        actor=actor,
        shop=shop,
        metadata={
            'purchaseNumber': purchase.purchase_number,
            'customerName': purchase.customer.full_name,
            'amount': str(amount),
        },
    )
    logger.info("Collector %s recorded %s on %s", membership.id, amount, purchase.purchase_number)
    return payment


def record_wallet_payment(*, actor, purchase: Purchase, amount: Decimal) -> Payment:
    """
    Pay ``amount`` on a locked purchase out of the customer's wallet.

    The wallet side (balance and transaction) is the caller's business.
    """
    now = timezone.now()
    payment = Payment.objects.create(
        purchase=purchase,
        amount=amount,
        payment_method=PaymentMethod.WALLET,
        status=PaymentStatus.COMPLETED,
        recorded_by=actor,
        is_confirmed=True,
        confirmed_by=actor,
        confirmed_at=now,
        paid_at=now,
        notes='Applied from wallet',
    )
    settle_payment(payment=payment, purchase=purchase, actor=actor)
    return payment


def list_pending_payments(*, shop: Shop, membership: Optional[ShopMember] = None):
    """Payments awaiting confirmation; a collector only gets their own."""
    queryset = (
        Payment.objects
        .filter(purchase__shop=shop, status=PaymentStatus.PENDING, is_confirmed=False)
        .select_related('purchase__customer', 'collector__user')
    )
    if membership is not None and membership.role == ShopRole.DEBT_COLLECTOR:
        queryset = queryset.filter(collector=membership)
    return queryset.order_by('created_at')


def list_collector_payments(*, shop: Shop, membership: ShopMember, status: Optional[str] = None):
    queryset = (
        Payment.objects
        .filter(purchase__shop=shop, collector=membership)
        .select_related('purchase__customer')
    )
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-created_at')


def _lock_pending_payment(shop: Shop, payment_id: UUID) -> Payment:
    payment = (
        Payment.objects
        .select_for_update()
        .select_related('collector__user')
        .filter(
            purchase__shop=shop,
            id=payment_id,
            status=PaymentStatus.PENDING,
            is_confirmed=False,
        )
        .first()
    )
    if payment is None:
        raise PaymentNotFoundError("Payment not found or already processed")
    return payment


@transaction.atomic
def confirm_payment(*, actor, shop: Shop, payment_id: UUID) -> Payment:
    """
    Confirm a collector's payment and apply it to the purchase.

    Raises:
        PaymentNotFoundError: Payment not pending in this shop
        PaymentValidationError: Purchase was paid down below the amount meanwhile
    """
    payment = _lock_pending_payment(shop, payment_id)
    purchase = _lock_purchase(shop, payment.purchase_id)
    _check_against_balance(purchase, payment.amount)

    payment.status = PaymentStatus.COMPLETED
    payment.is_confirmed = True
    payment.confirmed_by = actor
    payment.confirmed_at = timezone.now()
    payment.save(update_fields=['status', 'is_confirmed', 'confirmed_by', 'confirmed_at', 'updated_at'])
    payment.purchase = purchase

    settle_payment(payment=payment, purchase=purchase, actor=actor)

    log_action(
        action='PAYMENT_CONFIRMED',
        entity=payment,
        actor=actor,
        shop=shop,
        metadata={
            'purchaseNumber': purchase.purchase_number,
            'amount': str(payment.amount),
            'newBalance': str(purchase.outstanding_balance),
        },
    )
    logger.info("Payment %s confirmed", payment.id)
    return payment


@transaction.atomic
def reject_payment(*, actor, shop: Shop, payment_id: UUID, reason: str) -> Payment:
    """
    Raises:
        PaymentValidationError: No reason given
        PaymentNotFoundError: Payment not pending in this shop
    """
    reason = (reason or '').strip()
    if not reason:
        raise PaymentValidationError("Rejection reason is required")

    payment = _lock_pending_payment(shop, payment_id)
    payment.status = PaymentStatus.REJECTED
    payment.rejected_at = timezone.now()
    payment.rejection_reason = reason
    payment.save(update_fields=['status', 'rejected_at', 'rejection_reason', 'updated_at'])

    log_action(
        action='PAYMENT_REJECTED',
        entity=payment,
        actor=actor,
        shop=shop,
        metadata={'amount': str(payment.amount), 'reason': reason},
    )
    logger.warning("Payment %s rejected: %s", payment.id, reason)
    return payment


def get_payment_receipt(*, shop: Shop, payment_id: UUID, membership: Optional[ShopMember] = None) -> dict:
    """Receipt data for a confirmed payment."""
    queryset = Payment.objects.filter(purchase__shop=shop, id=payment_id, is_confirmed=True)
    if membership is not None and membership.role == ShopRole.DEBT_COLLECTOR:
        queryset = queryset.filter(collector=membership)
    payment = queryset.select_related('purchase__customer', 'collector__user', 'confirmed_by').first()
    if payment is None:
        raise PaymentNotFoundError("Payment not found")

    purchase = payment.purchase
    customer = purchase.customer
    return {
        'receiptNumber': receipt_number(payment),
        'paymentId': str(payment.id),
        'amount': str(payment.amount),
        'paymentMethod': payment.payment_method,
        'reference': payment.reference,
        'paidAt': payment.paid_at,
        'confirmedAt': payment.confirmed_at,
        'collectorName': payment.collector.user.get_display_name() if payment.collector_id else None,
        'confirmedByName': payment.confirmed_by.get_display_name() if payment.confirmed_by_id else None,
        'customerName': customer.full_name,
        'customerPhone': customer.phone,
        'purchaseNumber': purchase.purchase_number,
        'totalAmount': str(purchase.total_amount),
        'amountPaid': str(purchase.amount_paid),
        'outstandingBalance': str(purchase.outstanding_balance),
        'shopName': shop.name,
        'businessName': shop.business.name,
    }
