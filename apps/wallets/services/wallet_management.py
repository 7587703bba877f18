"""
Customer wallets.

Deposits are created PENDING by shop staff and only move money once a
shop admin confirms them. A confirmed deposit is immediately applied to
the customer's open purchases, earliest due date first; each application
debits the wallet through a PURCHASE_PAYMENT transaction.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.audit.services import log_action
from apps.businesses.models import Business, Shop, ShopMember, ShopRole
from apps.customers.models import Customer
from apps.purchases.models import PaymentMethod, Purchase, PurchaseStatus
from apps.purchases.services import record_wallet_payment
from apps.wallets.models import TransactionStatus, TransactionType, WalletTransaction

from .exceptions import (
    InsufficientBalanceError,
    TransactionNotFoundError,
    WalletCustomerNotFoundError,
    WalletPermissionError,
    WalletValidationError,
)

logger = logging.getLogger(__name__)

AUTO_APPLY_STATUSES = (PurchaseStatus.ACTIVE, PurchaseStatus.PENDING, PurchaseStatus.OVERDUE)
CREDIT_TYPES = (TransactionType.DEPOSIT, TransactionType.REFUND, TransactionType.ADJUSTMENT)


def _money(value, message: str) -> Decimal:
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidOperation
        return amount.quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        raise WalletValidationError(message)


def can_load_wallet(membership: Optional[ShopMember]) -> bool:
    """Shop admins (and business admins, who act without a membership) always can."""
    if membership is None or membership.role == ShopRole.SHOP_ADMIN:
        return True
    return membership.can_load_wallet


def _is_collector(membership: Optional[ShopMember]) -> bool:
    return membership is not None and membership.role == ShopRole.DEBT_COLLECTOR


@transaction.atomic
def create_deposit(
    *,
    actor,
    shop: Shop,
    customer_id: UUID,
    amount,
    membership: Optional[ShopMember] = None,
    payment_method: str = PaymentMethod.CASH,
    reference: str = '',
    description: str = '',
) -> WalletTransaction:
    """
    Raises:
        WalletPermissionError: Caller may not load wallets
        WalletValidationError: Amount not positive
        WalletCustomerNotFoundError: Customer not active in this shop, or not
            assigned to the calling collector
    """
    if not can_load_wallet(membership):
        logger.warning("Wallet deposit refused for %s in %s", actor, shop.slug)
        raise WalletPermissionError("You do not have permission to load wallets")

    amount = _money(amount, "Amount must be greater than 0")
    if amount <= 0:
        raise WalletValidationError("Amount must be greater than 0")

    customers = Customer.objects.filter(shop=shop, id=customer_id, is_active=True)
    if _is_collector(membership):
        customers = customers.filter(assigned_collector=membership)
    customer = customers.first()
    if customer is None:
        raise WalletCustomerNotFoundError("Customer not found")

    deposit = WalletTransaction.objects.create(
        customer=customer,
        shop=shop,
        type=TransactionType.DEPOSIT,
        status=TransactionStatus.PENDING,
        amount=amount,
        balance_before=customer.wallet_balance,
        balance_after=customer.wallet_balance + amount,
        payment_method=payment_method,
        reference=reference or '',
        description=description or 'Wallet deposit',
        created_by=actor,
    )

    log_action(
        action='WALLET_DEPOSIT_CREATED',
        entity=deposit,
        actor=actor,
        metadata={'customerName': customer.full_name, 'amount': str(amount)},
    )
    logger.info("Wallet deposit of %s created for customer %s", amount, customer.id)
    return deposit


def _apply_to_purchases(*, actor, customer: Customer, shop: Shop) -> list:
    """Spend the wallet on open purchases, earliest due first. Returns what was applied."""
    applied = []
    purchases = (
        Purchase.objects
        .select_for_update()
        .select_related('shop__business', 'customer')
        .filter(
            customer=customer,
            status__in=AUTO_APPLY_STATUSES,
            outstanding_balance__gt=0,
        )
        .order_by('due_date', 'created_at')
    )
    for purchase in purchases:
        if customer.wallet_balance <= 0:
            break
        amount = min(customer.wallet_balance, purchase.outstanding_balance)
        balance_before = customer.wallet_balance
        customer.wallet_balance = balance_before - amount

        WalletTransaction.objects.create(
            customer=customer,
            shop=shop,
            type=TransactionType.PURCHASE_PAYMENT,
            status=TransactionStatus.CONFIRMED,
            amount=amount,
            balance_before=balance_before,
            balance_after=customer.wallet_balance,
            payment_method=PaymentMethod.WALLET,
            description=f"Applied to {purchase.purchase_number}",
            purchase=purchase,
            created_by=actor,
            confirmed_by=actor,
            confirmed_at=timezone.now(),
        )
        purchase.customer = customer
        record_wallet_payment(actor=actor, purchase=purchase, amount=amount)
        applied.append({'purchaseNumber': purchase.purchase_number, 'amount': str(amount)})
    return applied


def _lock_pending(shop: Shop, transaction_id: UUID) -> WalletTransaction:
    wallet_tx = (
        WalletTransaction.objects
        .select_for_update()
        .filter(shop=shop, id=transaction_id, status=TransactionStatus.PENDING)
        .first()
    )
    if wallet_tx is None:
        raise TransactionNotFoundError("Transaction not found or already processed")
    return wallet_tx


@transaction.atomic
def confirm_transaction(*, actor, shop: Shop, transaction_id: UUID) -> WalletTransaction:
    """
    Confirm a pending transaction and move the customer's balance.

    Deposits are then auto-applied to open purchases.

    Raises:
        TransactionNotFoundError: Not a PENDING transaction of this shop
        InsufficientBalanceError: Withdrawal larger than the balance
    """
    wallet_tx = _lock_pending(shop, transaction_id)
    customer = Customer.objects.select_for_update().get(id=wallet_tx.customer_id)

    balance_before = customer.wallet_balance
    if wallet_tx.type in CREDIT_TYPES:
        balance_after = balance_before + wallet_tx.amount
    else:
        balance_after = balance_before - wallet_tx.amount
    if balance_after < 0:
        raise InsufficientBalanceError("Insufficient wallet balance")

    wallet_tx.status = TransactionStatus.CONFIRMED
    wallet_tx.balance_before = balance_before
    wallet_tx.balance_after = balance_after
    wallet_tx.confirmed_by = actor
    wallet_tx.confirmed_at = timezone.now()
    wallet_tx.save()

    customer.wallet_balance = balance_after
    applied = []
    if wallet_tx.type == TransactionType.DEPOSIT:
        applied = _apply_to_purchases(actor=actor, customer=customer, shop=shop)
    customer.save(update_fields=['wallet_balance', 'updated_at'])

    log_action(
        action='WALLET_DEPOSIT_CONFIRMED',
        entity=wallet_tx,
        actor=actor,
        metadata={
            'customerName': customer.full_name,
            'amount': str(wallet_tx.amount),
            'newBalance': str(customer.wallet_balance),
            'appliedTo': applied,
        },
    )
    logger.info(
        "Wallet transaction %s confirmed; %s purchase(s) paid from wallet", wallet_tx.id, len(applied)
    )
    return wallet_tx


@transaction.atomic
def reject_transaction(*, actor, shop: Shop, transaction_id: UUID, reason: str) -> WalletTransaction:
    reason = (reason or '').strip()
    if not reason:
        raise WalletValidationError("Rejection reason is required")

    wallet_tx = _lock_pending(shop, transaction_id)
    wallet_tx.status = TransactionStatus.REJECTED
    wallet_tx.rejected_reason = reason
    wallet_tx.save(update_fields=['status', 'rejected_reason', 'updated_at'])

    log_action(
        action='WALLET_DEPOSIT_REJECTED',
        entity=wallet_tx,
        actor=actor,
        metadata={'amount': str(wallet_tx.amount), 'reason': reason},
    )
    logger.warning("Wallet transaction %s rejected: %s", wallet_tx.id, reason)
    return wallet_tx


@transaction.atomic
def adjust_wallet(*, actor, business: Business, customer_id: UUID, amount, description: str = '') -> WalletTransaction:
    """
    Business-admin correction of a wallet by a signed amount.

    Raises:
        WalletCustomerNotFoundError: Customer not in the business
        WalletValidationError: Zero amount
        InsufficientBalanceError: Balance would go negative
    """
    amount = _money(amount, "Amount must be a number")
    if amount == 0:
        raise WalletValidationError("Adjustment amount cannot be 0")

    customer = (
        Customer.objects
        .select_for_update()
        .select_related('shop')
        .filter(shop__business=business, id=customer_id)
        .first()
    )
    if customer is None:
        raise WalletCustomerNotFoundError("Customer not found")

    balance_before = customer.wallet_balance
    balance_after = balance_before + amount
    if balance_after < 0:
        raise InsufficientBalanceError("Adjustment would result in negative balance")

    adjustment = WalletTransaction.objects.create(
        customer=customer,
        shop=customer.shop,
        type=TransactionType.ADJUSTMENT,
        status=TransactionStatus.CONFIRMED,
        amount=amount,
        balance_before=balance_before,
        balance_after=balance_after,
        description=description or 'Balance adjustment',
        created_by=actor,
        confirmed_by=actor,
        confirmed_at=timezone.now(),
    )
    customer.wallet_balance = balance_after
    customer.save(update_fields=['wallet_balance', 'updated_at'])

    log_action(
        action='WALLET_ADJUSTED',
        entity=adjustment,
        actor=actor,
        business=business,
        metadata={
            'customerName': customer.full_name,
            'amount': str(amount),
            'previousBalance': str(balance_before),
            'newBalance': str(balance_after),
        },
    )
    return adjustment


def list_transactions(
    *,
    shop: Shop,
    membership: Optional[ShopMember] = None,
    status: Optional[str] = None,
    type: Optional[str] = None,
):
    """Transactions of the shop; a collector only sees the ones they created."""
    queryset = WalletTransaction.objects.filter(shop=shop).select_related('customer', 'created_by')
    if _is_collector(membership):
        queryset = queryset.filter(created_by=membership.user)
    if status:
        queryset = queryset.filter(status=status)
    if type:
        queryset = queryset.filter(type=type)
    return queryset.order_by('-created_at')


def get_customer_wallet(*, shop: Shop, customer_id: UUID, membership: Optional[ShopMember] = None) -> tuple:
    """The customer and their transaction history, newest first. Collectors only reach assigned customers."""
    customers = Customer.objects.filter(shop=shop, id=customer_id)
    if _is_collector(membership):
        customers = customers.filter(assigned_collector=membership)
    customer = customers.first()
    if customer is None:
        raise WalletCustomerNotFoundError("Customer not found")
    history = customer.wallet_transactions.select_related('created_by').order_by('-created_at')
    return customer, history


def get_wallet_stats(*, shops) -> dict:
    """Wallet totals across ``shops`` (one shop or all shops of a business)."""
    today = timezone.localdate()
    balances = Customer.objects.filter(shop__in=shops).aggregate(
        total=Sum('wallet_balance'),
        with_balance=Count('id', filter=Q(wallet_balance__gt=0)),
    )
    transactions = WalletTransaction.objects.filter(shop__in=shops)
    pending = transactions.filter(status=TransactionStatus.PENDING).aggregate(
        count=Count('id'),
        amount=Sum('amount'),
    )
    today_deposits = transactions.filter(
        type=TransactionType.DEPOSIT,
        status=TransactionStatus.CONFIRMED,
        confirmed_at__date=today,
    ).aggregate(amount=Sum('amount'))

    return {
        'totalBalance': str(balances['total'] or Decimal('0.00')),
        'customersWithBalance': balances['with_balance'],
        'pendingCount': pending['count'],
        'pendingAmount': str(pending['amount'] or Decimal('0.00')),
        'todayDeposits': str(today_deposits['amount'] or Decimal('0.00')),
    }
