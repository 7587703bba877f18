"""
Hire-purchase sales.

A sale prices its items from the product tiers, snapshots the shop's
credit policy and records any down payment as a confirmed cash payment.
Cash sales take stock out immediately; layaway and credit sales when the
purchase completes.
"""

import logging
from collections import defaultdict
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.audit.services import log_action
from apps.businesses.models import Shop, ShopMember, ShopRole
from apps.businesses.services import get_policy
from apps.customers.models import Customer
from apps.documents.services import issue_progress_invoice
from apps.inventory.models import ShopProduct
from apps.inventory.services import deduct_stock
from apps.purchases.models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    PurchaseType,
)

from .exceptions import PurchaseNotFoundError, PurchaseValidationError
from .lifecycle import complete_purchase
from .pricing import next_purchase_number, price_agreement, to_money

logger = logging.getLogger(__name__)


def _is_collector(membership: Optional[ShopMember]) -> bool:
    return membership is not None and membership.role == ShopRole.DEBT_COLLECTOR


def list_purchases(
    *,
    shop: Shop,
    membership: Optional[ShopMember] = None,
    status: Optional[str] = None,
    customer_id: Optional[UUID] = None,
    search: Optional[str] = None,
):
    """Purchases of the shop; collectors only see their assigned customers' purchases."""
    queryset = (
        Purchase.objects
        .filter(shop=shop)
        .select_related('customer')
        .prefetch_related('items', 'payments')
    )
    if _is_collector(membership):
        queryset = queryset.filter(customer__assigned_collector=membership)
    if status:
        queryset = queryset.filter(status=status)
    if customer_id:
        queryset = queryset.filter(customer_id=customer_id)
    if search:
        queryset = queryset.filter(
            Q(purchase_number__icontains=search)
            | Q(customer__first_name__icontains=search)
            | Q(customer__last_name__icontains=search)
            | Q(customer__phone__icontains=search)
        )
    return queryset.order_by('-created_at')


def get_purchase(*, shop: Shop, purchase_id: UUID, membership: Optional[ShopMember] = None) -> Purchase:
    purchase = list_purchases(shop=shop, membership=membership).filter(id=purchase_id).first()
    if purchase is None:
        raise PurchaseNotFoundError("Purchase not found")
    return purchase


def _parse_product_id(value) -> UUID:
    try:
        return value if isinstance(value, UUID) else UUID(str(value))
    except (TypeError, ValueError):
        raise PurchaseValidationError("One or more products not found in this shop")


def _parse_quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise PurchaseValidationError("Quantity must be at least 1")
    if quantity < 1:
        raise PurchaseValidationError("Quantity must be at least 1")
    return quantity


def _parse_amount(value, message: str) -> Decimal:
    try:
        amount = to_money(value if value not in (None, '') else 0)
    except (InvalidOperation, TypeError, ValueError):
        raise PurchaseValidationError(message)
    if not amount.is_finite() or amount < 0:
        raise PurchaseValidationError(message)
    return amount


def _get_sale_customer(shop: Shop, customer_id, membership: Optional[ShopMember]) -> Customer:
    if not customer_id:
        raise PurchaseValidationError("Customer is required")

    customer = (
        Customer.objects
        .select_for_update()
        .filter(shop=shop, id=customer_id, is_active=True)
        .first()
    )
    if customer is None:
        raise PurchaseNotFoundError("Customer not found")
    if _is_collector(membership) and customer.assigned_collector_id not in (None, membership.id):
        raise PurchaseNotFoundError("Customer not found")
    return customer


@transaction.atomic
def create_purchase(
    *,
    actor,
    shop: Shop,
    customer_id: UUID,
    items: list,
    purchase_type: str = PurchaseType.CREDIT,
    membership: Optional[ShopMember] = None,
    down_payment=0,
    tenor_days: Optional[int] = None,
    notes: str = '',
) -> Purchase:
    """
    Record a sale.

    ``items`` holds dicts with ``product_id``, ``quantity`` and an optional
    ``unit_price`` overriding the product's price tier. ``tenor_days``
    defaults to the shop policy's maximum.

    Raises:
        PurchaseNotFoundError: Customer not in this shop (or not visible to the collector)
        PurchaseValidationError: Items, amounts, tenor or stock rejected
    """
    customer = _get_sale_customer(shop, customer_id, membership)

    if purchase_type not in PurchaseType.values:
        raise PurchaseValidationError("Invalid purchase type")
    if not items:
        raise PurchaseValidationError("At least one product is required")

    lines = [
        {
            'product_id': _parse_product_id(item.get('product_id')),
            'quantity': _parse_quantity(item.get('quantity')),
            'unit_price': item.get('unit_price'),
        }
        for item in items
    ]
    down_payment = _parse_amount(down_payment, "Down payment cannot be negative")

    policy = get_policy(shop=shop)
    tenor_days = policy.max_tenor_days if tenor_days is None else int(tenor_days)
    if tenor_days < 1:
        raise PurchaseValidationError("Tenor must be at least 1 day")
    if purchase_type != PurchaseType.CASH and tenor_days > policy.max_tenor_days:
        raise PurchaseValidationError(f"Tenor cannot exceed {policy.max_tenor_days} days")

    product_ids = {line['product_id'] for line in lines}
    stock_items = {
        stock_item.product_id: stock_item
        for stock_item in (
            ShopProduct.objects
            .select_for_update()
            .select_related('product')
            .filter(shop=shop, product_id__in=product_ids, is_active=True, product__is_active=True)
        )
    }
    if len(stock_items) != len(product_ids):
        raise PurchaseValidationError("One or more products not found in this shop")

    wanted = defaultdict(int)
    for line in lines:
        wanted[line['product_id']] += line['quantity']
    for product_id, quantity in wanted.items():
        stock_item = stock_items[product_id]
        if stock_item.stock_quantity < quantity:
            raise PurchaseValidationError(
                f"Insufficient stock for {stock_item.product.name}. "
                f"Only {stock_item.stock_quantity} available."
            )

    subtotal = Decimal('0.00')
    for line in lines:
        product = stock_items[line['product_id']].product
        if line['unit_price'] in (None, ''):
            line['unit_price'] = product.price_for(purchase_type)
        line['unit_price'] = _parse_amount(line['unit_price'], "Unit price cannot be negative")
        line['total_price'] = line['unit_price'] * line['quantity']
        line['product'] = product
        subtotal += line['total_price']

    terms = price_agreement(
        subtotal=subtotal,
        purchase_type=purchase_type,
        interest_type=policy.interest_type,
        interest_rate=policy.interest_rate,
        tenor_days=tenor_days,
        down_payment=down_payment,
        start_date=timezone.localdate(),
    )
    if terms['outstanding_balance'] <= 0:
        status = PurchaseStatus.COMPLETED
    elif terms['down_payment'] > 0:
        status = PurchaseStatus.ACTIVE
    else:
        status = PurchaseStatus.PENDING

    purchase = Purchase.objects.create(
        purchase_number=next_purchase_number(customer),
        shop=shop,
        customer=customer,
        purchase_type=purchase_type,
        status=status,
        interest_type=policy.interest_type,
        interest_rate=policy.interest_rate,
        notes=notes or '',
        created_by=actor,
        **terms,
    )
    PurchaseItem.objects.bulk_create([
        PurchaseItem(
            purchase=purchase,
            product=line['product'],
            product_name=line['product'].name,
            quantity=line['quantity'],
            unit_price=line['unit_price'],
            total_price=line['total_price'],
        )
        for line in lines
    ])

    if purchase_type == PurchaseType.CASH:
        for line in lines:
            deduct_stock(
                shop=shop,
                product_id=line['product'].id,
                quantity=line['quantity'],
                product_name=line['product'].name,
            )
        purchase.stock_deducted = True
        purchase.save(update_fields=['stock_deducted', 'updated_at'])

    if _is_collector(membership) and customer.assigned_collector_id is None:
        customer.assigned_collector = membership
        customer.save(update_fields=['assigned_collector', 'updated_at'])

    if purchase.is_completed:
        complete_purchase(purchase=purchase, actor=actor)

    if purchase.down_payment > 0:
        now = timezone.now()
        payment = Payment.objects.create(
            purchase=purchase,
            amount=purchase.down_payment,
            payment_method=PaymentMethod.CASH,
            status=PaymentStatus.COMPLETED,
            collector=membership if _is_collector(membership) else None,
            recorded_by=actor,
            is_confirmed=True,
            confirmed_by=actor,
            confirmed_at=now,
            paid_at=now,
            notes='Down payment',
        )
        issue_progress_invoice(
            payment=payment,
            previous_balance=purchase.total_amount,
            confirmed_by=actor,
        )

    log_action(
        action='SALE_CREATED',
        entity=purchase,
        actor=actor,
        metadata={
            'purchaseNumber': purchase.purchase_number,
            'customerName': customer.full_name,
            'purchaseType': purchase_type,
            'totalAmount': str(purchase.total_amount),
            'downPayment': str(purchase.down_payment),
            'itemCount': len(lines),
        },
    )
    logger.info(
        "Sale %s created in %s: %s %s",
        purchase.purchase_number, shop.slug, purchase_type, purchase.total_amount,
    )
    return purchase
