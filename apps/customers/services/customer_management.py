"""
Customer records of a shop.

Collectors only ever see (and act on) the customers assigned to them; the
``membership`` argument carries the caller's role for that filter.
"""

import logging
import re
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, Q, Sum, DecimalField, Value
from django.db.models.functions import Coalesce

from apps.audit.services import log_action
from apps.businesses.models import Shop, ShopMember, ShopRole
from apps.customers.models import Customer, PaymentPreference
from apps.purchases.models import Purchase, PurchaseStatus
from apps.subscriptions.services import check_plan_limit

from .exceptions import (
    CustomerHasPurchasesError,
    CustomerNotFoundError,
    CustomerValidationError,
    DuplicateCustomerError,
    InvalidCollectorError,
)

logger = logging.getLogger(__name__)

OPTIONAL_TEXT_FIELDS = ('email', 'id_type', 'id_number', 'address', 'city', 'region', 'notes')
OPEN_STATUSES = (PurchaseStatus.PENDING, PurchaseStatus.ACTIVE, PurchaseStatus.OVERDUE)

_MONEY = DecimalField(max_digits=14, decimal_places=2)


def normalize_phone(phone) -> str:
    return re.sub(r'\s+', '', (phone or '').strip())


def _collector_scope(queryset, membership: Optional[ShopMember]):
    if membership is not None and membership.role == ShopRole.DEBT_COLLECTOR:
        return queryset.filter(assigned_collector=membership)
    return queryset


def list_customers(*, shop: Shop, membership: Optional[ShopMember] = None, search: Optional[str] = None):
    """Customers of the shop annotated with their purchase summary."""
    queryset = (
        Customer.objects
        .filter(shop=shop)
        .select_related('assigned_collector__user')
        .annotate(
            total_purchases=Count('purchases', distinct=True),
            active_purchases=Count(
                'purchases',
                filter=Q(purchases__status__in=OPEN_STATUSES),
                distinct=True,
            ),
            total_owed=Coalesce(
                Sum('purchases__outstanding_balance'), Value(Decimal('0.00')), output_field=_MONEY
            ),
            total_paid=Coalesce(
                Sum('purchases__amount_paid'), Value(Decimal('0.00')), output_field=_MONEY
            ),
        )
        .order_by('-created_at')
    )
    if search:
        queryset = queryset.filter(
            Q(first_name__icontains=search) |
            Q(last_name__icontains=search) |
            Q(phone__icontains=search)
        )
    return _collector_scope(queryset, membership)


def get_customer(
    *,
    shop: Shop,
    customer_id: UUID,
    membership: Optional[ShopMember] = None,
    for_update: bool = False,
) -> Customer:
    queryset = Customer.objects.filter(shop=shop, id=customer_id)
    if for_update:
        queryset = queryset.select_for_update()
    customer = _collector_scope(queryset, membership).first()
    if customer is None:
        raise CustomerNotFoundError("Customer not found")
    return customer


def _resolve_collector(shop: Shop, collector_id) -> Optional[ShopMember]:
    if not collector_id:
        return None
    collector = ShopMember.objects.filter(
        id=collector_id,
        shop=shop,
        role=ShopRole.DEBT_COLLECTOR,
        is_active=True,
    ).first()
    if collector is None:
        raise InvalidCollectorError("Invalid debt collector")
    return collector


def _check_phone(shop: Shop, phone: str, exclude_id=None) -> None:
    duplicates = Customer.objects.filter(shop=shop, phone=phone)
    if exclude_id:
        duplicates = duplicates.exclude(id=exclude_id)
    if duplicates.exists():
        raise DuplicateCustomerError("A customer with this phone number already exists")


@transaction.atomic
def create_customer(
    *,
    actor,
    shop: Shop,
    first_name: str,
    last_name: str,
    phone: str,
    membership: Optional[ShopMember] = None,
    preferred_payment: str = PaymentPreference.BOTH,
    assigned_collector_id: Optional[UUID] = None,
    **optional,
) -> Customer:
    """
    Register a customer in the shop.

    A collector creating a customer is assigned to it automatically.

    Raises:
        CustomerValidationError: Missing names or phone, bad preference
        DuplicateCustomerError: Phone already used in this shop
        InvalidCollectorError: Collector is not an active collector of the shop
        PlanLimitExceededError: Business at its plan's customer limit
    """
    first_name = (first_name or '').strip()
    last_name = (last_name or '').strip()
    phone = normalize_phone(phone)
    if not first_name:
        raise CustomerValidationError("First name is required")
    if not last_name:
        raise CustomerValidationError("Last name is required")
    if not phone:
        raise CustomerValidationError("Phone number is required")
    if preferred_payment not in PaymentPreference.values:
        raise CustomerValidationError("Invalid payment preference")

    _check_phone(shop, phone)

    if membership is not None and membership.role == ShopRole.DEBT_COLLECTOR:
        collector = membership
    else:
        collector = _resolve_collector(shop, assigned_collector_id)

    check_plan_limit(
        business=shop.business,
        limit='max_customers',
        current=Customer.objects.filter(shop__business=shop.business).count(),
    )

    customer = Customer.objects.create(
        shop=shop,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        preferred_payment=preferred_payment,
        assigned_collector=collector,
        **{
            field: (optional.get(field) or '').strip()
            for field in OPTIONAL_TEXT_FIELDS
        },
    )

    log_action(
        action='CUSTOMER_CREATED',
        entity=customer,
        actor=actor,
        metadata={'customerName': customer.full_name, 'customerPhone': customer.phone},
    )
    logger.info("Customer %s created in shop %s", customer.id, shop.slug)
    return customer


@transaction.atomic
def update_customer(*, actor, shop: Shop, customer_id: UUID, **data) -> Customer:
    """
    Update the given fields of a customer; omitted fields are left alone.

    Raises:
        CustomerNotFoundError: Unknown customer
        CustomerValidationError: Blank names/phone
        DuplicateCustomerError: New phone already used in this shop
        InvalidCollectorError: Collector is not an active collector of the shop
    """
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    changes = {}

    for field in ('first_name', 'last_name'):
        if field in data:
            value = (data[field] or '').strip()
            if not value:
                label = 'First name' if field == 'first_name' else 'Last name'
                raise CustomerValidationError(f"{label} is required")
            changes[field] = value

    if 'phone' in data:
        phone = normalize_phone(data['phone'])
        if not phone:
            raise CustomerValidationError("Phone number is required")
        if phone != customer.phone:
            _check_phone(shop, phone, exclude_id=customer.id)
        changes['phone'] = phone

    if 'preferred_payment' in data:
        if data['preferred_payment'] not in PaymentPreference.values:
            raise CustomerValidationError("Invalid payment preference")
        changes['preferred_payment'] = data['preferred_payment']

    if 'assigned_collector_id' in data:
        changes['assigned_collector'] = _resolve_collector(shop, data['assigned_collector_id'])

    for field in OPTIONAL_TEXT_FIELDS:
        if field in data:
            changes[field] = (data[field] or '').strip()

    for key, value in changes.items():
        setattr(customer, key, value)
    customer.save()

    log_action(
        action='CUSTOMER_UPDATED',
        entity=customer,
        actor=actor,
        metadata={
            'customerName': customer.full_name,
            'changes': sorted(changes.keys()),
        },
    )
    return customer


@transaction.atomic
def delete_customer(*, actor, shop: Shop, customer_id: UUID) -> None:
    """
    Raises:
        CustomerNotFoundError: Unknown customer
        CustomerHasPurchasesError: Customer has purchases; deactivate instead
    """
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    if Purchase.objects.filter(customer=customer).exists():
        raise CustomerHasPurchasesError("Cannot delete a customer with existing purchases")

    log_action(
        action='CUSTOMER_DELETED',
        entity=customer,
        actor=actor,
        metadata={'customerName': customer.full_name, 'customerPhone': customer.phone},
    )
    customer.delete()
    logger.info("Customer %s deleted from shop %s", customer_id, shop.slug)


@transaction.atomic
def toggle_customer_status(*, actor, shop: Shop, customer_id: UUID) -> Customer:
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    customer.is_active = not customer.is_active
    customer.save(update_fields=['is_active', 'updated_at'])

    log_action(
        action='CUSTOMER_ACTIVATED' if customer.is_active else 'CUSTOMER_DEACTIVATED',
        entity=customer,
        actor=actor,
        metadata={'customerName': customer.full_name},
    )
    return customer


@transaction.atomic
def assign_collector(*, actor, shop: Shop, customer_id: UUID, collector_id: Optional[UUID]) -> Customer:
    """Assign a collector to the customer, or unassign with ``collector_id=None``."""
    customer = get_customer(shop=shop, customer_id=customer_id, for_update=True)
    collector = _resolve_collector(shop, collector_id)
    previous = customer.assigned_collector_id

    customer.assigned_collector = collector
    customer.save(update_fields=['assigned_collector', 'updated_at'])

    log_action(
        action='CUSTOMER_COLLECTOR_ASSIGNED',
        entity=customer,
        actor=actor,
        metadata={
            'customerName': customer.full_name,
            'previousCollectorId': str(previous) if previous else None,
            'collectorId': str(collector.id) if collector else None,
            'collectorName': collector.user.get_display_name() if collector else None,
        },
    )
    return customer


def list_customer_purchases(*, customer: Customer):
    return (
        Purchase.objects
        .filter(customer=customer)
        .prefetch_related('items', 'payments')
        .order_by('-created_at')
    )
