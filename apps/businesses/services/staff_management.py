"""
Shop staff and debt collectors.

Debt collectors are shop members with the DEBT_COLLECTOR role; the
collector-specific functions add the checks that role needs (assigned
customers, collection totals).
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count, OuterRef, Subquery, Sum, DecimalField, Value
from django.db.models.functions import Coalesce

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.businesses.models import Shop, ShopMember, ShopRole
from apps.customers.models import Customer
from apps.purchases.models import Payment, PaymentStatus

from .exceptions import (
    BusinessValidationError,
    CollectorHasCustomersError,
    DuplicateUserError,
    MemberNotFoundError,
)
from .validation import normalize_email, require_password

logger = logging.getLogger(__name__)

STAFF_ROLES = (ShopRole.SHOP_ADMIN, ShopRole.SALES_STAFF, ShopRole.DEBT_COLLECTOR)


def get_shop_member(*, shop: Shop, member_id: UUID, role: Optional[str] = None) -> ShopMember:
    queryset = ShopMember.objects.select_related('user').filter(shop=shop, id=member_id)
    if role:
        queryset = queryset.filter(role=role)
    member = queryset.first()
    if member is None:
        raise MemberNotFoundError(
            "Debt collector not found" if role == ShopRole.DEBT_COLLECTOR else "Staff member not found"
        )
    return member


def list_shop_members(*, shop: Shop, role: Optional[str] = None):
    queryset = ShopMember.objects.filter(shop=shop).select_related('user').order_by('role', 'created_at')
    if role:
        queryset = queryset.filter(role=role)
    return queryset


@transaction.atomic
def add_shop_member(
    *,
    actor: User,
    shop: Shop,
    email: str,
    role: str,
    name: str = '',
    password: Optional[str] = None,
    can_load_wallet: bool = False,
) -> ShopMember:
    """
    Add a user to a shop, creating the account when the email is new.

    Raises:
        BusinessValidationError: Bad role/email, or new account without name/password
        DuplicateUserError: User is already a member of this shop
    """
    if role not in STAFF_ROLES:
        raise BusinessValidationError("Invalid role")

    email = normalize_email(email)
    user = User.objects.filter(email=email).first()

    if user is None:
        if not name.strip():
            raise BusinessValidationError("Name is required")
        require_password(password)
        user = User.objects.create_user(email=email, password=password, name=name.strip())
    elif ShopMember.objects.filter(shop=shop, user=user).exists():
        raise DuplicateUserError("This user is already a member of this shop")

    member = ShopMember.objects.create(
        shop=shop,
        user=user,
        role=role,
        can_load_wallet=can_load_wallet,
    )

    log_action(
        action='STAFF_ADDED',
        entity=member,
        actor=actor,
        metadata={'email': user.email, 'role': role},
    )
    logger.info("Added %s to shop %s as %s", user.id, shop.slug, role)
    return member


@transaction.atomic
def set_member_active(*, actor: User, member: ShopMember, is_active: bool) -> ShopMember:
    member.is_active = is_active
    member.save(update_fields=['is_active', 'updated_at'])

    log_action(
        action='STAFF_ACTIVATED' if is_active else 'STAFF_DEACTIVATED',
        entity=member,
        actor=actor,
        metadata={'email': member.user.email, 'role': member.role},
    )
    return member


@transaction.atomic
def toggle_wallet_permission(*, actor: User, member: ShopMember) -> ShopMember:
    """Flip whether a staff member may create wallet deposits."""
    member.can_load_wallet = not member.can_load_wallet
    member.save(update_fields=['can_load_wallet', 'updated_at'])

    log_action(
        action='WALLET_PERMISSION_GRANTED' if member.can_load_wallet else 'WALLET_PERMISSION_REVOKED',
        entity=member,
        actor=actor,
        metadata={'email': member.user.email, 'canLoadWallet': member.can_load_wallet},
    )
    return member


# =============================================================================
# Debt collectors
# =============================================================================

def list_debt_collectors(*, shop: Shop):
    """Collectors annotated with assigned customer count and confirmed collections."""
    collected = (
        Payment.objects
        .filter(collector=OuterRef('pk'), status=PaymentStatus.COMPLETED)
        .values('collector')
        .annotate(total=Sum('amount'))
        .values('total')
    )
    return (
        ShopMember.objects
        .filter(shop=shop, role=ShopRole.DEBT_COLLECTOR)
        .select_related('user')
        .annotate(
            assigned_customers_count=Count('assigned_customers', distinct=True),
            total_collected=Coalesce(
                Subquery(collected, output_field=DecimalField(max_digits=14, decimal_places=2)),
                Value(Decimal('0.00')),
                output_field=DecimalField(max_digits=14, decimal_places=2),
            ),
        )
        .order_by('-created_at')
    )


@transaction.atomic
def create_debt_collector(
    *,
    actor: User,
    shop: Shop,
    name: str,
    email: str,
    password: str,
    phone: str = '',
) -> ShopMember:
    """
    Create a collector account and its DEBT_COLLECTOR membership.

    Raises:
        BusinessValidationError: Missing name, invalid email or short password
        DuplicateUserError: Email registered, or already a member of this shop
    """
    name = (name or '').strip()
    if not name:
        raise BusinessValidationError("Name is required")
    email = normalize_email(email)
    require_password(password)

    existing = User.objects.filter(email=email).first()
    if existing is not None:
        if ShopMember.objects.filter(shop=shop, user=existing).exists():
            raise DuplicateUserError("This user is already a member of this shop")
        raise DuplicateUserError("A user with this email already exists")

    user = User.objects.create_user(email=email, password=password, name=name, phone=(phone or '').strip())
    member = ShopMember.objects.create(shop=shop, user=user, role=ShopRole.DEBT_COLLECTOR)

    log_action(
        action='DEBT_COLLECTOR_CREATED',
        entity=member,
        actor=actor,
        metadata={'shopName': shop.name, 'collectorName': name, 'collectorEmail': email},
    )
    logger.info("Debt collector %s created in shop %s", member.id, shop.slug)
    return member


@transaction.atomic
def toggle_debt_collector_status(*, actor: User, shop: Shop, collector_id: UUID) -> ShopMember:
    collector = get_shop_member(shop=shop, member_id=collector_id, role=ShopRole.DEBT_COLLECTOR)
    collector.is_active = not collector.is_active
    collector.save(update_fields=['is_active', 'updated_at'])

    log_action(
        action='DEBT_COLLECTOR_ACTIVATED' if collector.is_active else 'DEBT_COLLECTOR_DEACTIVATED',
        entity=collector,
        actor=actor,
        metadata={'collectorName': collector.user.get_display_name()},
    )
    return collector


@transaction.atomic
def delete_debt_collector(*, actor: User, shop: Shop, collector_id: UUID) -> None:
    """
    Remove a collector's membership.

    Raises:
        MemberNotFoundError: No such collector in the shop
        CollectorHasCustomersError: Customers are still assigned
    """
    collector = get_shop_member(shop=shop, member_id=collector_id, role=ShopRole.DEBT_COLLECTOR)

    assigned = Customer.objects.filter(assigned_collector=collector).count()
    if assigned > 0:
        raise CollectorHasCustomersError(
            f"Cannot delete: {assigned} customers are assigned to this collector. "
            f"Reassign them first."
        )

    metadata = {'collectorName': collector.user.get_display_name(), 'collectorEmail': collector.user.email}
    log_action(action='DEBT_COLLECTOR_DELETED', entity=collector, actor=actor, metadata=metadata)
    collector.delete()
    logger.info("Debt collector %s removed from shop %s", collector_id, shop.slug)
