"""
Business lifecycle, run by platform admins.

Creating a business optionally provisions its first business admin and a
trial subscription on the default plan.
"""

import logging
from typing import Optional

from django.db import transaction

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.businesses.models import Business, BusinessMember, BusinessRole
from apps.customers.models import Customer
from apps.inventory.models import Product
from apps.purchases.models import Purchase
from apps.subscriptions.services import start_trial_subscription

from .exceptions import BusinessValidationError, DuplicateSlugError, DuplicateUserError
from .validation import normalize_slug, normalize_email, require_password

logger = logging.getLogger(__name__)


@transaction.atomic
def create_business(
    *,
    actor: User,
    name: str,
    slug: str,
    email: str = '',
    phone: str = '',
    address: str = '',
    owner_name: Optional[str] = None,
    owner_email: Optional[str] = None,
    owner_password: Optional[str] = None,
) -> Business:
    """
    Create a business, optionally with its owner account.

    The owner is created only when ``owner_email`` is given; name and
    password are then required as well.

    Raises:
        BusinessValidationError: Missing name, malformed slug or owner fields
        DuplicateSlugError: Slug already taken
        DuplicateUserError: Owner email already registered
    """
    name = (name or '').strip()
    if not name:
        raise BusinessValidationError("Business name is required")

    slug = normalize_slug(slug, label="Business")
    if Business.objects.filter(slug=slug).exists():
        raise DuplicateSlugError("A business with this slug already exists")

    owner = None
    if owner_email:
        owner_email = normalize_email(owner_email, message="Valid owner email is required")
        if not (owner_name or '').strip():
            raise BusinessValidationError("Owner name is required")
        require_password(owner_password)
        if User.objects.filter(email=owner_email).exists():
            raise DuplicateUserError("A user with this email already exists")

    business = Business.objects.create(
        name=name,
        slug=slug,
        email=(email or '').strip(),
        phone=(phone or '').strip(),
        address=(address or '').strip(),
    )

    if owner_email:
        owner = User.objects.create_user(
            email=owner_email,
            password=owner_password,
            name=owner_name.strip(),
        )
        BusinessMember.objects.create(
            business=business,
            user=owner,
            role=BusinessRole.BUSINESS_ADMIN,
        )

    start_trial_subscription(business=business)

    log_action(
        action='BUSINESS_CREATED',
        entity=business,
        actor=actor,
        business=business,
        metadata={
            'name': business.name,
            'slug': business.slug,
            'ownerEmail': owner.email if owner else None,
        },
    )
    logger.info("Business %s created by %s", business.slug, actor.id)
    return business


@transaction.atomic
def set_business_active(*, actor: User, business: Business, is_active: bool) -> Business:
    previous = business.is_active
    business.is_active = is_active
    business.save(update_fields=['is_active', 'updated_at'])

    log_action(
        action='BUSINESS_ACTIVATED' if is_active else 'BUSINESS_SUSPENDED',
        entity=business,
        actor=actor,
        business=business,
        metadata={'previousStatus': previous, 'newStatus': is_active},
    )
    return business


@transaction.atomic
def update_business(*, actor: User, business: Business, **fields) -> Business:
    """Update profile fields (name, email, phone, address); slug is immutable."""
    allowed = {'name', 'email', 'phone', 'address', 'country'}
    changes = {}
    for key, value in fields.items():
        if key not in allowed or value is None:
            continue
        value = value.strip()
        if key == 'name' and not value:
            raise BusinessValidationError("Business name is required")
        if getattr(business, key) != value:
            changes[key] = value
            setattr(business, key, value)

    if changes:
        business.save(update_fields=[*changes.keys(), 'updated_at'])
        log_action(
            action='BUSINESS_UPDATED',
            entity=business,
            actor=actor,
            business=business,
            metadata={'changes': changes},
        )
    return business


def get_business_stats(*, business: Business) -> dict:
    shop_count = business.shops.count()
    active_shops = business.shops.filter(is_active=True).count()

    return {
        'totalShops': shop_count,
        'activeShops': active_shops,
        'suspendedShops': shop_count - active_shops,
        'totalProducts': Product.objects.filter(business=business).count(),
        'totalCustomers': Customer.objects.filter(shop__business=business).count(),
        'totalPurchases': Purchase.objects.filter(shop__business=business).count(),
    }
