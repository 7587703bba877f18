"""Shop lifecycle, run by business admins."""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.businesses.models import Business, Shop, ShopMember, ShopPolicy, ShopRole
from apps.purchases.models import Purchase
from apps.subscriptions.services import check_plan_limit

from .exceptions import (
    BusinessValidationError,
    DuplicateSlugError,
    DuplicateUserError,
    ShopHasPurchasesError,
    ShopNotFoundError,
)
from .validation import normalize_slug, normalize_email, require_password

logger = logging.getLogger(__name__)


def get_business_shop(*, business: Business, shop_id: UUID) -> Shop:
    try:
        return Shop.objects.get(id=shop_id, business=business)
    except Shop.DoesNotExist:
        raise ShopNotFoundError("Shop not found")


@transaction.atomic
def create_shop(
    *,
    actor: User,
    business: Business,
    name: str,
    slug: str,
    address: str = '',
    phone: str = '',
    admin_name: Optional[str] = None,
    admin_email: Optional[str] = None,
    admin_password: Optional[str] = None,
) -> tuple[Shop, Optional[User]]:
    """
    Create a shop with its default policy and, optionally, its shop admin.

    Returns:
        (shop, shop_admin_user or None)

    Raises:
        BusinessValidationError: Missing name, malformed slug, bad admin fields
        DuplicateSlugError: Slug taken by any shop on the platform
        DuplicateUserError: Admin email already registered
        PlanLimitExceededError: Business is at its plan's shop limit
    """
    name = (name or '').strip()
    if not name:
        raise BusinessValidationError("Shop name is required")

    slug = normalize_slug(slug, label="Shop")
    if Shop.objects.filter(slug=slug).exists():
        raise DuplicateSlugError("A shop with this slug already exists")

    create_admin = bool(admin_email or admin_name or admin_password)
    if create_admin:
        if not (admin_name or '').strip():
            raise BusinessValidationError("Shop admin name is required")
        admin_email = normalize_email(admin_email, message="Valid shop admin email is required")
        require_password(admin_password)
        if User.objects.filter(email=admin_email).exists():
            raise DuplicateUserError("A user with this email already exists")

    check_plan_limit(business=business, limit='max_shops', current=business.shops.count())

    shop = Shop.objects.create(
        business=business,
        name=name,
        slug=slug,
        address=(address or '').strip(),
        phone=(phone or '').strip(),
    )
    ShopPolicy.objects.create(shop=shop)

    shop_admin = None
    if create_admin:
        shop_admin = User.objects.create_user(
            email=admin_email,
            password=admin_password,
            name=admin_name.strip(),
        )
        ShopMember.objects.create(shop=shop, user=shop_admin, role=ShopRole.SHOP_ADMIN)

    log_action(
        action='SHOP_CREATED',
        entity=shop,
        actor=actor,
        metadata={
            'shopName': shop.name,
            'shopSlug': shop.slug,
            'businessSlug': business.slug,
            'adminEmail': shop_admin.email if shop_admin else None,
        },
    )
    logger.info("Shop %s created in business %s", shop.slug, business.slug)
    return shop, shop_admin


@transaction.atomic
def update_shop(*, actor: User, shop: Shop, name=None, address=None, phone=None) -> Shop:
    changes = {}
    if name is not None:
        name = name.strip()
        if not name:
            raise BusinessValidationError("Shop name is required")
        changes['name'] = name
    if address is not None:
        changes['address'] = address.strip()
    if phone is not None:
        changes['phone'] = phone.strip()

    for key, value in changes.items():
        setattr(shop, key, value)
    if changes:
        shop.save(update_fields=[*changes.keys(), 'updated_at'])
        log_action(action='SHOP_UPDATED', entity=shop, actor=actor, metadata={'changes': changes})
    return shop


@transaction.atomic
def set_shop_active(*, actor: User, shop: Shop, is_active: bool) -> Shop:
    previous = shop.is_active
    shop.is_active = is_active
    shop.save(update_fields=['is_active', 'updated_at'])

    log_action(
        action='SHOP_ACTIVATED' if is_active else 'SHOP_SUSPENDED',
        entity=shop,
        actor=actor,
        metadata={
            'shopName': shop.name,
            'shopSlug': shop.slug,
            'previousStatus': previous,
            'newStatus': is_active,
        },
    )
    logger.info("Shop %s %s", shop.slug, 'activated' if is_active else 'suspended')
    return shop


@transaction.atomic
def delete_shop(*, actor: User, shop: Shop) -> None:
    """
    Delete a shop that has no purchase history.

    Raises:
        ShopHasPurchasesError: The shop has purchases; suspend it instead
    """
    if Purchase.objects.filter(shop=shop).exists():
        raise ShopHasPurchasesError("Cannot delete a shop with existing purchases")

    metadata = {'shopName': shop.name, 'shopSlug': shop.slug, 'businessSlug': shop.business.slug}

    # Logged first; deleting the shop nulls the entry's shop link and keeps the business
    log_action(action='SHOP_DELETED', entity=shop, actor=actor, metadata=metadata)
    shop.delete()
    logger.info("Shop %s deleted", metadata['shopSlug'])
