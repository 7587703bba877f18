"""
Tenant resolution.

Every business- or shop-scoped request resolves its slug through these
functions, which decide the role the caller acts under:

- platform admins pass every check
- business admins act as shop admins in every shop of their business
- shop members act under their own membership role
"""

from typing import Optional, Sequence

from apps.accounts.models import User
from apps.businesses.models import (
    Business,
    BusinessMember,
    BusinessRole,
    Shop,
    ShopMember,
    ShopRole,
)

from .exceptions import (
    BusinessNotFoundError,
    ShopNotFoundError,
    TenantAccessDeniedError,
)


def resolve_business_admin(*, user: User, business_slug: str) -> Business:
    """
    Return the business when ``user`` administers it.

    Raises:
        BusinessNotFoundError: Unknown slug
        TenantAccessDeniedError: Caller is not a business admin
    """
    try:
        business = Business.objects.get(slug=business_slug)
    except Business.DoesNotExist:
        raise BusinessNotFoundError("Business not found")

    if user.is_platform_admin:
        return business

    if not business.is_active:
        raise TenantAccessDeniedError("This business is suspended")

    if not business.has_admin(user):
        raise TenantAccessDeniedError("You are not an admin of this business")

    return business


def resolve_shop_access(
    *,
    user: User,
    shop_slug: str,
    roles: Optional[Sequence[str]] = None,
) -> tuple[Shop, Optional[ShopMember]]:
    """
    Resolve a shop and the caller's membership in it.

    Args:
        user: Caller
        shop_slug: Shop slug from the URL
        roles: Shop roles allowed for the operation; None allows any role.
            Business admins satisfy any role set that includes SHOP_ADMIN.

    Returns:
        (shop, membership). Membership is None for business and platform
        admins acting without a shop membership of their own.

    Raises:
        ShopNotFoundError: Unknown slug
        TenantAccessDeniedError: No suitable role, or shop/membership inactive
    """
    try:
        shop = Shop.objects.select_related('business').get(slug=shop_slug)
    except Shop.DoesNotExist:
        raise ShopNotFoundError("Shop not found")

    membership = (
        ShopMember.objects
        .select_related('user')
        .filter(shop=shop, user=user, is_active=True)
        .first()
    )

    if membership and (roles is None or membership.role in roles):
        if not shop.is_active or not shop.business.is_active:
            raise TenantAccessDeniedError("This shop is suspended")
        return shop, membership

    admin_allowed = roles is None or ShopRole.SHOP_ADMIN in roles
    if admin_allowed and shop.business.has_admin(user):
        if not user.is_platform_admin and not shop.business.is_active:
            raise TenantAccessDeniedError("This business is suspended")
        return shop, membership

    raise TenantAccessDeniedError("You do not have access to this shop")


def get_user_memberships(*, user: User) -> dict:
    """Summarise where a user can act; returned on login so clients can route."""
    businesses = (
        BusinessMember.objects
        .filter(user=user, is_active=True, role=BusinessRole.BUSINESS_ADMIN)
        .select_related('business')
    )
    shops = (
        ShopMember.objects
        .filter(user=user, is_active=True)
        .select_related('shop')
    )
    return {
        'is_platform_admin': user.is_platform_admin,
        'businesses': [
            {
                'slug': m.business.slug,
                'name': m.business.name,
                'role': m.role,
                'is_active': m.business.is_active,
            }
            for m in businesses
        ],
        'shops': [
            {
                'slug': m.shop.slug,
                'name': m.shop.name,
                'role': m.role,
                'can_load_wallet': m.can_load_wallet,
                'is_active': m.shop.is_active,
            }
            for m in shops
        ],
    }
