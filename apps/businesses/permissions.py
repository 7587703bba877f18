"""
Tenant-scoped permissions.

Each class resolves the slug in the URL kwargs and, on success, stores the
resolved tenant on the view (``view.business`` or ``view.shop`` plus
``view.membership``) so handlers never resolve it twice. Unknown slugs raise
404; a known tenant the caller cannot act in is a plain 403.
"""

from rest_framework import permissions
from rest_framework.exceptions import NotFound

from .models import ShopRole
from .services import (
    resolve_business_admin,
    resolve_shop_access,
    BusinessNotFoundError,
    ShopNotFoundError,
    TenantAccessDeniedError,
)


class IsPlatformAdmin(permissions.BasePermission):
    """
    Permission: User must be a platform (super) admin.
    """
    message = 'Platform admin access required.'

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_platform_admin)


class IsBusinessAdmin(permissions.BasePermission):
    """
    Permission: User must administer the business in ``business_slug``.
    """
    message = 'You are not an admin of this business.'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        try:
            view.business = resolve_business_admin(
                user=request.user,
                business_slug=view.kwargs['business_slug'],
            )
        except BusinessNotFoundError as e:
            raise NotFound(str(e))
        except TenantAccessDeniedError as e:
            self.message = str(e)
            return False
        return True


class HasShopRole(permissions.BasePermission):
    """
    Permission: User must hold one of ``allowed_roles`` in the shop in ``shop_slug``.

    Business admins of the owning business pass whenever SHOP_ADMIN is allowed.
    """
    allowed_roles = None
    message = 'You do not have access to this shop.'

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        try:
            view.shop, view.membership = resolve_shop_access(
                user=request.user,
                shop_slug=view.kwargs['shop_slug'],
                roles=self.allowed_roles,
            )
        except ShopNotFoundError as e:
            raise NotFound(str(e))
        except TenantAccessDeniedError as e:
            self.message = str(e)
            return False
        return True


class IsShopMember(HasShopRole):
    allowed_roles = (ShopRole.SHOP_ADMIN, ShopRole.SALES_STAFF, ShopRole.DEBT_COLLECTOR)


class IsShopStaff(HasShopRole):
    """Shop admins and sales staff."""
    allowed_roles = (ShopRole.SHOP_ADMIN, ShopRole.SALES_STAFF)


class IsShopAdmin(HasShopRole):
    allowed_roles = (ShopRole.SHOP_ADMIN,)


class IsDebtCollector(HasShopRole):
    allowed_roles = (ShopRole.DEBT_COLLECTOR,)


class IsShopBusinessAdmin(HasShopRole):
    """Business admins of the shop's business only (not plain shop admins)."""
    allowed_roles = (ShopRole.SHOP_ADMIN,)
    message = 'Business admin access required.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return view.shop.business.has_admin(request.user)
