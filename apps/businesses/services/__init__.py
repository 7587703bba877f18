"""Services for businesses, shops, staff and shop policy."""

from .exceptions import (
    BusinessServiceError,
    BusinessNotFoundError,
    ShopNotFoundError,
    TenantAccessDeniedError,
    BusinessValidationError,
    DuplicateSlugError,
    DuplicateUserError,
    MemberNotFoundError,
    CollectorHasCustomersError,
    ShopHasPurchasesError,
    PlanLimitExceededError,
)
from .tenancy import resolve_business_admin, resolve_shop_access, get_user_memberships
from .business_management import (
    create_business,
    set_business_active,
    update_business,
    get_business_stats,
)
from .shop_management import (
    get_business_shop,
    create_shop,
    update_shop,
    set_shop_active,
    delete_shop,
)
from .staff_management import (
    get_shop_member,
    list_shop_members,
    add_shop_member,
    set_member_active,
    toggle_wallet_permission,
    list_debt_collectors,
    create_debt_collector,
    toggle_debt_collector_status,
    delete_debt_collector,
)
from .policy_management import get_policy, upsert_policy

__all__ = [
    # Exceptions
    'BusinessServiceError',
    'BusinessNotFoundError',
    'ShopNotFoundError',
    'TenantAccessDeniedError',
    'BusinessValidationError',
    'DuplicateSlugError',
    'DuplicateUserError',
    'MemberNotFoundError',
    'CollectorHasCustomersError',
    'ShopHasPurchasesError',
    'PlanLimitExceededError',
    # Tenancy
    'resolve_business_admin',
    'resolve_shop_access',
    'get_user_memberships',
    # Businesses
    'create_business',
    'set_business_active',
    'update_business',
    'get_business_stats',
    # Shops
    'get_business_shop',
    'create_shop',
    'update_shop',
    'set_shop_active',
    'delete_shop',
    # Staff
    'get_shop_member',
    'list_shop_members',
    'add_shop_member',
    'set_member_active',
    'toggle_wallet_permission',
    'list_debt_collectors',
    'create_debt_collector',
    'toggle_debt_collector_status',
    'delete_debt_collector',
    # Policy
    'get_policy',
    'upsert_policy',
]
