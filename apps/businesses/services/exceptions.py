"""Domain-specific exceptions for tenancy services."""

from apps.subscriptions.services.exceptions import PlanLimitExceededError  # noqa: F401


class BusinessServiceError(Exception):
    """Base exception for business and shop services."""
    pass


class BusinessNotFoundError(BusinessServiceError):
    """Raised when a business slug does not resolve."""
    pass


class ShopNotFoundError(BusinessServiceError):
    """Raised when a shop slug or id does not resolve."""
    pass


class TenantAccessDeniedError(BusinessServiceError):
    """Raised when the caller holds no suitable role in the tenant."""
    pass


class BusinessValidationError(BusinessServiceError):
    """Raised when input fails a business rule (names, slugs, ranges)."""
    pass


class DuplicateSlugError(BusinessValidationError):
    """Raised when a business or shop slug is taken."""
    pass


class DuplicateUserError(BusinessValidationError):
    """Raised when a new staff account would reuse an existing email."""
    pass


class MemberNotFoundError(BusinessServiceError):
    """Raised when a shop member (or collector) does not exist in the shop."""
    pass


class CollectorHasCustomersError(BusinessServiceError):
    """Raised when deleting a collector who still has assigned customers."""
    pass


class ShopHasPurchasesError(BusinessServiceError):
    """Raised when deleting a shop that already has purchase history."""
    pass
