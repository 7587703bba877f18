"""Domain-specific exceptions for subscription services."""


class SubscriptionServiceError(Exception):
    """Base exception for subscription services."""
    pass


class PlanNotFoundError(SubscriptionServiceError):
    pass


class SubscriptionNotFoundError(SubscriptionServiceError):
    pass


class PlanValidationError(SubscriptionServiceError):
    """Raised when plan or subscription input fails validation."""
    pass


class PlanLimitExceededError(SubscriptionServiceError):
    """Raised when a business would exceed a limit of its plan."""
    pass
