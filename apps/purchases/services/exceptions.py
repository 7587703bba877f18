"""
Domain exceptions for purchases and payments.

Views map them to responses: validation errors to 400, not-found errors
to 404.
"""


class PurchaseServiceError(Exception):
    """Base exception for purchase service errors."""
    pass


class PurchaseNotFoundError(PurchaseServiceError):
    """Purchase (or its customer) not found in this shop."""
    pass


class PurchaseValidationError(PurchaseServiceError):
    """Sale or import input rejected."""
    pass


class PaymentNotFoundError(PurchaseServiceError):
    """Payment not found, or no longer awaiting confirmation."""
    pass


class PaymentValidationError(PurchaseServiceError):
    """Payment amount or state rejected."""
    pass
