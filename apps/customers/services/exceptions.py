"""Domain-specific exceptions for customer services."""


class CustomerServiceError(Exception):
    """Base exception for customer services."""
    pass


class CustomerNotFoundError(CustomerServiceError):
    pass


class CustomerValidationError(CustomerServiceError):
    """Raised when customer input fails validation."""
    pass


class DuplicateCustomerError(CustomerValidationError):
    """Raised when the phone number is already used in the shop."""
    pass


class InvalidCollectorError(CustomerValidationError):
    """Raised when the collector is not an active collector of the shop."""
    pass


class CustomerHasPurchasesError(CustomerServiceError):
    """Raised when deleting a customer with purchase history."""
    pass
