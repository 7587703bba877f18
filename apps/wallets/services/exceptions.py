"""Domain exceptions for customer wallets."""


class WalletServiceError(Exception):
    """Base exception for wallet service errors."""
    pass


class WalletPermissionError(WalletServiceError):
    """Caller may not load wallets in this shop."""
    pass


class WalletCustomerNotFoundError(WalletServiceError):
    pass


class TransactionNotFoundError(WalletServiceError):
    """Transaction not found, or no longer PENDING."""
    pass


class WalletValidationError(WalletServiceError):
    pass


class InsufficientBalanceError(WalletValidationError):
    pass
