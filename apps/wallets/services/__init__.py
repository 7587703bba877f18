"""Services for customer wallets."""

from .exceptions import (
    WalletServiceError,
    WalletPermissionError,
    WalletCustomerNotFoundError,
    TransactionNotFoundError,
    WalletValidationError,
    InsufficientBalanceError,
)
from .wallet_management import (
    can_load_wallet,
    create_deposit,
    confirm_transaction,
    reject_transaction,
    adjust_wallet,
    list_transactions,
    get_customer_wallet,
    get_wallet_stats,
)

__all__ = [
    # Exceptions
    'WalletServiceError',
    'WalletPermissionError',
    'WalletCustomerNotFoundError',
    'TransactionNotFoundError',
    'WalletValidationError',
    'InsufficientBalanceError',
    # Wallets
    'can_load_wallet',
    'create_deposit',
    'confirm_transaction',
    'reject_transaction',
    'adjust_wallet',
    'list_transactions',
    'get_customer_wallet',
    'get_wallet_stats',
]
