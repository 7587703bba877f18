"""Services for hire-purchase sales, payments and purchase workbooks."""

from .exceptions import (
    PurchaseServiceError,
    PurchaseNotFoundError,
    PurchaseValidationError,
    PaymentNotFoundError,
    PaymentValidationError,
)
from .pricing import calculate_interest, installment_count, price_agreement, next_purchase_number
from .lifecycle import apply_amount, complete_purchase, settle_payment, refresh_overdue_statuses
from .sales import list_purchases, get_purchase, create_purchase
from .payments import (
    record_payment,
    record_collector_payment,
    record_wallet_payment,
    list_pending_payments,
    list_collector_payments,
    confirm_payment,
    reject_payment,
    get_payment_receipt,
)
from .spreadsheets import export_purchases, import_purchases, purchases_template

__all__ = [
    # Exceptions
    'PurchaseServiceError',
    'PurchaseNotFoundError',
    'PurchaseValidationError',
    'PaymentNotFoundError',
    'PaymentValidationError',
    # Pricing
    'calculate_interest',
    'installment_count',
    'price_agreement',
    'next_purchase_number',
    # Lifecycle
    'apply_amount',
    'complete_purchase',
    'settle_payment',
    'refresh_overdue_statuses',
    # Sales
    'list_purchases',
    'get_purchase',
    'create_purchase',
    # Payments
    'record_payment',
    'record_collector_payment',
    'record_wallet_payment',
    'list_pending_payments',
    'list_collector_payments',
    'confirm_payment',
    'reject_payment',
    'get_payment_receipt',
    # Workbooks
    'export_purchases',
    'import_purchases',
    'purchases_template',
]
