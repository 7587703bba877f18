"""Services for shop customers."""

from .exceptions import (
    CustomerServiceError,
    CustomerNotFoundError,
    CustomerValidationError,
    DuplicateCustomerError,
    InvalidCollectorError,
    CustomerHasPurchasesError,
)
from .customer_management import (
    normalize_phone,
    list_customers,
    get_customer,
    create_customer,
    update_customer,
    delete_customer,
    toggle_customer_status,
    assign_collector,
    list_customer_purchases,
)

__all__ = [
    # Exceptions
    'CustomerServiceError',
    'CustomerNotFoundError',
    'CustomerValidationError',
    'DuplicateCustomerError',
    'InvalidCollectorError',
    'CustomerHasPurchasesError',
    # Customers
    'normalize_phone',
    'list_customers',
    'get_customer',
    'create_customer',
    'update_customer',
    'delete_customer',
    'toggle_customer_status',
    'assign_collector',
    'list_customer_purchases',
]
