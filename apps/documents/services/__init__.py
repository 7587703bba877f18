"""Services for progress invoices, receipts and waybills."""

from .exceptions import (
    DocumentServiceError,
    DocumentNotFoundError,
    WaybillValidationError,
    WaybillExistsError,
)
from .numbering import next_invoice_number, next_waybill_number, receipt_number
from .invoices import issue_progress_invoice, list_invoices, get_invoice
from .waybills import (
    generate_waybill,
    auto_generate_waybill,
    update_delivery_status,
    list_waybills,
    get_waybill,
    list_ready_for_delivery,
)

__all__ = [
    # Exceptions
    'DocumentServiceError',
    'DocumentNotFoundError',
    'WaybillValidationError',
    'WaybillExistsError',
    # Numbering
    'next_invoice_number',
    'next_waybill_number',
    'receipt_number',
    # Invoices
    'issue_progress_invoice',
    'list_invoices',
    'get_invoice',
    # Waybills
    'generate_waybill',
    'auto_generate_waybill',
    'update_delivery_status',
    'list_waybills',
    'get_waybill',
    'list_ready_for_delivery',
]
