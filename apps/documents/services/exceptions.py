"""Domain-specific exceptions for document services."""


class DocumentServiceError(Exception):
    """Base exception for invoices and waybills."""
    pass


class DocumentNotFoundError(DocumentServiceError):
    pass


class WaybillValidationError(DocumentServiceError):
    """Raised when a waybill cannot be generated or updated."""
    pass


class WaybillExistsError(WaybillValidationError):
    pass
