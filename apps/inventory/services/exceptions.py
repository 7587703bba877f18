"""Domain-specific exceptions for inventory services."""


class InventoryServiceError(Exception):
    """Base exception for inventory services."""
    pass


class ProductNotFoundError(InventoryServiceError):
    pass


class ProductValidationError(InventoryServiceError):
    """Raised when product input fails validation."""
    pass


class DuplicateSkuError(ProductValidationError):
    pass


class InsufficientStockError(InventoryServiceError):
    """Raised when a sale or adjustment would take stock below zero."""
    pass


class SpreadsheetError(InventoryServiceError):
    """Raised when an uploaded workbook cannot be read."""
    pass
