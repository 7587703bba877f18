"""Services for products, stock and product workbooks."""

from .exceptions import (
    InventoryServiceError,
    ProductNotFoundError,
    ProductValidationError,
    DuplicateSkuError,
    InsufficientStockError,
    SpreadsheetError,
)
from .product_management import (
    list_shop_products,
    get_shop_product,
    create_product,
    update_product,
    delete_product,
    toggle_product_status,
    get_price_for_type,
    list_categories,
    create_category,
)
from .stock_management import adjust_stock, deduct_stock
from .spreadsheets import (
    XLSX_CONTENT_TYPE,
    workbook_to_bytes,
    export_products,
    import_products,
    products_template,
)

__all__ = [
    # Exceptions
    'InventoryServiceError',
    'ProductNotFoundError',
    'ProductValidationError',
    'DuplicateSkuError',
    'InsufficientStockError',
    'SpreadsheetError',
    # Products
    'list_shop_products',
    'get_shop_product',
    'create_product',
    'update_product',
    'delete_product',
    'toggle_product_status',
    'get_price_for_type',
    'list_categories',
    'create_category',
    # Stock
    'adjust_stock',
    'deduct_stock',
    # Workbooks
    'XLSX_CONTENT_TYPE',
    'workbook_to_bytes',
    'export_products',
    'import_products',
    'products_template',
]
