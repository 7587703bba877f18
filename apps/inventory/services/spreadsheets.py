"""
Product workbooks (xlsx) for business admins: export, import and template.

Import rows are applied one by one, each in its own savepoint, so a bad
row is reported as "Row N: ..." without discarding the good ones.
"""

import logging
import zipfile
from io import BytesIO
from typing import Optional

from django.conf import settings
from django.db import transaction
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils.exceptions import InvalidFileException

from apps.audit.services import log_action
from apps.businesses.models import Business, Shop
from apps.inventory.models import Product, ShopProduct

from .exceptions import InventoryServiceError, SpreadsheetError
from .product_management import check_sku, get_or_create_category, parse_price, parse_quantity

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

PRODUCT_EXPORT_COLUMNS = [
    'Name', 'SKU', 'Category', 'Description', 'Cost Price', 'Cash Price',
    'Layaway Price', 'Credit Price', 'Base Price', 'Low Stock Threshold',
    'Active', 'Shop Slug', 'Stock',
]

PRODUCT_IMPORT_COLUMNS = [
    'Name', 'SKU', 'Category', 'Description', 'Cost Price', 'Cash Price',
    'Layaway Price', 'Credit Price', 'Base Price', 'Low Stock Threshold',
    'Shop Slug', 'Stock',
]

PRICE_COLUMNS = {
    'Cost Price': 'cost_price',
    'Cash Price': 'cash_price',
    'Layaway Price': 'layaway_price',
    'Credit Price': 'credit_price',
    'Base Price': 'price',
}


# =============================================================================
# Workbook helpers (shared with purchase workbooks)
# =============================================================================

def build_workbook(title: str, columns: list, rows=()) -> Workbook:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    sheet.append(columns)
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for row in rows:
        sheet.append(row)
    return workbook


def workbook_to_bytes(workbook: Workbook) -> bytes:
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def read_rows(uploaded_file):
    """
    Yield ``(row_number, {header: value})`` for every non-empty data row.

    Data starts on row 2; row 1 holds the headers.

    Raises:
        SpreadsheetError: The upload is not a readable xlsx workbook
    """
    try:
        workbook = load_workbook(filename=uploaded_file, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        logger.warning("Unreadable workbook upload: %s", e)
        raise SpreadsheetError("Invalid spreadsheet file")

    sheet = workbook.active
    rows = sheet.iter_rows(values_only=True)
    header = next(rows, None)
    if not header:
        raise SpreadsheetError("Spreadsheet is empty")
    headers = [str(h).strip() if h is not None else '' for h in header]

    for offset, values in enumerate(rows, start=2):
        if not values or all(v in (None, '') for v in values):
            continue
        yield offset, {
            headers[i]: values[i]
            for i in range(min(len(headers), len(values)))
            if headers[i]
        }


def cell_text(row: dict, column: str) -> str:
    value = row.get(column)
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def import_summary(created: int, errors: list, **extra) -> dict:
    limit = getattr(settings, 'IMPORT_ERROR_PREVIEW_LIMIT', 10)
    return {
        'created': created,
        **extra,
        'errors': errors[:limit],
        'totalErrors': len(errors),
    }


# =============================================================================
# Products
# =============================================================================

def export_products(*, business: Business, shop_slug: Optional[str] = None) -> Workbook:
    """One row per (product, shop) stock entry; unstocked products get one blank-shop row."""
    products = (
        Product.objects
        .filter(business=business)
        .select_related('category')
        .prefetch_related('stock_items__shop')
        .order_by('name')
    )

    rows = []
    for product in products:
        stock_items = [
            item for item in product.stock_items.all()
            if not shop_slug or item.shop.slug == shop_slug
        ]
        base = [
            product.name,
            product.sku,
            product.category.name if product.category else '',
            product.description,
            float(product.cost_price),
            float(product.cash_price),
            float(product.layaway_price),
            float(product.credit_price),
            float(product.price),
            product.low_stock_threshold,
            'Yes' if product.is_active else 'No',
        ]
        if stock_items:
            for item in stock_items:
                rows.append(base + [item.shop.slug, item.stock_quantity])
        elif not shop_slug:
            rows.append(base + ['', 0])

    return build_workbook('Products', PRODUCT_EXPORT_COLUMNS, rows)


def products_template() -> Workbook:
    example = [
        'Samsung A15', 'SAM-A15', 'Phones', '128GB, black',
        1500, 1800, 1950, 2100, 1800, 5, 'main-shop', 10,
    ]
    return build_workbook('Import Template', PRODUCT_IMPORT_COLUMNS, [example])


def _import_product_row(*, business: Business, shops: dict, row: dict) -> bool:
    """Apply one row; returns True when a product was created, False when updated."""
    name = cell_text(row, 'Name')
    if not name:
        raise InventoryServiceError("Product name is required")

    prices = {field: parse_price(row.get(column)) for column, field in PRICE_COLUMNS.items()}
    sku = cell_text(row, 'SKU')
    threshold_text = cell_text(row, 'Low Stock Threshold')
    threshold = parse_quantity(threshold_text) if threshold_text else None

    shop_slug = cell_text(row, 'Shop Slug').lower()
    shop = None
    if shop_slug:
        shop = shops.get(shop_slug)
        if shop is None:
            raise InventoryServiceError(f"Shop not found: {shop_slug}")

    product = Product.objects.filter(business=business, sku=sku).first() if sku else None
    created = product is None
    if created:
        product = Product(business=business, sku=check_sku(business=business, sku=sku))

    product.name = name
    product.description = cell_text(row, 'Description') or product.description
    category = get_or_create_category(business=business, name=cell_text(row, 'Category'))
    if category is not None:
        product.category = category
    for field, value in prices.items():
        setattr(product, field, value)
    if threshold is not None:
        product.low_stock_threshold = threshold
    product.save()

    if shop is not None:
        stock_text = cell_text(row, 'Stock')
        stock_item, _ = ShopProduct.objects.get_or_create(shop=shop, product=product)
        if stock_text:
            stock_item.stock_quantity = parse_quantity(stock_text)
            stock_item.save(update_fields=['stock_quantity', 'updated_at'])

    return created


def import_products(*, actor, business: Business, uploaded_file) -> dict:
    """
    Create or update products from a workbook.

    Rows with an existing SKU update that product; other rows create one.

    Raises:
        SpreadsheetError: The upload is not a readable workbook
    """
    shops = {shop.slug: shop for shop in Shop.objects.filter(business=business)}
    created = updated = 0
    errors = []

    for row_number, row in read_rows(uploaded_file):
        try:
            with transaction.atomic():
                if _import_product_row(business=business, shops=shops, row=row):
                    created += 1
                else:
                    updated += 1
        except InventoryServiceError as e:
            logger.warning("Product import row %s rejected: %s", row_number, e)
            errors.append(f"Row {row_number}: {e}")

    log_action(
        action='PRODUCTS_IMPORTED',
        entity=business,
        actor=actor,
        business=business,
        metadata={'created': created, 'updated': updated, 'errors': len(errors)},
    )
    logger.info("Imported products for %s: %s created, %s updated", business.slug, created, updated)
    return import_summary(created, errors, updated=updated)
