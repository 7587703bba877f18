"""
Purchase workbooks (xlsx) for business admins.

Imports bring in historical agreements: they carry no interest, never
touch stock and run no completion hooks.
"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from openpyxl import Workbook

from apps.audit.services import log_action
from apps.businesses.models import Business, Shop
from apps.customers.models import Customer
from apps.customers.services import normalize_phone
from apps.inventory.models import Product
from apps.inventory.services import InventoryServiceError
from apps.inventory.services.product_management import parse_price, parse_quantity
from apps.inventory.services.spreadsheets import build_workbook, cell_text, import_summary, read_rows
from apps.purchases.models import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    Purchase,
    PurchaseItem,
    PurchaseStatus,
    PurchaseType,
)

from .exceptions import PurchaseServiceError, PurchaseValidationError
from .pricing import DAYS_PER_MONTH, next_purchase_number, to_money

logger = logging.getLogger(__name__)

PURCHASE_EXPORT_COLUMNS = [
    'Purchase Number', 'Shop Slug', 'Shop Name', 'Customer Name', 'Customer Phone',
    'Products', 'SKUs', 'Quantities', 'Unit Prices', 'Purchase Type', 'Subtotal',
    'Interest Amount', 'Total Amount', 'Down Payment', 'Amount Paid', 'Outstanding',
    'Installments', 'Status', 'Start Date', 'Due Date', 'Notes', 'Created At',
]

PURCHASE_IMPORT_COLUMNS = [
    'Shop Slug', 'Customer Phone', 'Products', 'Quantities', 'Unit Prices',
    'Purchase Type', 'Down Payment', 'Amount Paid', 'Installments', 'Due Date', 'Notes',
]

LIST_SEPARATOR = ';'
DEFAULT_IMPORT_INSTALLMENTS = 3


def export_purchases(*, business: Business, shop_slug: Optional[str] = None,
                     status: Optional[str] = None) -> Workbook:
    purchases = (
        Purchase.objects
        .filter(shop__business=business)
        .select_related('shop', 'customer')
        .prefetch_related('items__product')
        .order_by('-created_at')
    )
    if shop_slug:
        purchases = purchases.filter(shop__slug=shop_slug)
    if status:
        purchases = purchases.filter(status=status)

    rows = []
    for purchase in purchases:
        items = list(purchase.items.all())
        created_at = timezone.localtime(purchase.created_at)
        rows.append([
            purchase.purchase_number,
            purchase.shop.slug,
            purchase.shop.name,
            purchase.customer.full_name,
            purchase.customer.phone,
            '; '.join(item.product_name for item in items),
            '; '.join(item.product.sku if item.product else '' for item in items),
            '; '.join(str(item.quantity) for item in items),
            '; '.join(str(item.unit_price) for item in items),
            purchase.purchase_type,
            float(purchase.subtotal),
            float(purchase.interest_amount),
            float(purchase.total_amount),
            float(purchase.down_payment),
            float(purchase.amount_paid),
            float(purchase.outstanding_balance),
            purchase.installments,
            purchase.status,
            purchase.start_date.isoformat(),
            purchase.due_date.isoformat(),
            purchase.notes,
            created_at.strftime('%Y-%m-%d %H:%M'),
        ])

    return build_workbook('Purchases', PURCHASE_EXPORT_COLUMNS, rows)


def purchases_template() -> Workbook:
    example = [
        'main-shop', '0241234567', 'SAM-A15; Phone Case', '1; 2', '2100; 50',
        'CREDIT', 300, 800, 3, '2025-12-31', 'Migrated from ledger book',
    ]
    return build_workbook('Import Template', PURCHASE_IMPORT_COLUMNS, [example])


def _split(row: dict, column: str) -> list:
    text = cell_text(row, column)
    return [part.strip() for part in text.split(LIST_SEPARATOR)] if text else []


def _parse_due_date(value, default: date) -> date:
    if value in (None, ''):
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise PurchaseValidationError("Due date must be YYYY-MM-DD")


def _match_product(business: Business, reference: str) -> Product:
    product = (
        Product.objects
        .filter(business=business)
        .filter(Q(sku=reference) | Q(name__iexact=reference))
        .order_by('-is_active')
        .first()
    )
    if product is None:
        raise PurchaseValidationError(f"Product not found: {reference}")
    return product


def _import_purchase_row(*, actor, business: Business, shops: dict, row: dict) -> Purchase:
    shop_slug = cell_text(row, 'Shop Slug').lower()
    shop = shops.get(shop_slug)
    if shop is None:
        raise PurchaseValidationError(f"Shop not found: {shop_slug or '(blank)'}")

    phone = normalize_phone(cell_text(row, 'Customer Phone'))
    customer = Customer.objects.filter(shop=shop, phone=phone).first() if phone else None
    if customer is None:
        raise PurchaseValidationError(f"Customer not found: {phone or '(blank)'}")

    purchase_type = (cell_text(row, 'Purchase Type') or PurchaseType.CREDIT).upper()
    if purchase_type not in PurchaseType.values:
        raise PurchaseValidationError(f"Invalid purchase type: {purchase_type}")

    references = _split(row, 'Products')
    if not references:
        raise PurchaseValidationError("At least one product is required")
    quantities = _split(row, 'Quantities') or ['1'] * len(references)
    unit_prices = _split(row, 'Unit Prices') or [''] * len(references)
    if len(quantities) != len(references) or len(unit_prices) != len(references):
        raise PurchaseValidationError("Products, Quantities and Unit Prices must have the same number of entries")

    lines = []
    subtotal = Decimal('0.00')
    for reference, quantity_text, price_text in zip(references, quantities, unit_prices):
        product = _match_product(business, reference)
        quantity = parse_quantity(quantity_text)
        if quantity < 1:
            raise PurchaseValidationError("Quantity must be at least 1")
        unit_price = parse_price(price_text) if price_text else product.price_for(purchase_type)
        total_price = to_money(unit_price * quantity)
        subtotal += total_price
        lines.append((product, quantity, to_money(unit_price), total_price))

    total = to_money(subtotal)
    down_payment = parse_price(row.get('Down Payment'), "Down payment")
    paid_text = cell_text(row, 'Amount Paid')
    amount_paid = parse_price(paid_text, "Amount paid") if paid_text else down_payment
    if down_payment > total or amount_paid > total:
        raise PurchaseValidationError("Amount paid cannot exceed total amount")
    if amount_paid < down_payment:
        raise PurchaseValidationError("Amount paid cannot be less than down payment")

    installments_text = cell_text(row, 'Installments')
    installments = parse_quantity(installments_text) if installments_text else DEFAULT_IMPORT_INSTALLMENTS
    installments = max(installments, 1)

    start_date = timezone.localdate()
    due_date = _parse_due_date(row.get('Due Date'), start_date + timedelta(days=installments * DAYS_PER_MONTH))

    outstanding = total - amount_paid
    if outstanding <= 0:
        status = PurchaseStatus.COMPLETED
    elif amount_paid <= 0:
        status = PurchaseStatus.PENDING
    else:
        status = PurchaseStatus.ACTIVE

    purchase = Purchase.objects.create(
        purchase_number=next_purchase_number(customer),
        shop=shop,
        customer=customer,
        purchase_type=purchase_type,
        status=status,
        subtotal=total,
        interest_amount=Decimal('0.00'),
        total_amount=total,
        amount_paid=amount_paid,
        outstanding_balance=outstanding,
        down_payment=down_payment,
        installments=installments,
        start_date=start_date,
        due_date=due_date,
        interest_rate=Decimal('0.00'),
        stock_deducted=True,
        notes=cell_text(row, 'Notes'),
        created_by=actor,
    )
    PurchaseItem.objects.bulk_create([
        PurchaseItem(
            purchase=purchase,
            product=product,
            product_name=product.name,
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
        )
        for product, quantity, unit_price, total_price in lines
    ])

    if amount_paid > 0:
        now = timezone.now()
        Payment.objects.create(
            purchase=purchase,
            amount=amount_paid,
            payment_method=PaymentMethod.CASH,
            status=PaymentStatus.COMPLETED,
            recorded_by=actor,
            is_confirmed=True,
            confirmed_by=actor,
            confirmed_at=now,
            paid_at=now,
            notes='Imported',
        )
    return purchase


def import_purchases(*, actor, business: Business, uploaded_file) -> dict:
    """
    Create historical purchases from a workbook, one savepoint per row.

    Raises:
        SpreadsheetError: The upload is not a readable workbook
    """
    shops = {shop.slug: shop for shop in Shop.objects.filter(business=business)}
    created = 0
    errors = []

    for row_number, row in read_rows(uploaded_file):
        try:
            with transaction.atomic():
                _import_purchase_row(actor=actor, business=business, shops=shops, row=row)
            created += 1
        except (PurchaseServiceError, InventoryServiceError) as e:
            logger.warning("Purchase import row %s rejected: %s", row_number, e)
            errors.append(f"Row {row_number}: {e}")

    log_action(
        action='PURCHASES_IMPORTED',
        entity=business,
        actor=actor,
        business=business,
        metadata={'created': created, 'errors': len(errors)},
    )
    logger.info("Imported %s purchases for %s", created, business.slug)
    return import_summary(created, errors)
