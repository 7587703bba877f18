"""
Products and their per-shop stock rows.

Products belong to the business; each shop sees the products it has a
``ShopProduct`` row for, with its own stock.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction

from apps.audit.services import log_action
from apps.businesses.models import Shop
from apps.inventory.models import Category, Product, ShopProduct
from apps.purchases.models import PurchaseItem

from .exceptions import DuplicateSkuError, ProductNotFoundError, ProductValidationError

logger = logging.getLogger(__name__)

PRICE_FIELDS = ('price', 'cost_price', 'cash_price', 'layaway_price', 'credit_price')


def parse_price(value, label: str = "Price") -> Decimal:
    if value in (None, ''):
        return Decimal('0.00')
    try:
        amount = Decimal(str(value))
        if not amount.is_finite():
            raise InvalidOperation
        amount = amount.quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        raise ProductValidationError(f"{label} must be a number")
    if amount < 0:
        raise ProductValidationError("Price must be 0 or greater")
    return amount


def parse_quantity(value) -> int:
    if value in (None, ''):
        return 0
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ProductValidationError("Stock quantity must be a whole number")
    if quantity < 0:
        raise ProductValidationError("Stock quantity must be 0 or greater")
    return quantity


def check_sku(*, business, sku: str, exclude_id=None) -> str:
    sku = (sku or '').strip()
    if not sku:
        return ''
    duplicates = Product.objects.filter(business=business, sku=sku)
    if exclude_id:
        duplicates = duplicates.exclude(id=exclude_id)
    if duplicates.exists():
        raise DuplicateSkuError("A product with this SKU already exists")
    return sku


def get_or_create_category(*, business, name: Optional[str]) -> Optional[Category]:
    name = (name or '').strip()
    if not name:
        return None
    category, _ = Category.objects.get_or_create(business=business, name=name)
    return category


def list_shop_products(*, shop: Shop, include_inactive: bool = True):
    queryset = (
        ShopProduct.objects
        .filter(shop=shop)
        .select_related('product', 'product__category')
        .order_by('product__name')
    )
    if not include_inactive:
        queryset = queryset.filter(is_active=True, product__is_active=True)
    return queryset


def get_shop_product(*, shop: Shop, product_id: UUID, for_update: bool = False) -> ShopProduct:
    queryset = ShopProduct.objects.select_related('product').filter(shop=shop, product_id=product_id)
    if for_update:
        queryset = queryset.select_for_update()
    stock_item = queryset.first()
    if stock_item is None:
        raise ProductNotFoundError("Product not found")
    return stock_item


@transaction.atomic
def create_product(
    *,
    actor,
    shop: Shop,
    name: str,
    stock_quantity=0,
    sku: str = '',
    category: Optional[str] = None,
    description: str = '',
    image_url: str = '',
    low_stock_threshold: int = 5,
    **prices,
) -> ShopProduct:
    """
    Create a product of the shop's business and stock it in the shop.

    Raises:
        ProductValidationError: Missing name, negative prices or stock
        DuplicateSkuError: SKU already used in the business
    """
    name = (name or '').strip()
    if not name:
        raise ProductValidationError("Product name is required")
    price_values = {field: parse_price(prices.get(field)) for field in PRICE_FIELDS}
    stock_quantity = parse_quantity(stock_quantity)
    business = shop.business
    sku = check_sku(business=business, sku=sku)

    product = Product.objects.create(
        business=business,
        name=name,
        sku=sku,
        description=(description or '').strip(),
        image_url=image_url or '',
        low_stock_threshold=low_stock_threshold,
        category=get_or_create_category(business=business, name=category),
        **price_values,
    )
    stock_item = ShopProduct.objects.create(shop=shop, product=product, stock_quantity=stock_quantity)

    log_action(
        action='PRODUCT_CREATED',
        entity=product,
        actor=actor,
        shop=shop,
        metadata={
            'productName': product.name,
            'sku': product.sku,
            'price': product.price,
            'stockQuantity': stock_quantity,
        },
    )
    logger.info("Product %s created in shop %s", product.id, shop.slug)
    return stock_item


@transaction.atomic
def update_product(*, actor, shop: Shop, product_id: UUID, **data) -> ShopProduct:
    """
    Update product fields and, when given, this shop's stock quantity.

    Raises:
        ProductNotFoundError: Product not stocked in the shop
        ProductValidationError: Blank name, negative prices or stock
        DuplicateSkuError: SKU used by another product of the business
    """
    stock_item = get_shop_product(shop=shop, product_id=product_id, for_update=True)
    product = stock_item.product
    changes = {}

    if 'name' in data:
        name = (data['name'] or '').strip()
        if not name:
            raise ProductValidationError("Product name is required")
        changes['name'] = name
    for field in PRICE_FIELDS:
        if field in data:
            changes[field] = parse_price(data[field])
    if 'sku' in data:
        changes['sku'] = check_sku(business=shop.business, sku=data['sku'], exclude_id=product.id)
    for field in ('description', 'image_url'):
        if field in data:
            changes[field] = (data[field] or '').strip()
    if 'low_stock_threshold' in data:
        changes['low_stock_threshold'] = data['low_stock_threshold']
    if 'category' in data:
        changes['category'] = get_or_create_category(business=shop.business, name=data['category'])

    for key, value in changes.items():
        setattr(product, key, value)
    product.save()

    if 'stock_quantity' in data:
        stock_item.stock_quantity = parse_quantity(data['stock_quantity'])
        stock_item.save(update_fields=['stock_quantity', 'updated_at'])

    log_action(
        action='PRODUCT_UPDATED',
        entity=product,
        actor=actor,
        shop=shop,
        metadata={'productName': product.name, 'changes': sorted(data.keys())},
    )
    return stock_item


@transaction.atomic
def delete_product(*, actor, shop: Shop, product_id: UUID) -> bool:
    """
    Remove a product from the shop.

    Products that appear on purchases are deactivated instead, so purchase
    history keeps its product link.

    Returns:
        True when rows were deleted, False when the product was deactivated
    """
    stock_item = get_shop_product(shop=shop, product_id=product_id, for_update=True)
    product = stock_item.product
    metadata = {'productName': product.name, 'sku': product.sku}

    if PurchaseItem.objects.filter(product=product).exists():
        product.is_active = False
        product.save(update_fields=['is_active', 'updated_at'])
        stock_item.is_active = False
        stock_item.save(update_fields=['is_active', 'updated_at'])
        log_action(
            action='PRODUCT_DELETED',
            entity=product,
            actor=actor,
            shop=shop,
            metadata={**metadata, 'softDelete': True},
        )
        logger.info("Product %s has purchases; deactivated", product.id)
        return False

    log_action(
        action='PRODUCT_DELETED',
        entity=product,
        actor=actor,
        shop=shop,
        metadata={**metadata, 'softDelete': False},
    )
    stock_item.delete()
    if not product.stock_items.exists():
        product.delete()
    return True


@transaction.atomic
def toggle_product_status(*, actor, shop: Shop, product_id: UUID) -> ShopProduct:
    stock_item = get_shop_product(shop=shop, product_id=product_id, for_update=True)
    product = stock_item.product
    product.is_active = not product.is_active
    product.save(update_fields=['is_active', 'updated_at'])

    log_action(
        action='PRODUCT_ACTIVATED' if product.is_active else 'PRODUCT_DEACTIVATED',
        entity=product,
        actor=actor,
        shop=shop,
        metadata={'productName': product.name},
    )
    return stock_item


def get_price_for_type(*, product: Product, purchase_type: str) -> Decimal:
    """Unit price of ``product`` for a CASH, LAYAWAY or CREDIT purchase."""
    return product.price_for(purchase_type)


def list_categories(*, business):
    return Category.objects.filter(business=business).order_by('name')


@transaction.atomic
def create_category(*, actor, business, name: str, description: str = '') -> Category:
    name = (name or '').strip()
    if not name:
        raise ProductValidationError("Category name is required")
    if Category.objects.filter(business=business, name=name).exists():
        raise ProductValidationError("A category with this name already exists")

    category = Category.objects.create(business=business, name=name, description=(description or '').strip())
    log_action(action='CATEGORY_CREATED', entity=category, actor=actor, metadata={'name': name})
    return category
