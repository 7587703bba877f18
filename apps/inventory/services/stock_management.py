"""Stock movements on shop products."""

import logging
from uuid import UUID

from django.db import transaction

from apps.audit.services import log_action
from apps.businesses.models import Shop
from apps.inventory.models import ShopProduct

from .exceptions import InsufficientStockError, ProductValidationError
from .product_management import get_shop_product

logger = logging.getLogger(__name__)


@transaction.atomic
def adjust_stock(*, actor, shop: Shop, product_id: UUID, quantity_change: int, reason: str = '') -> ShopProduct:
    """
    Restock (positive) or correct (negative) a product's stock in the shop.

    Raises:
        ProductNotFoundError: Product not stocked in the shop
        ProductValidationError: Zero change or stock would go below 0
    """
    if quantity_change == 0:
        raise ProductValidationError("Quantity change cannot be 0")

    stock_item = get_shop_product(shop=shop, product_id=product_id, for_update=True)
    previous = stock_item.stock_quantity
    new_quantity = previous + quantity_change
    if new_quantity < 0:
        raise ProductValidationError("Stock quantity must be 0 or greater")

    stock_item.stock_quantity = new_quantity
    stock_item.save(update_fields=['stock_quantity', 'updated_at'])

    log_action(
        action='STOCK_ADJUSTED',
        entity=stock_item.product,
        actor=actor,
        shop=shop,
        metadata={
            'productName': stock_item.product.name,
            'previousQuantity': previous,
            'newQuantity': new_quantity,
            'change': quantity_change,
            'reason': reason,
        },
    )
    logger.info(
        "Stock of %s in %s: %s -> %s", stock_item.product_id, shop.slug, previous, new_quantity
    )
    return stock_item


def deduct_stock(*, shop: Shop, product_id: UUID, quantity: int, product_name: str = '') -> ShopProduct:
    """
    Take ``quantity`` units out of the shop's stock of a product.

    Must run inside the caller's transaction; the row is locked.

    Raises:
        InsufficientStockError: Not enough units on hand
    """
    stock_item = (
        ShopProduct.objects
        .select_for_update()
        .select_related('product')
        .filter(shop=shop, product_id=product_id)
        .first()
    )
    available = stock_item.stock_quantity if stock_item else 0
    if stock_item is None or available < quantity:
        name = product_name or (stock_item.product.name if stock_item else 'product')
        logger.warning("Insufficient stock for %s in %s", name, shop.slug)
        raise InsufficientStockError(f"Insufficient stock for {name}. Only {available} available.")

    stock_item.stock_quantity = available - quantity
    stock_item.save(update_fields=['stock_quantity', 'updated_at'])
    return stock_item
