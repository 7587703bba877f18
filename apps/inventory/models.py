from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from decimal import Decimal
import uuid


class Category(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'businesses.Business',
        on_delete=models.CASCADE,
        related_name='categories'
    )
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'categories'
        ordering = ['name']
        verbose_name_plural = 'categories'
        unique_together = [['business', 'name']]

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    A catalogue item of a business.

    Prices are per purchase type; a tier price of 0 falls back to ``price``.
    Stock lives on ``ShopProduct``, one row per shop carrying the product.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(
        'businesses.Business',
        on_delete=models.CASCADE,
        related_name='products'
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products'
    )

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    sku = models.CharField(max_length=64, blank=True)
    image_url = models.URLField(blank=True)

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    cash_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    layaway_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    credit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    low_stock_threshold = models.PositiveIntegerField(default=5)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'products'
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(
                fields=['business', 'sku'],
                condition=~Q(sku=''),
                name='products_business_sku_uniq',
            ),
        ]

    def __str__(self):
        return self.name

    def price_for(self, purchase_type: str) -> Decimal:
        tiers = {
            'CASH': self.cash_price,
            'LAYAWAY': self.layaway_price,
            'CREDIT': self.credit_price,
        }
        tier_price = tiers.get(purchase_type)
        if tier_price and tier_price > 0:
            return tier_price
        return self.price


class ShopProduct(models.Model):
    """Stock of one product in one shop."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.ForeignKey(
        'businesses.Shop',
        on_delete=models.CASCADE,
        related_name='stock_items'
    )
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='stock_items')
    stock_quantity = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shop_products'
        unique_together = [['shop', 'product']]

    def __str__(self):
        return f"{self.product} @ {self.shop}: {self.stock_quantity}"

    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.product.low_stock_threshold
