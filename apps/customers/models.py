from django.db import models
from decimal import Decimal
import uuid


class PaymentPreference(models.TextChoices):
    ONLINE = 'ONLINE', 'Online'
    DEBT_COLLECTOR = 'DEBT_COLLECTOR', 'Debt Collector'
    BOTH = 'BOTH', 'Both'


class Customer(models.Model):
    """
    A hire-purchase customer of one shop.

    ``wallet_balance`` only changes through confirmed wallet transactions.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.ForeignKey(
        'businesses.Shop',
        on_delete=models.CASCADE,
        related_name='customers'
    )

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    phone = models.CharField(max_length=30)
    email = models.EmailField(blank=True)
    id_type = models.CharField(max_length=50, blank=True)
    id_number = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    region = models.CharField(max_length=100, blank=True)

    preferred_payment = models.CharField(
        max_length=16,
        choices=PaymentPreference.choices,
        default=PaymentPreference.BOTH
    )
    assigned_collector = models.ForeignKey(
        'businesses.ShopMember',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_customers'
    )

    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    wallet_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'customers'
        ordering = ['-created_at']
        unique_together = [['shop', 'phone']]
        indexes = [
            models.Index(fields=['shop', 'assigned_collector'], name='customers_shop_collector_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.phone})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
