from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
import uuid


class PurchaseType(models.TextChoices):
    CASH = 'CASH', 'Cash'
    LAYAWAY = 'LAYAWAY', 'Layaway'
    CREDIT = 'CREDIT', 'Credit'


class PurchaseStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    ACTIVE = 'ACTIVE', 'Active'
    COMPLETED = 'COMPLETED', 'Completed'
    OVERDUE = 'OVERDUE', 'Overdue'
    DEFAULTED = 'DEFAULTED', 'Defaulted'


class DeliveryStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    SCHEDULED = 'SCHEDULED', 'Scheduled'
    IN_TRANSIT = 'IN_TRANSIT', 'In Transit'
    DELIVERED = 'DELIVERED', 'Delivered'
    FAILED = 'FAILED', 'Failed'
    RETURNED = 'RETURNED', 'Returned'


class PaymentMethod(models.TextChoices):
    CASH = 'CASH', 'Cash'
    MOBILE_MONEY = 'MOBILE_MONEY', 'Mobile Money'
    BANK_TRANSFER = 'BANK_TRANSFER', 'Bank Transfer'
    CARD = 'CARD', 'Card'
    WALLET = 'WALLET', 'Wallet'


class PaymentStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    COMPLETED = 'COMPLETED', 'Completed'
    PARTIAL = 'PARTIAL', 'Partial'
    MISSED = 'MISSED', 'Missed'
    WAIVED = 'WAIVED', 'Waived'
    REJECTED = 'REJECTED', 'Rejected'


class Purchase(models.Model):
    """
    A hire-purchase agreement.

    Balances always satisfy ``amount_paid + outstanding_balance == total_amount``
    (outstanding is never negative). Interest terms are snapshotted from the
    shop policy at creation.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase_number = models.CharField(max_length=20)

    shop = models.ForeignKey(
        'businesses.Shop',
        on_delete=models.PROTECT,
        related_name='purchases'
    )
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.PROTECT,
        related_name='purchases'
    )

    purchase_type = models.CharField(max_length=10, choices=PurchaseType.choices, default=PurchaseType.CREDIT)
    status = models.CharField(max_length=10, choices=PurchaseStatus.choices, default=PurchaseStatus.PENDING)

    # Financial details
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    interest_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    outstanding_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    down_payment = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    installments = models.PositiveIntegerField(default=1)
    start_date = models.DateField()
    due_date = models.DateField()

    # Policy snapshot
    interest_type = models.CharField(max_length=16, default='FLAT')
    interest_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))

    delivery_status = models.CharField(max_length=12, choices=DeliveryStatus.choices, default=DeliveryStatus.PENDING)
    stock_deducted = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchases_created'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'purchases'
        ordering = ['-created_at']
        unique_together = [['customer', 'purchase_number']]
        indexes = [
            models.Index(fields=['shop', 'status'], name='purchases_shop_status_idx'),
            models.Index(fields=['status', 'due_date'], name='purchases_status_due_idx'),
        ]

    def __str__(self):
        return f"{self.purchase_number} - {self.customer}"

    @property
    def is_completed(self) -> bool:
        return self.status == PurchaseStatus.COMPLETED


class PurchaseItem(models.Model):
    """A purchase line. ``product_name`` survives product deletion."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(
        'inventory.Product',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='purchase_items'
    )
    product_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'purchase_items'

    def __str__(self):
        return f"{self.quantity} x {self.product_name}"


class Payment(models.Model):
    """
    A payment against a purchase.

    Staff payments are confirmed on entry; collector payments stay PENDING
    until a shop admin confirms or rejects them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name='payments')

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method = models.CharField(max_length=16, choices=PaymentMethod.choices, default=PaymentMethod.CASH)
    status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)

    collector = models.ForeignKey(
        'businesses.ShopMember',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='collected_payments'
    )
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_payments'
    )

    # Confirmation
    is_confirmed = models.BooleanField(default=False)
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='confirmed_payments'
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    reference = models.CharField(max_length=100, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'payments'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'is_confirmed'], name='payments_status_confirmed_idx'),
            models.Index(fields=['collector', 'status'], name='payments_collector_status_idx'),
        ]

    def __str__(self):
        return f"{self.amount} on {self.purchase.purchase_number} ({self.status})"
