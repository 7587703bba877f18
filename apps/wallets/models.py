from django.conf import settings
from django.db import models
from decimal import Decimal
import uuid


class TransactionType(models.TextChoices):
    DEPOSIT = 'DEPOSIT', 'Deposit'
    WITHDRAWAL = 'WITHDRAWAL', 'Withdrawal'
    PURCHASE_PAYMENT = 'PURCHASE_PAYMENT', 'Purchase Payment'
    REFUND = 'REFUND', 'Refund'
    ADJUSTMENT = 'ADJUSTMENT', 'Adjustment'


class TransactionStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    CONFIRMED = 'CONFIRMED', 'Confirmed'
    REJECTED = 'REJECTED', 'Rejected'


class WalletTransaction(models.Model):
    """
    A movement on a customer's prepaid wallet.

    ``Customer.wallet_balance`` only changes when a transaction is
    confirmed; ``balance_before``/``balance_after`` are stamped at that moment.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer = models.ForeignKey(
        'customers.Customer',
        on_delete=models.CASCADE,
        related_name='wallet_transactions'
    )
    shop = models.ForeignKey(
        'businesses.Shop',
        on_delete=models.CASCADE,
        related_name='wallet_transactions'
    )

    type = models.CharField(max_length=20, choices=TransactionType.choices)
    status = models.CharField(max_length=10, choices=TransactionStatus.choices, default=TransactionStatus.PENDING)

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_before = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    balance_after = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    description = models.TextField(blank=True)
    reference = models.CharField(max_length=100, blank=True)
    payment_method = models.CharField(max_length=16, blank=True)

    purchase = models.ForeignKey(
        'purchases.Purchase',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='wallet_transactions'
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='wallet_transactions_created'
    )
    confirmed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='wallet_transactions_confirmed'
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    rejected_reason = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'wallet_transactions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['shop', 'status'], name='wallet_tx_shop_status_idx'),
            models.Index(fields=['customer', 'created_at'], name='wallet_tx_customer_idx'),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} ({self.status})"
