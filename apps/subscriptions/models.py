from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal
import uuid


class BillingPeriod(models.TextChoices):
    MONTHLY = 'MONTHLY', 'Monthly'
    YEARLY = 'YEARLY', 'Yearly'


class SubscriptionPlan(models.Model):
    """
    A sellable platform plan.

    Limits of 0 mean "unlimited". Only one plan is the default; new
    businesses start a trial on it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=50, unique=True)
    display_name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    currency = models.CharField(max_length=3, default='GHS')
    billing_period = models.CharField(max_length=10, choices=BillingPeriod.choices, default=BillingPeriod.MONTHLY)

    max_shops = models.PositiveIntegerField(default=1)
    max_customers = models.PositiveIntegerField(default=0)
    max_staff = models.PositiveIntegerField(default=0)
    max_sms_per_month = models.PositiveIntegerField(default=0)

    has_pos = models.BooleanField(default=False)
    has_wallet = models.BooleanField(default=True)
    has_reports = models.BooleanField(default=False)
    has_api_access = models.BooleanField(default=False)

    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscription_plans'
        ordering = ['sort_order', 'price']

    def __str__(self):
        return self.display_name or self.name

    @property
    def monthly_price(self) -> Decimal:
        if self.billing_period == BillingPeriod.YEARLY:
            return (self.price / 12).quantize(Decimal('0.01'))
        return self.price


class SubscriptionStatus(models.TextChoices):
    TRIAL = 'TRIAL', 'Trial'
    ACTIVE = 'ACTIVE', 'Active'
    PAST_DUE = 'PAST_DUE', 'Past Due'
    CANCELLED = 'CANCELLED', 'Cancelled'
    EXPIRED = 'EXPIRED', 'Expired'


class Subscription(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.OneToOneField(
        'businesses.Business',
        on_delete=models.CASCADE,
        related_name='subscription'
    )
    plan = models.ForeignKey(
        SubscriptionPlan,
        on_delete=models.PROTECT,
        related_name='subscriptions'
    )
    status = models.CharField(max_length=16, choices=SubscriptionStatus.choices, default=SubscriptionStatus.TRIAL)

    current_period_start = models.DateTimeField()
    current_period_end = models.DateTimeField()
    trial_ends_at = models.DateTimeField(null=True, blank=True)
    last_payment_at = models.DateTimeField(null=True, blank=True)
    last_payment_method = models.CharField(max_length=32, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'subscriptions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='subscriptions_status_idx'),
        ]

    def __str__(self):
        return f"{self.business} on {self.plan} ({self.status})"
