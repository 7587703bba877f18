from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
import uuid


class Business(models.Model):
    """A tenant: owns shops, products and staff."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    address = models.TextField(blank=True)
    country = models.CharField(max_length=100, default='Ghana')
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'businesses'
        ordering = ['name']
        verbose_name_plural = 'businesses'

    def __str__(self):
        return self.name

    def has_admin(self, user) -> bool:
        if user.is_platform_admin:
            return True
        return self.members.filter(
            user=user,
            role=BusinessRole.BUSINESS_ADMIN,
            is_active=True,
        ).exists()


class BusinessRole(models.TextChoices):
    BUSINESS_ADMIN = 'BUSINESS_ADMIN', 'Business Admin'


class BusinessMember(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='business_memberships'
    )
    role = models.CharField(max_length=32, choices=BusinessRole.choices, default=BusinessRole.BUSINESS_ADMIN)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'business_members'
        unique_together = [['business', 'user']]

    def __str__(self):
        return f"{self.user} @ {self.business} ({self.role})"


class Shop(models.Model):
    """A retail outlet of a business. Slugs are globally unique."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='shops')
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    country = models.CharField(max_length=100, default='Ghana')
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shops'
        ordering = ['name']
        indexes = [
            models.Index(fields=['business', 'is_active'], name='shops_business_active_idx'),
        ]

    def __str__(self):
        return self.name


class ShopRole(models.TextChoices):
    SHOP_ADMIN = 'SHOP_ADMIN', 'Shop Admin'
    SALES_STAFF = 'SALES_STAFF', 'Sales Staff'
    DEBT_COLLECTOR = 'DEBT_COLLECTOR', 'Debt Collector'


class ShopMember(models.Model):
    """A user's role in one shop. Debt collectors are members with DEBT_COLLECTOR role."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE, related_name='members')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='shop_memberships'
    )
    role = models.CharField(max_length=32, choices=ShopRole.choices, default=ShopRole.SALES_STAFF)
    is_active = models.BooleanField(default=True)
    can_load_wallet = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shop_members'
        unique_together = [['shop', 'user']]
        indexes = [
            models.Index(fields=['shop', 'role'], name='shop_members_shop_role_idx'),
        ]

    def __str__(self):
        return f"{self.user} @ {self.shop} ({self.role})"

    @property
    def is_collector(self) -> bool:
        return self.role == ShopRole.DEBT_COLLECTOR


class InterestType(models.TextChoices):
    FLAT = 'FLAT', 'Flat'
    MONTHLY = 'MONTHLY', 'Monthly'


class ShopPolicy(models.Model):
    """Credit terms applied to new hire-purchase agreements of a shop."""

    DEFAULT_INTEREST_TYPE = InterestType.FLAT
    DEFAULT_INTEREST_RATE = Decimal('0.00')
    DEFAULT_GRACE_DAYS = 3
    DEFAULT_MAX_TENOR_DAYS = 60

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    shop = models.OneToOneField(Shop, on_delete=models.CASCADE, related_name='policy')

    interest_type = models.CharField(max_length=16, choices=InterestType.choices, default=DEFAULT_INTEREST_TYPE)
    interest_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=DEFAULT_INTEREST_RATE,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    grace_days = models.PositiveIntegerField(default=DEFAULT_GRACE_DAYS)
    max_tenor_days = models.PositiveIntegerField(default=DEFAULT_MAX_TENOR_DAYS)
    late_fee_fixed = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    late_fee_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'shop_policies'
        verbose_name_plural = 'shop policies'

    def __str__(self):
        return f"Policy for {self.shop}"
