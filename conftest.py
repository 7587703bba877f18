"""
Shared tenancy fixtures.

One business with one shop and a member for every shop role, a stocked
product, customers and a few purchases built through the sales services.
"""

import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User
from apps.businesses.models import (
    Business,
    BusinessMember,
    BusinessRole,
    Shop,
    ShopMember,
    ShopPolicy,
    ShopRole,
)
from apps.customers.models import Customer
from apps.inventory.models import Product, ShopProduct
from apps.purchases.models import PurchaseType
from apps.purchases.services import create_purchase, record_payment


PASSWORD = 'TestPass123!'


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Return a factory building a JWT-authenticated client for a user."""
    def make(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return make


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def platform_admin(db):
    return User.objects.create_superuser(email='platform@example.com', password=PASSWORD, name='Platform Admin')


@pytest.fixture
def business_admin(db):
    return User.objects.create_user(email='owner@example.com', password=PASSWORD, name='Business Owner')


@pytest.fixture
def shop_admin(db):
    return User.objects.create_user(email='manager@example.com', password=PASSWORD, name='Shop Manager')


@pytest.fixture
def sales_staff(db):
    return User.objects.create_user(email='seller@example.com', password=PASSWORD, name='Sales Person')


@pytest.fixture
def collector(db):
    return User.objects.create_user(email='collector@example.com', password=PASSWORD, name='Kofi Collector')


@pytest.fixture
def other_collector(db):
    return User.objects.create_user(email='collector2@example.com', password=PASSWORD, name='Ama Collector')


@pytest.fixture
def outsider(db):
    """A user with no business or shop membership."""
    return User.objects.create_user(email='outsider@example.com', password=PASSWORD, name='Outsider')


# =============================================================================
# Tenancy
# =============================================================================

@pytest.fixture
def business(db, business_admin):
    business = Business.objects.create(name='Accra Electronics', slug='accra-electronics')
    BusinessMember.objects.create(business=business, user=business_admin, role=BusinessRole.BUSINESS_ADMIN)
    return business


@pytest.fixture
def shop(business):
    shop = Shop.objects.create(business=business, name='Osu Branch', slug='osu-branch')
    ShopPolicy.objects.create(shop=shop)
    return shop


@pytest.fixture
def other_shop(db):
    """A shop of an unrelated business."""
    other = Business.objects.create(name='Kumasi Traders', slug='kumasi-traders')
    shop = Shop.objects.create(business=other, name='Adum Branch', slug='adum-branch')
    ShopPolicy.objects.create(shop=shop)
    return shop


@pytest.fixture
def shop_admin_member(shop, shop_admin):
    return ShopMember.objects.create(shop=shop, user=shop_admin, role=ShopRole.SHOP_ADMIN)


@pytest.fixture
def staff_member(shop, sales_staff):
    return ShopMember.objects.create(shop=shop, user=sales_staff, role=ShopRole.SALES_STAFF)


@pytest.fixture
def collector_member(shop, collector):
    return ShopMember.objects.create(shop=shop, user=collector, role=ShopRole.DEBT_COLLECTOR)


@pytest.fixture
def other_collector_member(shop, other_collector):
    return ShopMember.objects.create(shop=shop, user=other_collector, role=ShopRole.DEBT_COLLECTOR)


# =============================================================================
# Authenticated clients
# =============================================================================

@pytest.fixture
def platform_client(client_for, platform_admin):
    return client_for(platform_admin)


@pytest.fixture
def owner_client(client_for, business_admin, business):
    return client_for(business_admin)


@pytest.fixture
def manager_client(client_for, shop_admin_member):
    return client_for(shop_admin_member.user)


@pytest.fixture
def staff_client(client_for, staff_member):
    return client_for(staff_member.user)


@pytest.fixture
def collector_client(client_for, collector_member):
    return client_for(collector_member.user)


@pytest.fixture
def outsider_client(client_for, outsider):
    return client_for(outsider)


# =============================================================================
# Catalogue and customers
# =============================================================================

@pytest.fixture
def product(shop):
    return Product.objects.create(
        business=shop.business,
        name='Samsung TV 43"',
        sku='TV-43',
        price=Decimal('1000.00'),
        cash_price=Decimal('900.00'),
        credit_price=Decimal('1200.00'),
        low_stock_threshold=2,
    )


@pytest.fixture
def stock_item(shop, product):
    return ShopProduct.objects.create(shop=shop, product=product, stock_quantity=10)


@pytest.fixture
def customer(shop):
    return Customer.objects.create(
        shop=shop,
        first_name='Kwame',
        last_name='Mensah',
        phone='0244000001',
        address='12 Ring Road, Accra',
    )


@pytest.fixture
def collector_customer(shop, collector_member):
    """A customer assigned to ``collector_member``."""
    return Customer.objects.create(
        shop=shop,
        first_name='Abena',
        last_name='Owusu',
        phone='0244000002',
        assigned_collector=collector_member,
    )


# =============================================================================
# Purchases
# =============================================================================

@pytest.fixture
def credit_purchase(shop, staff_member, customer, stock_item):
    """A CREDIT sale of one TV (1200.00) with nothing paid yet."""
    return create_purchase(
        actor=staff_member.user,
        shop=shop,
        membership=staff_member,
        customer_id=customer.id,
        items=[{'product_id': stock_item.product_id, 'quantity': 1}],
        purchase_type=PurchaseType.CREDIT,
    )


@pytest.fixture
def collector_purchase(shop, staff_member, collector_customer, stock_item):
    """A CREDIT sale to the collector's customer, 200.00 down."""
    return create_purchase(
        actor=staff_member.user,
        shop=shop,
        membership=staff_member,
        customer_id=collector_customer.id,
        items=[{'product_id': stock_item.product_id, 'quantity': 1}],
        purchase_type=PurchaseType.CREDIT,
        down_payment=Decimal('200.00'),
    )


@pytest.fixture
def paid_purchase(shop, staff_member, credit_purchase):
    """``credit_purchase`` paid off in one go; completion has run."""
    record_payment(
        actor=staff_member.user,
        shop=shop,
        purchase_id=credit_purchase.id,
        amount=credit_purchase.outstanding_balance,
    )
    credit_purchase.refresh_from_db()
    return credit_purchase
