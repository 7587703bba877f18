import pytest
from datetime import timedelta
from decimal import Decimal
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.accounts.models import User
from apps.analytics.analytics import aging_bucket, collection_rate
from apps.businesses.models import ShopMember, ShopRole
from apps.purchases.models import Purchase
from apps.purchases.services import confirm_payment, record_collector_payment
from apps.subscriptions.models import BillingPeriod, Subscription, SubscriptionPlan, SubscriptionStatus


def shop_url(name, shop):
    return reverse(f'analytics:{name}', kwargs={'shop_slug': shop.slug})


def business_url(name, business):
    return reverse(f'analytics:{name}', kwargs={'business_slug': business.slug})


class TestHelpers:

    def test_collection_rate(self):
        assert collection_rate(Decimal('200'), Decimal('2200')) == 8.3
        assert collection_rate(Decimal('0'), Decimal('0')) == 0.0

    @pytest.mark.parametrize('days,bucket', [
        (-5, 'current'),
        (0, 'current'),
        (1, '1-30'),
        (30, '1-30'),
        (45, '31-60'),
        (90, '61-90'),
        (91, '90+'),
    ])
    def test_aging_bucket(self, days, bucket):
        assert aging_bucket(days) == bucket


@pytest.mark.django_db
class TestShopDashboard:
    """Tests for /api/analytics/shops/{slug}/dashboard/"""

    def test_figures(self, manager_client, shop, credit_purchase, collector_purchase):
        response = manager_client.get(shop_url('shop-dashboard', shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalCustomers'] == 2
        assert response.data['totalSales'] == '2400.00'
        assert response.data['totalCollected'] == '200.00'
        assert response.data['totalOutstanding'] == '2200.00'
        assert response.data['collectionRate'] == 8.3
        assert response.data['purchasesByStatus']['PENDING'] == 1
        assert response.data['purchasesByStatus']['ACTIVE'] == 1
        assert response.data['purchasesByStatus']['COMPLETED'] == 0
        assert response.data['todayCollections'] == '200.00'
        assert response.data['lowStockProducts'] == 0

    def test_low_stock_count(self, staff_client, shop, stock_item):
        stock_item.stock_quantity = 2
        stock_item.save()

        response = staff_client.get(shop_url('shop-dashboard', shop))

        assert response.data['lowStockProducts'] == 1

    def test_other_shop_purchases_excluded(self, client_for, other_shop, credit_purchase):
        user = User.objects.create_user(email='adum@example.com', password='TestPass123!', name='Adum Manager')
        ShopMember.objects.create(shop=other_shop, user=user, role=ShopRole.SHOP_ADMIN)

        response = client_for(user).get(shop_url('shop-dashboard', other_shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalSales'] == '0.00'
        assert response.data['collectionRate'] == 0.0

    def test_collector_forbidden(self, collector_client, shop):
        response = collector_client.get(shop_url('shop-dashboard', shop))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_shop(self, manager_client):
        response = manager_client.get(reverse('analytics:shop-dashboard', kwargs={'shop_slug': 'nowhere'}))
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestCollectorDashboard:

    def test_portfolio(self, collector_client, shop, collector_member, collector_purchase):
        record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='150.00',
        )

        response = collector_client.get(shop_url('collector-dashboard', shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['assignedCustomers'] == 1
        assert response.data['totalOutstanding'] == '1000.00'
        assert response.data['collectedToday'] == '0.00'
        assert response.data['pendingCount'] == 1
        assert response.data['pendingAmount'] == '150.00'

    def test_staff_forbidden(self, staff_client, shop):
        response = staff_client.get(shop_url('collector-dashboard', shop))
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestAgingReport:

    def test_buckets(self, manager_client, shop, credit_purchase, collector_purchase):
        today = timezone.localdate()
        Purchase.objects.filter(id=credit_purchase.id).update(due_date=today - timedelta(days=45))

        response = manager_client.get(shop_url('shop-aging', shop))

        assert response.status_code == status.HTTP_200_OK
        buckets = {row['bucket']: row for row in response.data['buckets']}
        assert list(buckets) == ['current', '1-30', '31-60', '61-90', '90+']
        assert buckets['current']['amount'] == '1000.00'
        assert buckets['31-60']['count'] == 1
        assert buckets['31-60']['amount'] == '1200.00'
        assert response.data['totalOutstanding'] == '2200.00'

    def test_completed_purchases_skipped(self, manager_client, shop, paid_purchase):
        response = manager_client.get(shop_url('shop-aging', shop))

        assert response.data['totalOutstanding'] == '0.00'

    def test_staff_forbidden(self, staff_client, shop):
        response = staff_client.get(shop_url('shop-aging', shop))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_business_aging(self, owner_client, business, credit_purchase):
        response = owner_client.get(business_url('business-aging', business))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalOutstanding'] == '1200.00'


@pytest.mark.django_db
class TestCollectorPerformance:

    def test_rows(self, manager_client, shop, shop_admin, collector_member, other_collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='250.00',
        )
        confirm_payment(actor=shop_admin, shop=shop, payment_id=payment.id)

        response = manager_client.get(shop_url('collector-performance', shop))

        assert response.status_code == status.HTTP_200_OK
        assert [row['name'] for row in response.data] == ['Ama Collector', 'Kofi Collector']
        kofi = response.data[1]
        assert kofi['assignedCustomers'] == 1
        assert kofi['collectedCount'] == 1
        assert kofi['collectedAmount'] == '250.00'
        assert kofi['pendingCount'] == 0
        assert response.data[0]['assignedCustomers'] == 0


@pytest.mark.django_db
class TestBusinessDashboard:

    def test_breakdown_and_monthly_sales(self, owner_client, business, shop, credit_purchase):
        response = owner_client.get(business_url('business-dashboard', business), {'months': 3})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalSales'] == '1200.00'
        assert response.data['shops'] == [{
            'slug': 'osu-branch',
            'name': 'Osu Branch',
            'isActive': True,
            'purchaseCount': 1,
            'totalSales': '1200.00',
            'totalCollected': '0.00',
            'totalOutstanding': '1200.00',
            'collectionRate': 0.0,
        }]
        this_month = timezone.localdate().strftime('%Y-%m')
        assert response.data['monthlySales'] == [{'month': this_month, 'sales': '1200.00', 'count': 1}]

    @pytest.mark.parametrize('months', [0, 25, 'abc'])
    def test_months_validated(self, owner_client, business, months):
        response = owner_client.get(business_url('business-dashboard', business), {'months': months})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_shop_admin_forbidden(self, manager_client, business):
        response = manager_client.get(business_url('business-dashboard', business))
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestPlatformAnalytics:

    def test_totals(self, platform_client, business, shop, other_shop, paid_purchase):
        plan = SubscriptionPlan.objects.create(
            name='growth', display_name='Growth', price=Decimal('1200.00'), billing_period=BillingPeriod.YEARLY,
        )
        now = timezone.now()
        Subscription.objects.create(
            business=business,
            plan=plan,
            status=SubscriptionStatus.ACTIVE,
            current_period_start=now,
            current_period_end=now + timedelta(days=365),
        )

        response = platform_client.get(reverse('analytics:platform'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalBusinesses'] == 2
        assert response.data['totalShops'] == 2
        assert response.data['totalPurchases'] == 1
        assert response.data['totalTransactionVolume'] == '1200.00'
        assert response.data['subscriptionsByStatus']['ACTIVE'] == 1
        assert response.data['monthlyRecurringRevenue'] == '100.00'
        assert response.data['openTickets'] == 0

    def test_business_admin_forbidden(self, owner_client):
        response = owner_client.get(reverse('analytics:platform'))
        assert response.status_code == status.HTTP_403_FORBIDDEN
