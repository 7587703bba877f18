import pytest
from datetime import timedelta
from decimal import Decimal
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.subscriptions.models import BillingPeriod, Subscription, SubscriptionPlan, SubscriptionStatus
from apps.subscriptions.services import (
    check_plan_limit,
    start_trial_subscription,
    upsert_plan,
    PlanLimitExceededError,
    PlanValidationError,
)


@pytest.fixture
def basic_plan(db):
    return SubscriptionPlan.objects.create(
        name='basic',
        display_name='Basic',
        price=Decimal('150.00'),
        max_shops=2,
        max_customers=1,
        is_default=True,
    )


@pytest.fixture
def subscription(business, basic_plan):
    now = timezone.now()
    return Subscription.objects.create(
        business=business,
        plan=basic_plan,
        status=SubscriptionStatus.ACTIVE,
        current_period_start=now - timedelta(days=40),
        current_period_end=now - timedelta(days=10),
    )


@pytest.mark.django_db
class TestPlanServices:

    def test_default_flag_is_exclusive(self, platform_admin, basic_plan):
        premium = upsert_plan(actor=platform_admin, name='premium', price='500', is_default=True)

        basic_plan.refresh_from_db()
        assert premium.is_default is True
        assert premium.display_name == 'premium'
        assert basic_plan.is_default is False

    def test_duplicate_name(self, platform_admin, basic_plan):
        with pytest.raises(PlanValidationError, match='already exists'):
            upsert_plan(actor=platform_admin, name='basic', price='10')

    def test_negative_limits(self, platform_admin):
        with pytest.raises(PlanValidationError, match='0 or greater'):
            upsert_plan(actor=platform_admin, name='odd', price='10', max_shops=-1)

    def test_yearly_monthly_price(self):
        plan = SubscriptionPlan(name='annual', price=Decimal('1000.00'), billing_period=BillingPeriod.YEARLY)
        assert plan.monthly_price == Decimal('83.33')


@pytest.mark.django_db
class TestSubscriptionServices:

    def test_no_default_plan_means_no_trial(self, business):
        assert start_trial_subscription(business=business) is None

    def test_trial_on_default_plan(self, business, basic_plan):
        subscription = start_trial_subscription(business=business)

        assert subscription.plan == basic_plan
        assert subscription.status == SubscriptionStatus.TRIAL
        assert subscription.trial_ends_at - subscription.current_period_start == timedelta(days=14)

    def test_unsubscribed_business_is_unlimited(self, business):
        check_plan_limit(business=business, limit='max_shops', current=500)

    def test_limit_reached(self, business, subscription):
        check_plan_limit(business=business, limit='max_shops', current=1)

        with pytest.raises(PlanLimitExceededError, match='Your plan allows at most 2 shops'):
            check_plan_limit(business=business, limit='max_shops', current=2)

    def test_zero_means_unlimited(self, business, subscription):
        check_plan_limit(business=business, limit='max_staff', current=1000)


@pytest.mark.django_db
class TestPlanApi:
    """Tests for /api/platform/plans/"""

    def test_list_with_subscriber_count(self, platform_client, subscription):
        response = platform_client.get(reverse('subscriptions:plan-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['name'] == 'basic'
        assert response.data[0]['subscriber_count'] == 1

    def test_create(self, platform_client):
        response = platform_client.post(reverse('subscriptions:plan-list'), {
            'name': 'pro',
            'display_name': 'Pro',
            'price': '300.00',
            'billing_period': 'MONTHLY',
            'max_shops': 5,
            'has_reports': True,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['price'] == '300.00'
        assert response.data['has_reports'] is True
        assert response.data['is_active'] is True

    def test_create_blank_name(self, platform_client):
        response = platform_client.post(
            reverse('subscriptions:plan-list'), {'name': ' ', 'price': '10.00'}, format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Plan name is required'

    def test_update(self, platform_client, basic_plan):
        response = platform_client.put(
            reverse('subscriptions:plan-detail', kwargs={'pk': basic_plan.id}),
            {'name': 'basic', 'display_name': 'Basic Plus', 'price': '175.00', 'max_shops': 3},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        basic_plan.refresh_from_db()
        assert basic_plan.display_name == 'Basic Plus'
        assert basic_plan.max_shops == 3

    def test_update_unknown(self, platform_client):
        response = platform_client.put(
            reverse('subscriptions:plan-detail', kwargs={'pk': '00000000-0000-0000-0000-000000000000'}),
            {'name': 'ghost', 'price': '1.00'},
            format='json',
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_business_admin_forbidden(self, owner_client):
        response = owner_client.get(reverse('subscriptions:plan-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestSubscriptionApi:
    """Tests for /api/platform/subscriptions/"""

    def test_list_filter(self, platform_client, subscription):
        response = platform_client.get(reverse('subscriptions:subscription-list'), {'status': 'ACTIVE'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['business_slug'] == 'accra-electronics'
        assert response.data['results'][0]['plan_price'] == '150.00'

        response = platform_client.get(reverse('subscriptions:subscription-list'), {'status': 'TRIAL'})
        assert response.data['count'] == 0

    def test_cancel(self, platform_client, subscription):
        url = reverse('subscriptions:subscription-set-status', kwargs={'pk': subscription.id})
        response = platform_client.post(url, {'status': 'CANCELLED'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'CANCELLED'
        assert response.data['cancelled_at'] is not None

    def test_reactivating_lapsed_period_starts_new_one(self, platform_client, subscription):
        url = reverse('subscriptions:subscription-set-status', kwargs={'pk': subscription.id})
        response = platform_client.post(url, {'status': 'ACTIVE'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        subscription.refresh_from_db()
        assert subscription.current_period_end > timezone.now() + timedelta(days=29)

    def test_invalid_status(self, platform_client, subscription):
        url = reverse('subscriptions:subscription-set-status', kwargs={'pk': subscription.id})
        response = platform_client.post(url, {'status': 'FROZEN'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_subscription(self, platform_client):
        url = reverse(
            'subscriptions:subscription-set-status',
            kwargs={'pk': '00000000-0000-0000-0000-000000000000'},
        )
        response = platform_client.post(url, {'status': 'ACTIVE'}, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND
