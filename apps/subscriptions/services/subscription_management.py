"""Business subscriptions and plan limit enforcement."""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.audit.services import log_action
from apps.subscriptions.models import (
    BillingPeriod,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
)

from .exceptions import (
    PlanLimitExceededError,
    PlanValidationError,
    SubscriptionNotFoundError,
)
from .plan_management import get_default_plan

logger = logging.getLogger(__name__)

TRIAL_DAYS = 14

LIMIT_LABELS = {
    'max_shops': 'shops',
    'max_customers': 'customers',
    'max_staff': 'staff members',
}


def _period_length(plan: SubscriptionPlan) -> timedelta:
    if plan.billing_period == BillingPeriod.YEARLY:
        return timedelta(days=365)
    return timedelta(days=30)


def start_trial_subscription(*, business) -> Optional[Subscription]:
    """Put a new business on a trial of the default plan; no-op without one."""
    plan = get_default_plan()
    if plan is None:
        return None

    now = timezone.now()
    trial_end = now + timedelta(days=TRIAL_DAYS)
    subscription = Subscription.objects.create(
        business=business,
        plan=plan,
        status=SubscriptionStatus.TRIAL,
        current_period_start=now,
        current_period_end=trial_end,
        trial_ends_at=trial_end,
    )
    logger.info("Trial subscription on %s started for %s", plan.name, business.slug)
    return subscription


def check_plan_limit(*, business, limit: str, current: int) -> None:
    """
    Raise when adding one more item would exceed the plan's ``limit``.

    Businesses without a subscription are unrestricted, as are limits of 0.

    Raises:
        PlanLimitExceededError: ``current`` already at the plan limit
    """
    subscription = (
        Subscription.objects.select_related('plan').filter(business=business).first()
    )
    if subscription is None:
        return

    maximum = getattr(subscription.plan, limit)
    if maximum and current >= maximum:
        logger.warning("Business %s hit plan limit %s=%s", business.slug, limit, maximum)
        raise PlanLimitExceededError(
            f"Your plan allows at most {maximum} {LIMIT_LABELS.get(limit, limit)}"
        )


def list_subscriptions(*, status: Optional[str] = None):
    queryset = Subscription.objects.select_related('business', 'plan').order_by('-created_at')
    if status:
        queryset = queryset.filter(status=status)
    return queryset


@transaction.atomic
def update_subscription_status(*, actor, subscription_id: UUID, status: str) -> Subscription:
    """
    Move a subscription to ``status``.

    CANCELLED stamps ``cancelled_at``; ACTIVE opens a new billing period when
    the current one has already ended.

    Raises:
        SubscriptionNotFoundError: Unknown subscription
        PlanValidationError: Unknown status
    """
    if status not in SubscriptionStatus.values:
        raise PlanValidationError("Invalid subscription status")

    try:
        subscription = (
            Subscription.objects
            .select_for_update()
            .select_related('plan', 'business')
            .get(id=subscription_id)
        )
    except Subscription.DoesNotExist:
        raise SubscriptionNotFoundError("Subscription not found")

    previous = subscription.status
    now = timezone.now()
    subscription.status = status

    if status == SubscriptionStatus.CANCELLED:
        subscription.cancelled_at = now
    elif status == SubscriptionStatus.ACTIVE:
        subscription.cancelled_at = None
        if subscription.current_period_end <= now:
            subscription.current_period_start = now
            subscription.current_period_end = now + _period_length(subscription.plan)

    subscription.save()

    log_action(
        action='SUBSCRIPTION_STATUS_UPDATED',
        entity=subscription,
        actor=actor,
        business=subscription.business,
        metadata={'previousStatus': previous, 'newStatus': status},
    )
    logger.info(
        "Subscription of %s: %s -> %s", subscription.business.slug, previous, status
    )
    return subscription
