"""Services for subscription plans and business subscriptions."""

from .exceptions import (
    SubscriptionServiceError,
    PlanNotFoundError,
    SubscriptionNotFoundError,
    PlanValidationError,
    PlanLimitExceededError,
)
from .plan_management import list_plans, get_default_plan, upsert_plan
from .subscription_management import (
    start_trial_subscription,
    check_plan_limit,
    list_subscriptions,
    update_subscription_status,
)

__all__ = [
    # Exceptions
    'SubscriptionServiceError',
    'PlanNotFoundError',
    'SubscriptionNotFoundError',
    'PlanValidationError',
    'PlanLimitExceededError',
    # Plans
    'list_plans',
    'get_default_plan',
    'upsert_plan',
    # Subscriptions
    'start_trial_subscription',
    'check_plan_limit',
    'list_subscriptions',
    'update_subscription_status',
]
