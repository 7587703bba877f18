"""Subscription plan catalogue (platform admins)."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count

from apps.audit.services import log_action
from apps.subscriptions.models import SubscriptionPlan, BillingPeriod

from .exceptions import PlanNotFoundError, PlanValidationError

logger = logging.getLogger(__name__)

LIMIT_FIELDS = ('max_shops', 'max_customers', 'max_staff', 'max_sms_per_month')
FEATURE_FIELDS = ('has_pos', 'has_wallet', 'has_reports', 'has_api_access')


def list_plans():
    return SubscriptionPlan.objects.annotate(
        subscriber_count=Count('subscriptions')
    ).order_by('sort_order', 'price')


def get_default_plan() -> Optional[SubscriptionPlan]:
    return SubscriptionPlan.objects.filter(is_default=True, is_active=True).first()


@transaction.atomic
def upsert_plan(*, actor, plan_id: Optional[UUID] = None, **data) -> SubscriptionPlan:
    """
    Create a plan, or update the plan with ``plan_id``.

    Marking a plan as default clears the flag on every other plan.

    Raises:
        PlanNotFoundError: ``plan_id`` given but unknown
        PlanValidationError: Missing name, negative price or limits
    """
    name = (data.get('name') or '').strip()
    if not name:
        raise PlanValidationError("Plan name is required")

    try:
        price = Decimal(str(data.get('price', 0)))
    except (InvalidOperation, TypeError, ValueError):
        raise PlanValidationError("Price must be a number")
    if not price.is_finite():
        raise PlanValidationError("Price must be a number")
    if price < 0:
        raise PlanValidationError("Price must be 0 or greater")

    for field in LIMIT_FIELDS:
        if int(data.get(field) or 0) < 0:
            raise PlanValidationError("Plan limits must be 0 or greater")

    billing_period = data.get('billing_period') or BillingPeriod.MONTHLY
    if billing_period not in BillingPeriod.values:
        raise PlanValidationError("Billing period must be MONTHLY or YEARLY")

    if plan_id:
        try:
            plan = SubscriptionPlan.objects.select_for_update().get(id=plan_id)
        except SubscriptionPlan.DoesNotExist:
            raise PlanNotFoundError("Plan not found")
    else:
        plan = SubscriptionPlan()

    if SubscriptionPlan.objects.filter(name=name).exclude(id=plan.id).exists():
        raise PlanValidationError("A plan with this name already exists")

    plan.name = name
    plan.display_name = (data.get('display_name') or name).strip()
    plan.description = data.get('description') or ''
    plan.price = price
    plan.currency = data.get('currency') or plan.currency or 'GHS'
    plan.billing_period = billing_period
    for field in LIMIT_FIELDS:
        setattr(plan, field, int(data.get(field) or 0))
    for field in FEATURE_FIELDS:
        if field in data:
            setattr(plan, field, bool(data[field]))
    plan.is_active = data.get('is_active', plan.is_active if plan_id else True)
    plan.is_default = bool(data.get('is_default', False))
    plan.sort_order = int(data.get('sort_order') or 0)
    plan.save()

    if plan.is_default:
        SubscriptionPlan.objects.exclude(id=plan.id).filter(is_default=True).update(is_default=False)

    log_action(
        action='PLAN_UPDATED' if plan_id else 'PLAN_CREATED',
        entity=plan,
        actor=actor,
        metadata={'name': plan.name, 'price': str(plan.price), 'isDefault': plan.is_default},
    )
    logger.info("Plan %s saved", plan.name)
    return plan
