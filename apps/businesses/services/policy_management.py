"""Shop credit policy."""

from decimal import Decimal, InvalidOperation

from django.db import transaction

from apps.accounts.models import User
from apps.audit.services import log_action
from apps.businesses.models import InterestType, Shop, ShopPolicy

from .exceptions import BusinessValidationError


def get_policy(*, shop: Shop) -> ShopPolicy:
    """The shop's policy, or an unsaved one with defaults; only upsert_policy writes the row."""
    return ShopPolicy.objects.filter(shop=shop).first() or ShopPolicy(shop=shop)


def _decimal(value, label):
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise BusinessValidationError(f"{label} must be a number")
    if not amount.is_finite():
        raise BusinessValidationError(f"{label} must be a number")
    return amount


@transaction.atomic
def upsert_policy(
    *,
    actor: User,
    shop: Shop,
    interest_type: str,
    interest_rate,
    grace_days: int,
    max_tenor_days: int,
    late_fee_fixed=None,
    late_fee_rate=None,
) -> ShopPolicy:
    """
    Create or replace the shop's credit policy.

    Raises:
        BusinessValidationError: Any value outside its allowed range
    """
    if interest_type not in InterestType.values:
        raise BusinessValidationError("Interest type must be FLAT or MONTHLY")

    interest_rate = _decimal(interest_rate, "Interest rate")
    if not (Decimal('0') <= interest_rate <= Decimal('100')):
        raise BusinessValidationError("Interest rate must be between 0 and 100")

    if not (0 <= int(grace_days) <= 60):
        raise BusinessValidationError("Grace days must be between 0 and 60")

    if not (1 <= int(max_tenor_days) <= 365):
        raise BusinessValidationError("Max tenor days must be between 1 and 365")

    if late_fee_fixed is not None:
        late_fee_fixed = _decimal(late_fee_fixed, "Late fee")
        if late_fee_fixed < 0:
            raise BusinessValidationError("Late fee must be 0 or greater")

    if late_fee_rate is not None:
        late_fee_rate = _decimal(late_fee_rate, "Late fee rate")
        if late_fee_rate < 0:
            raise BusinessValidationError("Late fee rate must be 0 or greater")

    policy = ShopPolicy.objects.select_for_update().filter(shop=shop).first() or ShopPolicy(shop=shop)
    policy.interest_type = interest_type
    policy.interest_rate = interest_rate
    policy.grace_days = int(grace_days)
    policy.max_tenor_days = int(max_tenor_days)
    policy.late_fee_fixed = late_fee_fixed
    policy.late_fee_rate = late_fee_rate
    policy.save()

    log_action(
        action='POLICY_UPDATED',
        entity=policy,
        actor=actor,
        metadata={
            'interestType': interest_type,
            'interestRate': str(interest_rate),
            'graceDays': policy.grace_days,
            'maxTenorDays': policy.max_tenor_days,
        },
    )
    return policy
