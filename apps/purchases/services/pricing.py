"""Interest, installment and numbering arithmetic for hire-purchase agreements."""

import math
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from apps.businesses.models import InterestType
from apps.purchases.models import Purchase, PurchaseType

CENT = Decimal('0.01')
DAYS_PER_MONTH = 30


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_interest(*, subtotal: Decimal, purchase_type: str, interest_type: str,
                       interest_rate: Decimal, tenor_days: int) -> Decimal:
    """
    FLAT charges ``rate`` percent once; MONTHLY charges it per 30 days of tenor.
    Cash sales carry no interest.
    """
    if purchase_type == PurchaseType.CASH or not interest_rate:
        return Decimal('0.00')

    rate = Decimal(str(interest_rate)) / Decimal('100')
    interest = subtotal * rate
    if interest_type == InterestType.MONTHLY:
        interest = interest * Decimal(tenor_days) / Decimal(DAYS_PER_MONTH)
    return to_money(interest)


def installment_count(*, purchase_type: str, tenor_days: int) -> int:
    if purchase_type == PurchaseType.CASH:
        return 1
    return max(1, math.ceil(tenor_days / DAYS_PER_MONTH))


def price_agreement(*, subtotal: Decimal, purchase_type: str, interest_type: str,
                    interest_rate: Decimal, tenor_days: int, down_payment: Decimal,
                    start_date: date) -> dict:
    """
    Totals for a new purchase.

    The down payment is capped at the total, so the outstanding balance is
    never negative.
    """
    subtotal = to_money(subtotal)
    interest_amount = calculate_interest(
        subtotal=subtotal,
        purchase_type=purchase_type,
        interest_type=interest_type,
        interest_rate=interest_rate,
        tenor_days=tenor_days,
    )
    total_amount = subtotal + interest_amount
    down_payment = min(to_money(down_payment), total_amount)

    return {
        'subtotal': subtotal,
        'interest_amount': interest_amount,
        'total_amount': total_amount,
        'down_payment': down_payment,
        'amount_paid': down_payment,
        'outstanding_balance': total_amount - down_payment,
        'installments': installment_count(purchase_type=purchase_type, tenor_days=tenor_days),
        'start_date': start_date,
        'due_date': start_date + timedelta(days=tenor_days),
    }


def next_purchase_number(customer) -> str:
    """``HP-0001``, ``HP-0002``... counted per customer."""
    count = Purchase.objects.filter(customer=customer).count()
    return f"HP-{count + 1:04d}"
