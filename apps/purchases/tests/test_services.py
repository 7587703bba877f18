import pytest
from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError

from apps.businesses.models import InterestType
from apps.documents.models import ProgressInvoice, Waybill
from apps.inventory.models import ShopProduct
from apps.purchases.models import PaymentStatus, PurchaseStatus, PurchaseType
from apps.purchases.services import (
    calculate_interest,
    installment_count,
    create_purchase,
    record_payment,
    record_collector_payment,
    confirm_payment,
    reject_payment,
    complete_purchase,
    refresh_overdue_statuses,
    PurchaseNotFoundError,
    PurchaseValidationError,
    PaymentNotFoundError,
    PaymentValidationError,
)


# =============================================================================
# Pricing
# =============================================================================

class TestPricing:

    def test_flat_interest_is_charged_once(self):
        interest = calculate_interest(
            subtotal=Decimal('1000.00'),
            purchase_type=PurchaseType.CREDIT,
            interest_type=InterestType.FLAT,
            interest_rate=Decimal('10'),
            tenor_days=90,
        )
        assert interest == Decimal('100.00')

    def test_monthly_interest_scales_with_tenor(self):
        interest = calculate_interest(
            subtotal=Decimal('1000.00'),
            purchase_type=PurchaseType.LAYAWAY,
            interest_type=InterestType.MONTHLY,
            interest_rate=Decimal('5'),
            tenor_days=90,
        )
        assert interest == Decimal('150.00')

    def test_cash_sales_carry_no_interest(self):
        interest = calculate_interest(
            subtotal=Decimal('1000.00'),
            purchase_type=PurchaseType.CASH,
            interest_type=InterestType.FLAT,
            interest_rate=Decimal('10'),
            tenor_days=30,
        )
        assert interest == Decimal('0.00')

    @pytest.mark.parametrize('purchase_type,tenor_days,expected', [
        (PurchaseType.CASH, 90, 1),
        (PurchaseType.CREDIT, 1, 1),
        (PurchaseType.CREDIT, 30, 1),
        (PurchaseType.CREDIT, 45, 2),
        (PurchaseType.LAYAWAY, 90, 3),
    ])
    def test_installment_count(self, purchase_type, tenor_days, expected):
        assert installment_count(purchase_type=purchase_type, tenor_days=tenor_days) == expected


# =============================================================================
# Sales
# =============================================================================

@pytest.mark.django_db
class TestCreatePurchase:

    def _sell(self, shop, actor, customer, stock_item, **kwargs):
        kwargs.setdefault('items', [{'product_id': stock_item.product_id, 'quantity': 1}])
        return create_purchase(actor=actor, shop=shop, customer_id=customer.id, **kwargs)

    def test_credit_sale_without_down_payment_is_pending(self, credit_purchase, stock_item):
        assert credit_purchase.status == PurchaseStatus.PENDING
        assert credit_purchase.subtotal == Decimal('1200.00')
        assert credit_purchase.total_amount == Decimal('1200.00')
        assert credit_purchase.outstanding_balance == Decimal('1200.00')
        assert credit_purchase.purchase_number == 'HP-0001'
        assert credit_purchase.installments == 2
        assert credit_purchase.due_date == credit_purchase.start_date + timedelta(days=60)

        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 10
        assert credit_purchase.stock_deducted is False

    def test_down_payment_activates_purchase_and_issues_invoice(self, collector_purchase):
        assert collector_purchase.status == PurchaseStatus.ACTIVE
        assert collector_purchase.amount_paid == Decimal('200.00')
        assert collector_purchase.outstanding_balance == Decimal('1000.00')

        payment = collector_purchase.payments.get()
        assert payment.is_confirmed is True
        assert payment.status == PaymentStatus.COMPLETED

        invoice = ProgressInvoice.objects.get(payment=payment)
        assert invoice.previous_balance == Decimal('1200.00')
        assert invoice.new_balance == Decimal('1000.00')

    def test_interest_comes_from_shop_policy(self, shop, sales_staff, customer, stock_item):
        shop.policy.interest_type = InterestType.FLAT
        shop.policy.interest_rate = Decimal('10')
        shop.policy.save()

        purchase = self._sell(shop, sales_staff, customer, stock_item, purchase_type=PurchaseType.CREDIT)

        assert purchase.interest_amount == Decimal('120.00')
        assert purchase.total_amount == Decimal('1320.00')
        assert purchase.interest_rate == Decimal('10.00')

    def test_fully_paid_cash_sale_completes_and_ships(self, shop, sales_staff, customer, stock_item):
        purchase = self._sell(
            shop, sales_staff, customer, stock_item,
            purchase_type=PurchaseType.CASH,
            down_payment=Decimal('900.00'),
        )

        assert purchase.status == PurchaseStatus.COMPLETED
        assert purchase.installments == 1
        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 9
        assert Waybill.objects.filter(purchase=purchase).exists()

    def test_cash_sale_deducts_stock_even_when_unpaid(self, shop, sales_staff, customer, stock_item):
        purchase = self._sell(shop, sales_staff, customer, stock_item, purchase_type=PurchaseType.CASH)

        assert purchase.status == PurchaseStatus.PENDING
        assert purchase.stock_deducted is True
        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 9

    def test_unit_price_override(self, shop, sales_staff, customer, stock_item):
        purchase = self._sell(
            shop, sales_staff, customer, stock_item,
            items=[{'product_id': stock_item.product_id, 'quantity': 2, 'unit_price': '950.00'}],
        )
        assert purchase.subtotal == Decimal('1900.00')
        assert purchase.items.get().unit_price == Decimal('950.00')

    def test_purchase_numbers_count_per_customer(self, credit_purchase, shop, sales_staff, customer, stock_item):
        second = self._sell(shop, sales_staff, customer, stock_item)
        assert second.purchase_number == 'HP-0002'

    def test_no_items(self, shop, sales_staff, customer, stock_item):
        with pytest.raises(PurchaseValidationError, match='At least one product is required'):
            self._sell(shop, sales_staff, customer, stock_item, items=[])

    def test_zero_quantity(self, shop, sales_staff, customer, stock_item):
        with pytest.raises(PurchaseValidationError, match='Quantity must be at least 1'):
            self._sell(
                shop, sales_staff, customer, stock_item,
                items=[{'product_id': stock_item.product_id, 'quantity': 0}],
            )

    def test_insufficient_stock(self, shop, sales_staff, customer, stock_item):
        with pytest.raises(PurchaseValidationError, match='Only 10 available'):
            self._sell(
                shop, sales_staff, customer, stock_item,
                items=[{'product_id': stock_item.product_id, 'quantity': 11}],
            )

    def test_product_not_stocked_in_shop(self, shop, sales_staff, customer, stock_item, other_shop):
        from apps.inventory.models import Product
        foreign = Product.objects.create(business=other_shop.business, name='Radio', price=Decimal('50.00'))
        ShopProduct.objects.create(shop=other_shop, product=foreign, stock_quantity=5)

        with pytest.raises(PurchaseValidationError, match='One or more products not found in this shop'):
            self._sell(
                shop, sales_staff, customer, stock_item,
                items=[{'product_id': foreign.id, 'quantity': 1}],
            )

    def test_tenor_above_policy_maximum(self, shop, sales_staff, customer, stock_item):
        with pytest.raises(PurchaseValidationError, match='Tenor cannot exceed 60 days'):
            self._sell(shop, sales_staff, customer, stock_item, tenor_days=90)

    def test_negative_down_payment(self, shop, sales_staff, customer, stock_item):
        with pytest.raises(PurchaseValidationError, match='Down payment cannot be negative'):
            self._sell(shop, sales_staff, customer, stock_item, down_payment=Decimal('-1'))

    def test_unknown_customer(self, shop, sales_staff, other_shop, stock_item):
        from apps.customers.models import Customer
        stranger = Customer.objects.create(shop=other_shop, first_name='Yaw', last_name='Boateng', phone='0200000000')

        with pytest.raises(PurchaseNotFoundError, match='Customer not found'):
            self._sell(shop, sales_staff, stranger, stock_item)

    def test_collector_sale_assigns_unassigned_customer(self, shop, collector_member, customer, stock_item):
        self._sell(shop, collector_member.user, customer, stock_item, membership=collector_member)

        customer.refresh_from_db()
        assert customer.assigned_collector == collector_member

    def test_collector_cannot_sell_to_other_collectors_customer(
        self, shop, other_collector_member, collector_customer, stock_item
    ):
        with pytest.raises(PurchaseNotFoundError, match='Customer not found'):
            self._sell(
                shop, other_collector_member.user, collector_customer, stock_item,
                membership=other_collector_member,
            )


# =============================================================================
# Payments
# =============================================================================

@pytest.mark.django_db
class TestStaffPayments:

    def test_partial_payment_activates(self, shop, sales_staff, credit_purchase):
        payment = record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='500.00')

        credit_purchase.refresh_from_db()
        assert payment.is_confirmed is True
        assert credit_purchase.status == PurchaseStatus.ACTIVE
        assert credit_purchase.amount_paid == Decimal('500.00')
        assert credit_purchase.outstanding_balance == Decimal('700.00')
        assert ProgressInvoice.objects.filter(payment=payment).exists()

    def test_final_payment_completes_and_deducts_stock(self, shop, sales_staff, credit_purchase, stock_item):
        record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='1200.00')

        credit_purchase.refresh_from_db()
        stock_item.refresh_from_db()
        assert credit_purchase.status == PurchaseStatus.COMPLETED
        assert credit_purchase.stock_deducted is True
        assert stock_item.stock_quantity == 9
        assert Waybill.objects.filter(purchase=credit_purchase).exists()

    def test_overpayment_rejected(self, shop, sales_staff, credit_purchase):
        with pytest.raises(PaymentValidationError, match='cannot exceed outstanding balance'):
            record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='1200.01')

    def test_zero_amount_rejected(self, shop, sales_staff, credit_purchase):
        with pytest.raises(PaymentValidationError, match='greater than 0'):
            record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='0')

    @pytest.mark.parametrize('amount', ['NaN', 'Infinity', 'ten'])
    def test_non_numeric_amount_rejected(self, shop, sales_staff, credit_purchase, amount):
        with pytest.raises(PaymentValidationError, match='greater than 0'):
            record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount=amount)

    def test_paid_off_purchase_rejects_payment(self, shop, sales_staff, credit_purchase):
        record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='1200.00')

        with pytest.raises(PaymentValidationError, match='already fully paid'):
            record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='1.00')

    def test_purchase_of_other_shop(self, other_shop, sales_staff, credit_purchase):
        with pytest.raises(PurchaseNotFoundError):
            record_payment(actor=sales_staff, shop=other_shop, purchase_id=credit_purchase.id, amount='10.00')


@pytest.mark.django_db
class TestCollectorPayments:

    def test_collector_payment_waits_for_confirmation(self, shop, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='300.00',
        )

        collector_purchase.refresh_from_db()
        assert payment.status == PaymentStatus.PENDING
        assert payment.is_confirmed is False
        assert payment.collector == collector_member
        assert collector_purchase.outstanding_balance == Decimal('1000.00')

    def test_unassigned_purchase_rejected(self, shop, collector_member, credit_purchase):
        with pytest.raises(PurchaseNotFoundError, match='not assigned to you'):
            record_collector_payment(
                actor=collector_member.user,
                shop=shop,
                membership=collector_member,
                purchase_id=credit_purchase.id,
                amount='100.00',
            )

    def test_confirm_applies_payment(self, shop, shop_admin, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='300.00',
        )

        confirmed = confirm_payment(actor=shop_admin, shop=shop, payment_id=payment.id)

        collector_purchase.refresh_from_db()
        assert confirmed.is_confirmed is True
        assert confirmed.status == PaymentStatus.COMPLETED
        assert confirmed.confirmed_by == shop_admin
        assert collector_purchase.outstanding_balance == Decimal('700.00')
        assert ProgressInvoice.objects.filter(payment=confirmed).exists()

    def test_confirm_twice(self, shop, shop_admin, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='300.00',
        )
        confirm_payment(actor=shop_admin, shop=shop, payment_id=payment.id)

        with pytest.raises(PaymentNotFoundError, match='already processed'):
            confirm_payment(actor=shop_admin, shop=shop, payment_id=payment.id)

    def test_reject_leaves_balance_untouched(self, shop, shop_admin, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='300.00',
        )

        rejected = reject_payment(actor=shop_admin, shop=shop, payment_id=payment.id, reason='Cash not received')

        collector_purchase.refresh_from_db()
        assert rejected.status == PaymentStatus.REJECTED
        assert rejected.rejection_reason == 'Cash not received'
        assert collector_purchase.outstanding_balance == Decimal('1000.00')

    def test_reject_requires_reason(self, shop, shop_admin, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='300.00',
        )
        with pytest.raises(PaymentValidationError, match='reason is required'):
            reject_payment(actor=shop_admin, shop=shop, payment_id=payment.id, reason='  ')


# =============================================================================
# Lifecycle
# =============================================================================

@pytest.mark.django_db
class TestLifecycle:

    def test_completion_hook_runs_once(self, shop, sales_staff, credit_purchase, stock_item):
        record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='1200.00')
        credit_purchase.refresh_from_db()

        complete_purchase(purchase=credit_purchase, actor=sales_staff)

        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 9
        assert Waybill.objects.filter(purchase=credit_purchase).count() == 1

    def test_completion_clamps_stock_at_zero(self, shop, sales_staff, credit_purchase, stock_item):
        ShopProduct.objects.filter(id=stock_item.id).update(stock_quantity=0)

        record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='1200.00')

        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 0

    def test_overdue_after_grace_days(self, credit_purchase):
        today = credit_purchase.due_date + timedelta(days=4)

        result = refresh_overdue_statuses(today=today)

        credit_purchase.refresh_from_db()
        assert result == {'overdue': 1, 'defaulted': 0}
        assert credit_purchase.status == PurchaseStatus.OVERDUE

    def test_within_grace_days_stays_open(self, credit_purchase):
        refresh_overdue_statuses(today=credit_purchase.due_date + timedelta(days=3))

        credit_purchase.refresh_from_db()
        assert credit_purchase.status == PurchaseStatus.PENDING

    def test_long_overdue_defaults(self, credit_purchase, settings):
        settings.HIRE_PURCHASE_DEFAULT_AFTER_DAYS = 90

        result = refresh_overdue_statuses(today=credit_purchase.due_date + timedelta(days=91))

        credit_purchase.refresh_from_db()
        assert result == {'overdue': 1, 'defaulted': 1}
        assert credit_purchase.status == PurchaseStatus.DEFAULTED

    def test_overdue_purchase_keeps_status_until_paid(self, shop, sales_staff, credit_purchase):
        refresh_overdue_statuses(today=credit_purchase.due_date + timedelta(days=10))

        record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='100.00')
        credit_purchase.refresh_from_db()
        assert credit_purchase.status == PurchaseStatus.OVERDUE

        record_payment(actor=sales_staff, shop=shop, purchase_id=credit_purchase.id, amount='1100.00')
        credit_purchase.refresh_from_db()
        assert credit_purchase.status == PurchaseStatus.COMPLETED


@pytest.mark.django_db
class TestRefreshStatusesCommand:

    def test_command_marks_overdue(self, credit_purchase):
        out = StringIO()
        as_of = credit_purchase.due_date + timedelta(days=5)

        call_command('refresh_purchase_statuses', '--date', as_of.isoformat(), stdout=out)

        credit_purchase.refresh_from_db()
        assert credit_purchase.status == PurchaseStatus.OVERDUE
        assert '1 purchase(s) marked overdue' in out.getvalue()

    def test_bad_date(self):
        with pytest.raises(CommandError):
            call_command('refresh_purchase_statuses', '--date', '30/06/2025')
