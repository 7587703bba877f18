import pytest
from decimal import Decimal

from apps.purchases.models import PaymentMethod, PurchaseStatus
from apps.wallets.models import TransactionStatus, TransactionType, WalletTransaction
from apps.wallets.services import (
    adjust_wallet,
    can_load_wallet,
    confirm_transaction,
    create_deposit,
    get_wallet_stats,
    reject_transaction,
    InsufficientBalanceError,
    TransactionNotFoundError,
    WalletCustomerNotFoundError,
    WalletPermissionError,
    WalletValidationError,
)


@pytest.mark.django_db
class TestWalletPermission:

    def test_shop_admin_can_always_load(self, shop_admin_member):
        assert can_load_wallet(shop_admin_member) is True

    def test_business_admin_without_membership_can_load(self):
        assert can_load_wallet(None) is True

    def test_staff_needs_flag(self, staff_member):
        assert can_load_wallet(staff_member) is False

        staff_member.can_load_wallet = True
        assert can_load_wallet(staff_member) is True

    def test_staff_without_flag_cannot_deposit(self, shop, staff_member, customer):
        with pytest.raises(WalletPermissionError):
            create_deposit(
                actor=staff_member.user,
                shop=shop,
                membership=staff_member,
                customer_id=customer.id,
                amount='100.00',
            )


@pytest.mark.django_db
class TestDeposits:

    def test_deposit_is_pending_and_moves_nothing(self, shop, shop_admin_member, customer):
        deposit = create_deposit(
            actor=shop_admin_member.user,
            shop=shop,
            membership=shop_admin_member,
            customer_id=customer.id,
            amount='150.00',
            payment_method=PaymentMethod.MOBILE_MONEY,
        )

        customer.refresh_from_db()
        assert deposit.status == TransactionStatus.PENDING
        assert deposit.type == TransactionType.DEPOSIT
        assert deposit.balance_after == Decimal('150.00')
        assert customer.wallet_balance == Decimal('0.00')

    def test_amount_must_be_positive(self, shop, shop_admin_member, customer):
        with pytest.raises(WalletValidationError, match='greater than 0'):
            create_deposit(
                actor=shop_admin_member.user,
                shop=shop,
                membership=shop_admin_member,
                customer_id=customer.id,
                amount='0',
            )

    def test_customer_of_other_shop(self, other_shop, shop_admin_member, customer):
        with pytest.raises(WalletCustomerNotFoundError):
            create_deposit(
                actor=shop_admin_member.user,
                shop=other_shop,
                membership=None,
                customer_id=customer.id,
                amount='10.00',
            )

    def test_confirm_credits_wallet(self, shop, shop_admin_member, customer):
        deposit = create_deposit(
            actor=shop_admin_member.user,
            shop=shop,
            membership=shop_admin_member,
            customer_id=customer.id,
            amount='150.00',
        )

        confirmed = confirm_transaction(actor=shop_admin_member.user, shop=shop, transaction_id=deposit.id)

        customer.refresh_from_db()
        assert confirmed.status == TransactionStatus.CONFIRMED
        assert confirmed.confirmed_by == shop_admin_member.user
        assert customer.wallet_balance == Decimal('150.00')

    def test_confirm_twice(self, shop, shop_admin_member, customer):
        deposit = create_deposit(
            actor=shop_admin_member.user,
            shop=shop,
            membership=shop_admin_member,
            customer_id=customer.id,
            amount='150.00',
        )
        confirm_transaction(actor=shop_admin_member.user, shop=shop, transaction_id=deposit.id)

        with pytest.raises(TransactionNotFoundError):
            confirm_transaction(actor=shop_admin_member.user, shop=shop, transaction_id=deposit.id)

    def test_reject(self, shop, shop_admin_member, customer):
        deposit = create_deposit(
            actor=shop_admin_member.user,
            shop=shop,
            membership=shop_admin_member,
            customer_id=customer.id,
            amount='150.00',
        )

        rejected = reject_transaction(
            actor=shop_admin_member.user, shop=shop, transaction_id=deposit.id, reason='Bounced transfer',
        )

        customer.refresh_from_db()
        assert rejected.status == TransactionStatus.REJECTED
        assert rejected.rejected_reason == 'Bounced transfer'
        assert customer.wallet_balance == Decimal('0.00')

    def test_reject_requires_reason(self, shop, shop_admin_member, customer):
        deposit = create_deposit(
            actor=shop_admin_member.user,
            shop=shop,
            membership=shop_admin_member,
            customer_id=customer.id,
            amount='150.00',
        )
        with pytest.raises(WalletValidationError, match='reason is required'):
            reject_transaction(actor=shop_admin_member.user, shop=shop, transaction_id=deposit.id, reason='')


@pytest.mark.django_db
class TestAutoApply:

    def _confirmed_deposit(self, shop, member, customer, amount):
        deposit = create_deposit(
            actor=member.user, shop=shop, membership=member, customer_id=customer.id, amount=amount,
        )
        return confirm_transaction(actor=member.user, shop=shop, transaction_id=deposit.id)

    def test_deposit_pays_open_purchase(self, shop, shop_admin_member, customer, credit_purchase):
        self._confirmed_deposit(shop, shop_admin_member, customer, '500.00')

        customer.refresh_from_db()
        credit_purchase.refresh_from_db()
        assert customer.wallet_balance == Decimal('0.00')
        assert credit_purchase.outstanding_balance == Decimal('700.00')
        assert credit_purchase.status == PurchaseStatus.ACTIVE

        debit = WalletTransaction.objects.get(type=TransactionType.PURCHASE_PAYMENT)
        assert debit.purchase == credit_purchase
        assert debit.amount == Decimal('500.00')
        assert debit.balance_before == Decimal('500.00')
        assert debit.balance_after == Decimal('0.00')

        payment = credit_purchase.payments.get()
        assert payment.payment_method == PaymentMethod.WALLET
        assert payment.is_confirmed is True

    def test_surplus_stays_in_wallet(self, shop, shop_admin_member, customer, credit_purchase, stock_item):
        self._confirmed_deposit(shop, shop_admin_member, customer, '1500.00')

        customer.refresh_from_db()
        credit_purchase.refresh_from_db()
        stock_item.refresh_from_db()
        assert customer.wallet_balance == Decimal('300.00')
        assert credit_purchase.status == PurchaseStatus.COMPLETED
        assert stock_item.stock_quantity == 9

    def test_no_open_purchase_keeps_balance(self, shop, shop_admin_member, customer):
        self._confirmed_deposit(shop, shop_admin_member, customer, '80.00')

        customer.refresh_from_db()
        assert customer.wallet_balance == Decimal('80.00')
        assert not WalletTransaction.objects.filter(type=TransactionType.PURCHASE_PAYMENT).exists()


@pytest.mark.django_db
class TestAdjustments:

    def test_positive_adjustment(self, business, business_admin, customer):
        adjustment = adjust_wallet(
            actor=business_admin, business=business, customer_id=customer.id, amount='25.00',
        )

        customer.refresh_from_db()
        assert adjustment.type == TransactionType.ADJUSTMENT
        assert adjustment.status == TransactionStatus.CONFIRMED
        assert customer.wallet_balance == Decimal('25.00')

    def test_cannot_go_negative(self, business, business_admin, customer):
        with pytest.raises(InsufficientBalanceError, match='negative balance'):
            adjust_wallet(actor=business_admin, business=business, customer_id=customer.id, amount='-1.00')

    def test_zero_rejected(self, business, business_admin, customer):
        with pytest.raises(WalletValidationError):
            adjust_wallet(actor=business_admin, business=business, customer_id=customer.id, amount='0')

    def test_customer_of_other_business(self, other_shop, business_admin, customer):
        with pytest.raises(WalletCustomerNotFoundError):
            adjust_wallet(
                actor=business_admin, business=other_shop.business, customer_id=customer.id, amount='5.00',
            )


@pytest.mark.django_db
class TestWalletStats:

    def test_stats(self, shop, shop_admin_member, customer, collector_customer):
        first = create_deposit(
            actor=shop_admin_member.user, shop=shop, membership=shop_admin_member,
            customer_id=customer.id, amount='100.00',
        )
        confirm_transaction(actor=shop_admin_member.user, shop=shop, transaction_id=first.id)
        create_deposit(
            actor=shop_admin_member.user, shop=shop, membership=shop_admin_member,
            customer_id=collector_customer.id, amount='40.00',
        )

        stats = get_wallet_stats(shops=[shop])

        assert stats == {
            'totalBalance': '100.00',
            'customersWithBalance': 1,
            'pendingCount': 1,
            'pendingAmount': '40.00',
            'todayDeposits': '100.00',
        }


@pytest.mark.django_db
class TestCollectorDeposits:

    @pytest.fixture
    def loading_collector(self, collector_member):
        collector_member.can_load_wallet = True
        collector_member.save(update_fields=['can_load_wallet'])
        return collector_member

    def test_assigned_customer(self, shop, loading_collector, collector_customer):
        deposit = create_deposit(
            actor=loading_collector.user,
            shop=shop,
            membership=loading_collector,
            customer_id=collector_customer.id,
            amount='60.00',
        )

        assert deposit.status == TransactionStatus.PENDING
        assert deposit.customer == collector_customer

    def test_unassigned_customer(self, shop, loading_collector, customer):
        with pytest.raises(WalletCustomerNotFoundError):
            create_deposit(
                actor=loading_collector.user,
                shop=shop,
                membership=loading_collector,
                customer_id=customer.id,
                amount='60.00',
            )

        assert not WalletTransaction.objects.exists()

    def test_non_numeric_amount(self, shop, shop_admin_member, customer):
        with pytest.raises(WalletValidationError, match='greater than 0'):
            create_deposit(
                actor=shop_admin_member.user,
                shop=shop,
                membership=shop_admin_member,
                customer_id=customer.id,
                amount='NaN',
            )


@pytest.mark.django_db
class TestWithdrawals:

    def _withdrawal(self, shop, member, customer, amount):
        return WalletTransaction.objects.create(
            customer=customer,
            shop=shop,
            type=TransactionType.WITHDRAWAL,
            status=TransactionStatus.PENDING,
            amount=Decimal(amount),
            balance_before=customer.wallet_balance,
            balance_after=customer.wallet_balance - Decimal(amount),
            created_by=member.user,
        )

    def test_withdrawal_debits_wallet(self, shop, shop_admin_member, customer):
        customer.wallet_balance = Decimal('200.00')
        customer.save(update_fields=['wallet_balance'])
        withdrawal = self._withdrawal(shop, shop_admin_member, customer, '75.00')

        confirmed = confirm_transaction(actor=shop_admin_member.user, shop=shop, transaction_id=withdrawal.id)

        customer.refresh_from_db()
        assert confirmed.status == TransactionStatus.CONFIRMED
        assert confirmed.balance_before == Decimal('200.00')
        assert confirmed.balance_after == confirmed.balance_before - confirmed.amount
        assert customer.wallet_balance == Decimal('125.00')

    def test_withdrawal_larger_than_balance(self, shop, shop_admin_member, customer):
        customer.wallet_balance = Decimal('50.00')
        customer.save(update_fields=['wallet_balance'])
        withdrawal = self._withdrawal(shop, shop_admin_member, customer, '80.00')

        with pytest.raises(InsufficientBalanceError, match='Insufficient wallet balance'):
            confirm_transaction(actor=shop_admin_member.user, shop=shop, transaction_id=withdrawal.id)

        customer.refresh_from_db()
        withdrawal.refresh_from_db()
        assert customer.wallet_balance == Decimal('50.00')
        assert withdrawal.status == TransactionStatus.PENDING
