"""
Analytics Module
=================

Read-only aggregate queries behind the dashboards: shop, collector,
business and platform level, plus the receivables aging report and
collector performance.

Every method returns plain dicts/lists ready for a JSON response; money
values are rendered as strings to keep Decimal precision.

Example:
    Shop dashboard::

        from apps.analytics.analytics import AnalyticsQueries

        stats = AnalyticsQueries.shop_dashboard(shop)
        print(stats['collectionRate'])
"""

from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, DecimalField, F, Q, Sum, Value
from django.db.models.functions import Coalesce, TruncMonth
from django.utils import timezone

from apps.accounts.models import User
from apps.businesses.models import Business, Shop, ShopMember, ShopRole
from apps.customers.models import Customer
from apps.inventory.models import ShopProduct
from apps.purchases.models import Payment, PaymentStatus, Purchase, PurchaseStatus
from apps.subscriptions.models import Subscription, SubscriptionStatus
from apps.support.models import SupportTicket, TicketStatus

MONEY = DecimalField(max_digits=14, decimal_places=2)
ZERO = Decimal('0.00')

OPEN_STATUSES = (PurchaseStatus.PENDING, PurchaseStatus.ACTIVE, PurchaseStatus.OVERDUE)
AGING_BUCKETS = ('current', '1-30', '31-60', '61-90', '90+')


def money_sum(field, condition=None):
    return Coalesce(Sum(field, filter=condition), Value(ZERO), output_field=MONEY)


def collection_rate(collected, outstanding) -> float:
    """Collected share of (collected + outstanding), in percent to 1 place."""
    denominator = collected + outstanding
    if denominator <= 0:
        return 0.0
    return round(float(collected / denominator * 100), 1)


def aging_bucket(days_past_due: int) -> str:
    if days_past_due <= 0:
        return 'current'
    if days_past_due <= 30:
        return '1-30'
    if days_past_due <= 60:
        return '31-60'
    if days_past_due <= 90:
        return '61-90'
    return '90+'


class AnalyticsQueries:
    """
    Aggregate queries for analytics endpoints.

    Methods take tenant objects (shop, business, membership) already
    resolved and authorised by the view layer.
    """

    @staticmethod
    def _sales_figures(purchases, payments, customers, stock_items):
        """Dashboard figures shared by the shop and business dashboards."""
        today = timezone.localdate()

        totals = purchases.aggregate(
            total_sales=money_sum('total_amount'),
            total_collected=money_sum('amount_paid'),
            total_outstanding=money_sum('outstanding_balance'),
            overdue_count=Count('id', filter=Q(status=PurchaseStatus.OVERDUE)),
            overdue_amount=money_sum('outstanding_balance', Q(status=PurchaseStatus.OVERDUE)),
        )
        by_status = {status: 0 for status in PurchaseStatus.values}
        for row in purchases.order_by().values('status').annotate(count=Count('id')):
            by_status[row['status']] = row['count']

        customer_counts = customers.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True)),
        )
        pending_payments = payments.filter(status=PaymentStatus.PENDING, is_confirmed=False).count()
        today_collections = payments.filter(
            is_confirmed=True,
            status=PaymentStatus.COMPLETED,
            confirmed_at__date=today,
        ).aggregate(total=money_sum('amount'))['total']
        low_stock = stock_items.filter(
            is_active=True,
            product__is_active=True,
            stock_quantity__lte=F('product__low_stock_threshold'),
        ).count()

        return {
            'totalCustomers': customer_counts['total'],
            'activeCustomers': customer_counts['active'],
            'purchasesByStatus': by_status,
            'totalSales': str(totals['total_sales']),
            'totalCollected': str(totals['total_collected']),
            'totalOutstanding': str(totals['total_outstanding']),
            'collectionRate': collection_rate(totals['total_collected'], totals['total_outstanding']),
            'overdueCount': totals['overdue_count'],
            'overdueAmount': str(totals['overdue_amount']),
            'pendingPaymentsCount': pending_payments,
            'lowStockProducts': low_stock,
            'todayCollections': str(today_collections),
        }

    @staticmethod
    def shop_dashboard(shop: Shop) -> dict:
        return AnalyticsQueries._sales_figures(
            purchases=Purchase.objects.filter(shop=shop),
            payments=Payment.objects.filter(purchase__shop=shop),
            customers=Customer.objects.filter(shop=shop),
            stock_items=ShopProduct.objects.filter(shop=shop),
        )

    @staticmethod
    def collector_dashboard(membership: ShopMember) -> dict:
        """Figures for one debt collector in their shop."""
        today = timezone.localdate()
        month_start = today.replace(day=1)

        assigned = Customer.objects.filter(assigned_collector=membership)
        outstanding = Purchase.objects.filter(
            customer__assigned_collector=membership,
            status__in=OPEN_STATUSES,
        ).aggregate(total=money_sum('outstanding_balance'))['total']

        payments = Payment.objects.filter(collector=membership).aggregate(
            today=money_sum('amount', Q(is_confirmed=True, confirmed_at__date=today)),
            month=money_sum('amount', Q(is_confirmed=True, confirmed_at__date__gte=month_start)),
            pending_count=Count('id', filter=Q(status=PaymentStatus.PENDING, is_confirmed=False)),
            pending_amount=money_sum('amount', Q(status=PaymentStatus.PENDING, is_confirmed=False)),
        )

        return {
            'assignedCustomers': assigned.count(),
            'totalOutstanding': str(outstanding),
            'collectedToday': str(payments['today']),
            'collectedThisMonth': str(payments['month']),
            'pendingCount': payments['pending_count'],
            'pendingAmount': str(payments['pending_amount']),
        }

    @staticmethod
    def business_dashboard(business: Business, months: int = 6) -> dict:
        """
        Shop dashboard figures across the business, plus a per-shop breakdown
        and sales per month for the last ``months`` months.
        """
        shops = business.shops.all()
        data = AnalyticsQueries._sales_figures(
            purchases=Purchase.objects.filter(shop__business=business),
            payments=Payment.objects.filter(purchase__shop__business=business),
            customers=Customer.objects.filter(shop__business=business),
            stock_items=ShopProduct.objects.filter(shop__business=business),
        )

        breakdown = (
            shops
            .annotate(
                purchase_count=Count('purchases', distinct=True),
                sales=money_sum('purchases__total_amount'),
                collected=money_sum('purchases__amount_paid'),
                outstanding=money_sum('purchases__outstanding_balance'),
            )
            .order_by('name')
        )
        data['shops'] = [
            {
                'slug': shop.slug,
                'name': shop.name,
                'isActive': shop.is_active,
                'purchaseCount': shop.purchase_count,
                'totalSales': str(shop.sales),
                'totalCollected': str(shop.collected),
                'totalOutstanding': str(shop.outstanding),
                'collectionRate': collection_rate(shop.collected, shop.outstanding),
            }
            for shop in breakdown
        ]

        today = timezone.localdate()
        first_month = today.replace(day=1)
        for _ in range(max(months, 1) - 1):
            first_month = (first_month - timedelta(days=1)).replace(day=1)

        monthly = (
            Purchase.objects
            .filter(shop__business=business, start_date__gte=first_month)
            .annotate(month=TruncMonth('start_date'))
            .values('month')
            .annotate(sales=money_sum('total_amount'), count=Count('id'))
            .order_by('month')
        )
        data['monthlySales'] = [
            {
                'month': row['month'].strftime('%Y-%m'),
                'sales': str(row['sales']),
                'count': row['count'],
            }
            for row in monthly
        ]
        return data

    @staticmethod
    def aging_report(purchases) -> dict:
        """Outstanding balances of unfinished purchases bucketed by days past due."""
        today = timezone.localdate()
        buckets = {name: {'count': 0, 'amount': ZERO} for name in AGING_BUCKETS}

        rows = (
            purchases
            .exclude(status=PurchaseStatus.COMPLETED)
            .filter(outstanding_balance__gt=0)
            .values_list('due_date', 'outstanding_balance')
        )
        for due_date, outstanding in rows:
            bucket = buckets[aging_bucket((today - due_date).days)]
            bucket['count'] += 1
            bucket['amount'] += outstanding

        total = sum((b['amount'] for b in buckets.values()), ZERO)
        return {
            'buckets': [
                {'bucket': name, 'count': buckets[name]['count'], 'amount': str(buckets[name]['amount'])}
                for name in AGING_BUCKETS
            ],
            'totalOutstanding': str(total),
        }

    @staticmethod
    def collector_performance(shop: Shop) -> list:
        assigned = dict(
            Customer.objects
            .filter(shop=shop, assigned_collector__isnull=False)
            .order_by()
            .values_list('assigned_collector')
            .annotate(count=Count('id'))
        )
        collectors = (
            ShopMember.objects
            .filter(shop=shop, role=ShopRole.DEBT_COLLECTOR)
            .select_related('user')
            .annotate(
                collected_count=Count('collected_payments', filter=Q(collected_payments__is_confirmed=True)),
                collected_amount=money_sum(
                    'collected_payments__amount',
                    Q(collected_payments__is_confirmed=True),
                ),
                pending=Count(
                    'collected_payments',
                    filter=Q(collected_payments__status=PaymentStatus.PENDING),
                ),
                rejected=Count(
                    'collected_payments',
                    filter=Q(collected_payments__status=PaymentStatus.REJECTED),
                ),
            )
            .order_by('user__name', 'user__email')
        )
        return [
            {
                'collectorId': str(member.id),
                'name': member.user.get_display_name(),
                'isActive': member.is_active,
                'assignedCustomers': assigned.get(member.id, 0),
                'collectedCount': member.collected_count,
                'collectedAmount': str(member.collected_amount),
                'pendingCount': member.pending,
                'rejectedCount': member.rejected,
            }
            for member in collectors
        ]

    @staticmethod
    def platform_analytics() -> dict:
        businesses = Business.objects.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True)),
        )
        volume = Payment.objects.filter(is_confirmed=True).aggregate(total=money_sum('amount'))['total']

        by_status = {status: 0 for status in SubscriptionStatus.values}
        for row in Subscription.objects.order_by().values('status').annotate(count=Count('id')):
            by_status[row['status']] = row['count']

        mrr = sum(
            (subscription.plan.monthly_price for subscription in
             Subscription.objects.filter(status=SubscriptionStatus.ACTIVE).select_related('plan')),
            ZERO,
        )

        return {
            'totalBusinesses': businesses['total'],
            'activeBusinesses': businesses['active'],
            'totalShops': Shop.objects.count(),
            'totalUsers': User.objects.count(),
            'totalCustomers': Customer.objects.count(),
            'totalPurchases': Purchase.objects.count(),
            'totalTransactionVolume': str(volume),
            'subscriptionsByStatus': by_status,
            'monthlyRecurringRevenue': str(mrr.quantize(Decimal('0.01'))),
            'openTickets': SupportTicket.objects.filter(
                status__in=[TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.WAITING]
            ).count(),
        }
