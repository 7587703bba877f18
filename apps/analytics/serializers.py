"""
Serializers for analytics app.

Input serializers validate query parameters; response serializers
document the dashboard payloads for the API schema.
"""

from rest_framework import serializers


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class MonthsQuerySerializer(serializers.Serializer):
    months = serializers.IntegerField(
        required=False,
        default=6,
        min_value=1,
        max_value=24,
        help_text='Number of months of sales history',
    )


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class ShopDashboardSerializer(serializers.Serializer):
    totalCustomers = serializers.IntegerField()
    activeCustomers = serializers.IntegerField()
    purchasesByStatus = serializers.DictField(child=serializers.IntegerField())
    totalSales = serializers.DecimalField(max_digits=14, decimal_places=2)
    totalCollected = serializers.DecimalField(max_digits=14, decimal_places=2)
    totalOutstanding = serializers.DecimalField(max_digits=14, decimal_places=2)
    collectionRate = serializers.FloatField()
    overdueCount = serializers.IntegerField()
    overdueAmount = serializers.DecimalField(max_digits=14, decimal_places=2)
    pendingPaymentsCount = serializers.IntegerField()
    lowStockProducts = serializers.IntegerField()
    todayCollections = serializers.DecimalField(max_digits=14, decimal_places=2)


class ShopBreakdownSerializer(serializers.Serializer):
    slug = serializers.CharField()
    name = serializers.CharField()
    isActive = serializers.BooleanField()
    purchaseCount = serializers.IntegerField()
    totalSales = serializers.DecimalField(max_digits=14, decimal_places=2)
    totalCollected = serializers.DecimalField(max_digits=14, decimal_places=2)
    totalOutstanding = serializers.DecimalField(max_digits=14, decimal_places=2)
    collectionRate = serializers.FloatField()


class MonthlySalesSerializer(serializers.Serializer):
    month = serializers.CharField(help_text='YYYY-MM')
    sales = serializers.DecimalField(max_digits=14, decimal_places=2)
    count = serializers.IntegerField()


class BusinessDashboardSerializer(ShopDashboardSerializer):
    shops = ShopBreakdownSerializer(many=True)
    monthlySales = MonthlySalesSerializer(many=True)


class CollectorDashboardSerializer(serializers.Serializer):
    assignedCustomers = serializers.IntegerField()
    totalOutstanding = serializers.DecimalField(max_digits=14, decimal_places=2)
    collectedToday = serializers.DecimalField(max_digits=14, decimal_places=2)
    collectedThisMonth = serializers.DecimalField(max_digits=14, decimal_places=2)
    pendingCount = serializers.IntegerField()
    pendingAmount = serializers.DecimalField(max_digits=14, decimal_places=2)


class AgingBucketSerializer(serializers.Serializer):
    bucket = serializers.ChoiceField(choices=['current', '1-30', '31-60', '61-90', '90+'])
    count = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)


class AgingReportSerializer(serializers.Serializer):
    buckets = AgingBucketSerializer(many=True)
    totalOutstanding = serializers.DecimalField(max_digits=14, decimal_places=2)


class CollectorPerformanceSerializer(serializers.Serializer):
    collectorId = serializers.UUIDField()
    name = serializers.CharField()
    isActive = serializers.BooleanField()
    assignedCustomers = serializers.IntegerField()
    collectedCount = serializers.IntegerField()
    collectedAmount = serializers.DecimalField(max_digits=14, decimal_places=2)
    pendingCount = serializers.IntegerField()
    rejectedCount = serializers.IntegerField()


class PlatformAnalyticsSerializer(serializers.Serializer):
    totalBusinesses = serializers.IntegerField()
    activeBusinesses = serializers.IntegerField()
    totalShops = serializers.IntegerField()
    totalUsers = serializers.IntegerField()
    totalCustomers = serializers.IntegerField()
    totalPurchases = serializers.IntegerField()
    totalTransactionVolume = serializers.DecimalField(max_digits=14, decimal_places=2)
    subscriptionsByStatus = serializers.DictField(child=serializers.IntegerField())
    monthlyRecurringRevenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    openTickets = serializers.IntegerField()
