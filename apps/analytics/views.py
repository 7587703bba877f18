from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.businesses.models import Business, Shop, ShopMember
from apps.businesses.permissions import (
    IsBusinessAdmin,
    IsDebtCollector,
    IsPlatformAdmin,
    IsShopAdmin,
    IsShopStaff,
)
from apps.purchases.models import Purchase
from .analytics import AnalyticsQueries
from .serializers import (
    MonthsQuerySerializer,
    ShopDashboardSerializer,
    BusinessDashboardSerializer,
    CollectorDashboardSerializer,
    AgingReportSerializer,
    CollectorPerformanceSerializer,
    PlatformAnalyticsSerializer,
)


@extend_schema(
    responses={200: ShopDashboardSerializer},
    description="Sales, collections, overdue and stock figures for one shop.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsShopStaff])
def shop_dashboard(request, shop_slug):
    shop = Shop.objects.get(slug=shop_slug)
    return Response(AnalyticsQueries.shop_dashboard(shop))


@extend_schema(
    responses={200: CollectorDashboardSerializer},
    description="The calling debt collector's portfolio and collections.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsDebtCollector])
def collector_dashboard(request, shop_slug):
    membership = ShopMember.objects.get(shop__slug=shop_slug, user=request.user)
    return Response(AnalyticsQueries.collector_dashboard(membership))


@extend_schema(
    responses={200: AgingReportSerializer},
    description="Outstanding balances of the shop by days past due.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsShopAdmin])
def shop_aging(request, shop_slug):
    return Response(AnalyticsQueries.aging_report(Purchase.objects.filter(shop__slug=shop_slug)))


@extend_schema(
    responses={200: CollectorPerformanceSerializer(many=True)},
    description="Per-collector assignment and collection figures.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsShopAdmin])
def collector_performance(request, shop_slug):
    shop = Shop.objects.get(slug=shop_slug)
    return Response(AnalyticsQueries.collector_performance(shop))


@extend_schema(
    parameters=[
        OpenApiParameter('months', OpenApiTypes.INT, description='Months of sales history', default=6),
    ],
    responses={200: BusinessDashboardSerializer},
    description="Dashboard figures across all shops of a business.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def business_dashboard(request, business_slug):
    query_serializer = MonthsQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    business = Business.objects.get(slug=business_slug)
    data = AnalyticsQueries.business_dashboard(business, months=query_serializer.validated_data['months'])
    return Response(data)


@extend_schema(
    responses={200: AgingReportSerializer},
    description="Outstanding balances of the business by days past due.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def business_aging(request, business_slug):
    return Response(AnalyticsQueries.aging_report(Purchase.objects.filter(shop__business__slug=business_slug)))


@extend_schema(
    responses={200: PlatformAnalyticsSerializer},
    description="Platform-wide totals, subscriptions and recurring revenue.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def platform_analytics(request):
    return Response(AnalyticsQueries.platform_analytics())
