from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.businesses.permissions import IsPlatformAdmin
from .serializers import (
    SubscriptionPlanInputSerializer,
    SubscriptionPlanSerializer,
    SubscriptionSerializer,
    SubscriptionStatusSerializer,
)
from .services import (
    list_plans,
    upsert_plan,
    list_subscriptions,
    update_subscription_status,
    PlanNotFoundError,
    PlanValidationError,
    SubscriptionNotFoundError,
)


class SubscriptionPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class SubscriptionPlanViewSet(viewsets.ViewSet):
    """
    Plan catalogue (platform admins).

    list: Plans with subscriber counts
    create: New plan
    update: Replace an existing plan
    """
    permission_classes = [IsAuthenticated, IsPlatformAdmin]

    @extend_schema(responses={200: SubscriptionPlanSerializer(many=True)}, tags=['subscriptions'])
    def list(self, request):
        return Response(SubscriptionPlanSerializer(list_plans(), many=True).data)

    @extend_schema(request=SubscriptionPlanInputSerializer, responses={201: SubscriptionPlanSerializer}, tags=['subscriptions'])
    def create(self, request):
        serializer = SubscriptionPlanInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            plan = upsert_plan(actor=request.user, **serializer.validated_data)
        except PlanValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(SubscriptionPlanSerializer(plan).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=SubscriptionPlanInputSerializer, responses={200: SubscriptionPlanSerializer}, tags=['subscriptions'])
    def update(self, request, pk=None):
        serializer = SubscriptionPlanInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            plan = upsert_plan(actor=request.user, plan_id=pk, **serializer.validated_data)
        except PlanNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PlanValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(SubscriptionPlanSerializer(plan).data)


class SubscriptionViewSet(viewsets.GenericViewSet):
    """
    Business subscriptions (platform admins).

    list: All subscriptions, filterable by ?status=
    set_status: Change a subscription's status
    """
    permission_classes = [IsAuthenticated, IsPlatformAdmin]
    serializer_class = SubscriptionSerializer
    pagination_class = SubscriptionPagination

    def get_queryset(self):
        return list_subscriptions(status=self.request.query_params.get('status'))

    @extend_schema(
        parameters=[OpenApiParameter('status', str, description='Filter by subscription status')],
        tags=['subscriptions'],
    )
    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(SubscriptionSerializer(page, many=True).data)

    @extend_schema(request=SubscriptionStatusSerializer, responses={200: SubscriptionSerializer}, tags=['subscriptions'])
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        serializer = SubscriptionStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            subscription = update_subscription_status(
                actor=request.user,
                subscription_id=pk,
                status=serializer.validated_data['status'],
            )
        except SubscriptionNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PlanValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(SubscriptionSerializer(subscription).data)
