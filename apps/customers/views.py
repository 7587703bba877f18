from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.businesses.permissions import IsShopMember, IsShopStaff, IsShopAdmin
from apps.purchases.serializers import PurchaseSerializer
from apps.subscriptions.services import PlanLimitExceededError
from .serializers import CustomerInputSerializer, CustomerSerializer, AssignCollectorSerializer
from .services import (
    list_customers,
    get_customer,
    create_customer,
    update_customer,
    delete_customer,
    toggle_customer_status,
    assign_collector,
    list_customer_purchases,
    CustomerNotFoundError,
    CustomerValidationError,
    CustomerHasPurchasesError,
)


class CustomerPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class CustomerViewSet(viewsets.GenericViewSet):
    """
    Customers of a shop.

    list: Customers with purchase summary (collectors see their own only)
    create: Register a customer
    retrieve: One customer
    partial_update: Edit customer details
    destroy: Delete a customer without purchases
    toggle: Activate/deactivate
    assign_collector: Assign or unassign a debt collector
    purchases: The customer's purchases with items and payments
    """
    serializer_class = CustomerSerializer
    pagination_class = CustomerPagination

    def get_permissions(self):
        if self.action in ['destroy', 'toggle', 'assign_collector']:
            return [IsAuthenticated(), IsShopAdmin()]
        if self.action == 'partial_update':
            return [IsAuthenticated(), IsShopStaff()]
        return [IsAuthenticated(), IsShopMember()]

    def _not_found(self, error):
        return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)

    @extend_schema(
        parameters=[OpenApiParameter('search', str, description='Name or phone contains')],
        tags=['customers'],
    )
    def list(self, request, shop_slug=None):
        queryset = list_customers(
            shop=self.shop,
            membership=self.membership,
            search=request.query_params.get('search'),
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(CustomerSerializer(page, many=True).data)

    @extend_schema(request=CustomerInputSerializer, responses={201: CustomerSerializer}, tags=['customers'])
    def create(self, request, shop_slug=None):
        serializer = CustomerInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            customer = create_customer(
                actor=request.user,
                shop=self.shop,
                membership=self.membership,
                **serializer.validated_data,
            )
        except PlanLimitExceededError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except CustomerValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: CustomerSerializer}, tags=['customers'])
    def retrieve(self, request, shop_slug=None, pk=None):
        try:
            customer = get_customer(shop=self.shop, customer_id=pk, membership=self.membership)
        except CustomerNotFoundError as e:
            return self._not_found(e)
        return Response(CustomerSerializer(customer).data)

    @extend_schema(request=CustomerInputSerializer, responses={200: CustomerSerializer}, tags=['customers'])
    def partial_update(self, request, shop_slug=None, pk=None):
        serializer = CustomerInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            customer = update_customer(
                actor=request.user,
                shop=self.shop,
                customer_id=pk,
                **serializer.validated_data,
            )
        except CustomerNotFoundError as e:
            return self._not_found(e)
        except CustomerValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CustomerSerializer(customer).data)

    def destroy(self, request, shop_slug=None, pk=None):
        try:
            delete_customer(actor=request.user, shop=self.shop, customer_id=pk)
        except CustomerNotFoundError as e:
            return self._not_found(e)
        except CustomerHasPurchasesError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=None, responses={200: CustomerSerializer}, tags=['customers'])
    @action(detail=True, methods=['post'])
    def toggle(self, request, shop_slug=None, pk=None):
        try:
            customer = toggle_customer_status(actor=request.user, shop=self.shop, customer_id=pk)
        except CustomerNotFoundError as e:
            return self._not_found(e)
        return Response(CustomerSerializer(customer).data)

    @extend_schema(request=AssignCollectorSerializer, responses={200: CustomerSerializer}, tags=['customers'])
    @action(detail=True, methods=['post'], url_path='assign-collector')
    def assign_collector(self, request, shop_slug=None, pk=None):
        serializer = AssignCollectorSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            customer = assign_collector(
                actor=request.user,
                shop=self.shop,
                customer_id=pk,
                collector_id=serializer.validated_data['collector_id'],
            )
        except CustomerNotFoundError as e:
            return self._not_found(e)
        except CustomerValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CustomerSerializer(customer).data)

    @extend_schema(responses={200: PurchaseSerializer(many=True)}, tags=['customers'])
    @action(detail=True, methods=['get'])
    def purchases(self, request, shop_slug=None, pk=None):
        try:
            customer = get_customer(shop=self.shop, customer_id=pk, membership=self.membership)
        except CustomerNotFoundError as e:
            return self._not_found(e)
        purchases = list_customer_purchases(customer=customer)
        return Response(PurchaseSerializer(purchases, many=True).data)
