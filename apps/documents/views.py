from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.businesses.permissions import IsShopMember, IsShopStaff
from .serializers import (
    ProgressInvoiceSerializer,
    WaybillSerializer,
    GenerateWaybillSerializer,
    DeliveryStatusSerializer,
    ReadyForDeliverySerializer,
)
from .services import (
    list_invoices,
    get_invoice,
    generate_waybill,
    update_delivery_status,
    list_waybills,
    get_waybill,
    list_ready_for_delivery,
    DocumentNotFoundError,
    WaybillExistsError,
    WaybillValidationError,
)


class DocumentPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class InvoiceViewSet(viewsets.GenericViewSet):
    """
    Progress invoices of a shop. Debt collectors see the invoices for
    payments they collected.
    """
    serializer_class = ProgressInvoiceSerializer
    pagination_class = DocumentPagination
    permission_classes = [IsAuthenticated, IsShopMember]

    @extend_schema(
        parameters=[OpenApiParameter('purchase', str, description='Filter by purchase id')],
        tags=['documents'],
    )
    def list(self, request, shop_slug=None):
        queryset = list_invoices(
            shop=self.shop,
            membership=self.membership,
            purchase_id=request.query_params.get('purchase') or None,
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(ProgressInvoiceSerializer(page, many=True).data)

    @extend_schema(tags=['documents'])
    def retrieve(self, request, shop_slug=None, pk=None):
        try:
            invoice = get_invoice(shop=self.shop, invoice_id=pk, membership=self.membership)
        except DocumentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ProgressInvoiceSerializer(invoice).data)


class WaybillViewSet(viewsets.GenericViewSet):
    """
    Waybills and delivery tracking (shop admins and sales staff).

    generate: Waybill for a fully paid purchase
    ready: Completed purchases awaiting delivery
    delivery_status: Move a purchase through delivery
    """
    serializer_class = WaybillSerializer
    pagination_class = DocumentPagination
    permission_classes = [IsAuthenticated, IsShopStaff]

    @extend_schema(
        parameters=[OpenApiParameter('delivery_status', str, description='Filter by delivery status')],
        tags=['documents'],
    )
    def list(self, request, shop_slug=None):
        queryset = list_waybills(
            shop=self.shop,
            delivery_status=request.query_params.get('delivery_status'),
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(WaybillSerializer(page, many=True).data)

    @extend_schema(tags=['documents'])
    def retrieve(self, request, shop_slug=None, pk=None):
        try:
            waybill = get_waybill(shop=self.shop, waybill_id=pk)
        except DocumentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(WaybillSerializer(waybill).data)

    @extend_schema(request=GenerateWaybillSerializer, responses={201: WaybillSerializer}, tags=['documents'])
    @action(detail=False, methods=['post'])
    def generate(self, request, shop_slug=None):
        serializer = GenerateWaybillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        purchase_id = data.pop('purchase_id')

        try:
            waybill = generate_waybill(actor=request.user, shop=self.shop, purchase_id=purchase_id, **data)
        except DocumentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except WaybillExistsError as e:
            return Response({'error': str(e)}, status=status.HTTP_409_CONFLICT)
        except WaybillValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(WaybillSerializer(waybill).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: ReadyForDeliverySerializer(many=True)}, tags=['documents'])
    @action(detail=False, methods=['get'])
    def ready(self, request, shop_slug=None):
        purchases = list_ready_for_delivery(shop=self.shop)
        return Response(ReadyForDeliverySerializer(purchases, many=True).data)

    @extend_schema(request=DeliveryStatusSerializer, tags=['documents'])
    @action(detail=False, methods=['post'], url_path='delivery-status')
    def delivery_status(self, request, shop_slug=None):
        serializer = DeliveryStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            purchase = update_delivery_status(actor=request.user, shop=self.shop, **serializer.validated_data)
        except DocumentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except WaybillValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response({
            'purchase_id': str(purchase.id),
            'purchase_number': purchase.purchase_number,
            'delivery_status': purchase.delivery_status,
        })
