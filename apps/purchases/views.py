from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes, parser_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.businesses.models import Business
from apps.businesses.permissions import (
    IsBusinessAdmin,
    IsDebtCollector,
    IsShopAdmin,
    IsShopMember,
    IsShopStaff,
)
from apps.inventory.services import SpreadsheetError, XLSX_CONTENT_TYPE
from apps.inventory.views import xlsx_response
from .models import PurchaseStatus
from .serializers import (
    SaleInputSerializer,
    PaymentInputSerializer,
    RejectPaymentSerializer,
    PurchaseFilterSerializer,
    PurchaseSerializer,
    PaymentSerializer,
)
from .services import (
    list_purchases,
    get_purchase,
    create_purchase,
    record_payment,
    record_collector_payment,
    list_pending_payments,
    list_collector_payments,
    confirm_payment,
    reject_payment,
    get_payment_receipt,
    export_purchases,
    import_purchases,
    purchases_template,
    PurchaseNotFoundError,
    PurchaseValidationError,
    PaymentNotFoundError,
    PaymentValidationError,
)


class PurchasePagination(PageNumberPagination):
    """Custom pagination for purchases."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class PurchaseViewSet(viewsets.GenericViewSet):
    """
    Hire-purchase agreements of a shop.

    list: Purchases (collectors see their assigned customers' only)
    create: Record a sale
    retrieve: One purchase with items and payments
    payments: Record a staff payment (confirmed on entry)
    collect: Record a collector payment (pending confirmation)
    """
    serializer_class = PurchaseSerializer
    pagination_class = PurchasePagination

    def get_permissions(self):
        if self.action == 'payments':
            return [IsAuthenticated(), IsShopStaff()]
        if self.action == 'collect':
            return [IsAuthenticated(), IsDebtCollector()]
        return [IsAuthenticated(), IsShopMember()]

    @extend_schema(parameters=[PurchaseFilterSerializer], tags=['purchases'])
    def list(self, request, shop_slug=None):
        filters = PurchaseFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        queryset = list_purchases(
            shop=self.shop,
            membership=self.membership,
            status=params.get('status'),
            customer_id=params.get('customer'),
            search=params.get('search'),
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(PurchaseSerializer(page, many=True).data)

    @extend_schema(request=SaleInputSerializer, responses={201: PurchaseSerializer}, tags=['purchases'])
    def create(self, request, shop_slug=None):
        serializer = SaleInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            purchase = create_purchase(
                actor=request.user,
                shop=self.shop,
                membership=self.membership,
                **serializer.validated_data,
            )
        except PurchaseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PurchaseValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        purchase = get_purchase(shop=self.shop, purchase_id=purchase.id)
        return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: PurchaseSerializer}, tags=['purchases'])
    def retrieve(self, request, shop_slug=None, pk=None):
        try:
            purchase = get_purchase(shop=self.shop, purchase_id=pk, membership=self.membership)
        except PurchaseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(PurchaseSerializer(purchase).data)

    @extend_schema(request=PaymentInputSerializer, responses={201: PaymentSerializer}, tags=['purchases'])
    @action(detail=True, methods=['post'])
    def payments(self, request, shop_slug=None, pk=None):
        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = record_payment(
                actor=request.user,
                shop=self.shop,
                purchase_id=pk,
                **serializer.validated_data,
            )
        except PurchaseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PaymentValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=PaymentInputSerializer, responses={201: PaymentSerializer}, tags=['purchases'])
    @action(detail=True, methods=['post'])
    def collect(self, request, shop_slug=None, pk=None):
        serializer = PaymentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = record_collector_payment(
                actor=request.user,
                shop=self.shop,
                membership=self.membership,
                purchase_id=pk,
                **serializer.validated_data,
            )
        except PurchaseNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PaymentValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class PaymentViewSet(viewsets.GenericViewSet):
    """
    Payment confirmation queue and receipts.

    pending: Payments awaiting confirmation (collectors see their own)
    history: A collector's own payments
    confirm: Confirm a collector payment (shop admin)
    reject: Reject a collector payment with a reason (shop admin)
    receipt: Receipt data for a confirmed payment
    """
    serializer_class = PaymentSerializer
    pagination_class = PurchasePagination

    def get_permissions(self):
        if self.action in ['confirm', 'reject']:
            return [IsAuthenticated(), IsShopAdmin()]
        if self.action == 'history':
            return [IsAuthenticated(), IsDebtCollector()]
        return [IsAuthenticated(), IsShopMember()]

    @extend_schema(responses={200: PaymentSerializer(many=True)}, tags=['payments'])
    @action(detail=False, methods=['get'])
    def pending(self, request, shop_slug=None):
        payments = list_pending_payments(shop=self.shop, membership=self.membership)
        page = self.paginate_queryset(payments)
        return self.get_paginated_response(PaymentSerializer(page, many=True).data)

    @extend_schema(
        parameters=[OpenApiParameter('status', str, description='Filter by payment status')],
        responses={200: PaymentSerializer(many=True)},
        tags=['payments'],
    )
    @action(detail=False, methods=['get'])
    def history(self, request, shop_slug=None):
        payments = list_collector_payments(
            shop=self.shop,
            membership=self.membership,
            status=request.query_params.get('status'),
        )
        page = self.paginate_queryset(payments)
        return self.get_paginated_response(PaymentSerializer(page, many=True).data)

    @extend_schema(request=None, responses={200: PaymentSerializer}, tags=['payments'])
    @action(detail=True, methods=['post'])
    def confirm(self, request, shop_slug=None, pk=None):
        try:
            payment = confirm_payment(actor=request.user, shop=self.shop, payment_id=pk)
        except PaymentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except PaymentValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(request=RejectPaymentSerializer, responses={200: PaymentSerializer}, tags=['payments'])
    @action(detail=True, methods=['post'])
    def reject(self, request, shop_slug=None, pk=None):
        serializer = RejectPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            payment = reject_payment(
                actor=request.user,
                shop=self.shop,
                payment_id=pk,
                reason=serializer.validated_data['reason'],
            )
        except PaymentValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except PaymentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(PaymentSerializer(payment).data)

    @extend_schema(tags=['payments'])
    @action(detail=True, methods=['get'])
    def receipt(self, request, shop_slug=None, pk=None):
        try:
            data = get_payment_receipt(shop=self.shop, payment_id=pk, membership=self.membership)
        except PaymentNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(data)


@extend_schema(
    parameters=[
        OpenApiParameter('shop', str, description='Only purchases of this shop slug'),
        OpenApiParameter('status', str, description='Only purchases with this status'),
    ],
    responses={(200, XLSX_CONTENT_TYPE): bytes},
    description="Download the business's purchases as xlsx.",
    tags=['purchases'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def purchases_export(request, business_slug):
    business = Business.objects.get(slug=business_slug)
    status_filter = request.query_params.get('status')
    if status_filter and status_filter not in PurchaseStatus.values:
        return Response({'error': 'Invalid status'}, status=status.HTTP_400_BAD_REQUEST)

    workbook = export_purchases(
        business=business,
        shop_slug=request.query_params.get('shop'),
        status=status_filter,
    )
    filename = f"purchases-{business.slug}-{timezone.localdate():%Y-%m-%d}.xlsx"
    return xlsx_response(workbook, filename)


@extend_schema(
    request={'multipart/form-data': {'type': 'object', 'properties': {'file': {'type': 'string', 'format': 'binary'}}}},
    description="Create historical purchases from an xlsx upload (field: file).",
    tags=['purchases'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
@parser_classes([MultiPartParser])
def purchases_import(request, business_slug):
    uploaded = request.FILES.get('file')
    if uploaded is None:
        return Response({'error': 'No file uploaded'}, status=status.HTTP_400_BAD_REQUEST)

    business = Business.objects.get(slug=business_slug)
    try:
        result = import_purchases(actor=request.user, business=business, uploaded_file=uploaded)
    except SpreadsheetError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(result)


@extend_schema(
    responses={(200, XLSX_CONTENT_TYPE): bytes},
    description="Download the purchase import template.",
    tags=['purchases'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def purchases_import_template(request, business_slug):
    return xlsx_response(purchases_template(), 'purchases-import-template.xlsx')
