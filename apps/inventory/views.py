from django.http import HttpResponse
from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.businesses.models import Business
from apps.businesses.permissions import IsShopMember, IsShopAdmin, IsBusinessAdmin
from .serializers import (
    ProductInputSerializer,
    StockAdjustmentSerializer,
    ShopProductSerializer,
    CategorySerializer,
)
from .services import (
    list_shop_products,
    get_shop_product,
    create_product,
    update_product,
    delete_product,
    toggle_product_status,
    adjust_stock,
    list_categories,
    create_category,
    export_products,
    import_products,
    products_template,
    workbook_to_bytes,
    XLSX_CONTENT_TYPE,
    ProductNotFoundError,
    ProductValidationError,
    SpreadsheetError,
)


def xlsx_response(workbook, filename):
    response = HttpResponse(workbook_to_bytes(workbook), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


class ShopProductViewSet(viewsets.GenericViewSet):
    """
    Products of a shop with that shop's stock.

    list/retrieve: Any shop member (sales screens need prices)
    create, partial_update, destroy, toggle, adjust_stock: Shop admins
    """
    serializer_class = ShopProductSerializer

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [IsAuthenticated(), IsShopMember()]
        return [IsAuthenticated(), IsShopAdmin()]

    @extend_schema(
        parameters=[OpenApiParameter('active', bool, description='Only sellable products')],
        tags=['inventory'],
    )
    def list(self, request, shop_slug=None):
        only_active = request.query_params.get('active') in ('1', 'true', 'True')
        products = list_shop_products(shop=self.shop, include_inactive=not only_active)
        return Response(ShopProductSerializer(products, many=True).data)

    def retrieve(self, request, shop_slug=None, pk=None):
        try:
            stock_item = get_shop_product(shop=self.shop, product_id=pk)
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ShopProductSerializer(stock_item).data)

    @extend_schema(request=ProductInputSerializer, responses={201: ShopProductSerializer}, tags=['inventory'])
    def create(self, request, shop_slug=None):
        serializer = ProductInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            stock_item = create_product(actor=request.user, shop=self.shop, **serializer.validated_data)
        except ProductValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ShopProductSerializer(stock_item).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ProductInputSerializer, responses={200: ShopProductSerializer}, tags=['inventory'])
    def partial_update(self, request, shop_slug=None, pk=None):
        serializer = ProductInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            stock_item = update_product(
                actor=request.user,
                shop=self.shop,
                product_id=pk,
                **serializer.validated_data,
            )
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ProductValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ShopProductSerializer(stock_item).data)

    def destroy(self, request, shop_slug=None, pk=None):
        try:
            deleted = delete_product(actor=request.user, shop=self.shop, product_id=pk)
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        if deleted:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response({'deactivated': True})

    @extend_schema(request=None, responses={200: ShopProductSerializer}, tags=['inventory'])
    @action(detail=True, methods=['post'])
    def toggle(self, request, shop_slug=None, pk=None):
        try:
            stock_item = toggle_product_status(actor=request.user, shop=self.shop, product_id=pk)
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ShopProductSerializer(stock_item).data)

    @extend_schema(request=StockAdjustmentSerializer, responses={200: ShopProductSerializer}, tags=['inventory'])
    @action(detail=True, methods=['post'], url_path='adjust-stock')
    def adjust_stock(self, request, shop_slug=None, pk=None):
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            stock_item = adjust_stock(
                actor=request.user,
                shop=self.shop,
                product_id=pk,
                **serializer.validated_data,
            )
        except ProductNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ProductValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ShopProductSerializer(stock_item).data)


# =============================================================================
# Business admin: categories and workbooks
# =============================================================================

class CategoryViewSet(viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated, IsBusinessAdmin]
    serializer_class = CategorySerializer

    def list(self, request, business_slug=None):
        return Response(CategorySerializer(list_categories(business=self.business), many=True).data)

    @extend_schema(request=CategorySerializer, responses={201: CategorySerializer}, tags=['inventory'])
    def create(self, request, business_slug=None):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            category = create_category(actor=request.user, business=self.business, **serializer.validated_data)
        except ProductValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[OpenApiParameter('shop', str, description='Only rows for this shop slug')],
    responses={(200, XLSX_CONTENT_TYPE): bytes},
    description="Download the business's products as xlsx.",
    tags=['inventory'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def products_export(request, business_slug):
    business = Business.objects.get(slug=business_slug)
    workbook = export_products(business=business, shop_slug=request.query_params.get('shop'))
    filename = f"products-{business.slug}-{timezone.localdate():%Y-%m-%d}.xlsx"
    return xlsx_response(workbook, filename)


@extend_schema(
    request={'multipart/form-data': {'type': 'object', 'properties': {'file': {'type': 'string', 'format': 'binary'}}}},
    description="Create or update products from an xlsx upload (field: file).",
    tags=['inventory'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
@parser_classes([MultiPartParser])
def products_import(request, business_slug):
    uploaded = request.FILES.get('file')
    if uploaded is None:
        return Response({'error': 'No file uploaded'}, status=status.HTTP_400_BAD_REQUEST)

    business = Business.objects.get(slug=business_slug)
    try:
        result = import_products(actor=request.user, business=business, uploaded_file=uploaded)
    except SpreadsheetError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(result)


@extend_schema(
    responses={(200, XLSX_CONTENT_TYPE): bytes},
    description="Download the product import template.",
    tags=['inventory'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def products_import_template(request, business_slug):
    return xlsx_response(products_template(), 'products-import-template.xlsx')
