from django.db.models import Count
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .models import Business, Shop, ShopRole
from .permissions import (
    IsPlatformAdmin,
    IsBusinessAdmin,
    IsShopMember,
    IsShopAdmin,
    IsShopBusinessAdmin,
)
from .serializers import (
    BusinessCreateSerializer,
    BusinessUpdateSerializer,
    BusinessSerializer,
    ActiveStatusSerializer,
    ShopCreateSerializer,
    ShopUpdateSerializer,
    ShopSerializer,
    ShopMemberCreateSerializer,
    ShopMemberSerializer,
    DebtCollectorCreateSerializer,
    DebtCollectorSerializer,
    ShopPolicyInputSerializer,
    ShopPolicySerializer,
)
from .services import (
    create_business,
    set_business_active,
    update_business,
    get_business_stats,
    get_business_shop,
    create_shop,
    update_shop,
    set_shop_active,
    delete_shop,
    get_shop_member,
    list_shop_members,
    add_shop_member,
    set_member_active,
    toggle_wallet_permission,
    list_debt_collectors,
    create_debt_collector,
    toggle_debt_collector_status,
    delete_debt_collector,
    get_policy,
    upsert_policy,
    # Exceptions
    BusinessValidationError,
    BusinessNotFoundError,
    ShopNotFoundError,
    MemberNotFoundError,
    CollectorHasCustomersError,
    ShopHasPurchasesError,
    PlanLimitExceededError,
)


class TenantPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


# =============================================================================
# Platform admin: businesses
# =============================================================================

class PlatformBusinessViewSet(viewsets.GenericViewSet):
    """
    Businesses on the platform (platform admins only).

    list: All businesses with shop/customer/purchase counts
    create: Create a business, optionally with its owner account
    set_status: Activate or suspend a business
    """
    permission_classes = [IsAuthenticated, IsPlatformAdmin]
    serializer_class = BusinessSerializer
    pagination_class = TenantPagination
    lookup_field = 'slug'

    def get_queryset(self):
        return Business.objects.annotate(
            shop_count=Count('shops', distinct=True),
            customer_count=Count('shops__customers', distinct=True),
            purchase_count=Count('shops__purchases', distinct=True),
        ).order_by('name')

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        serializer = BusinessSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=BusinessCreateSerializer, responses={201: BusinessSerializer})
    def create(self, request, *args, **kwargs):
        serializer = BusinessCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            business = create_business(actor=request.user, **serializer.validated_data)
        except BusinessValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(BusinessSerializer(business).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ActiveStatusSerializer, responses={200: BusinessSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, slug=None):
        serializer = ActiveStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        business = self.get_object()
        business = set_business_active(
            actor=request.user,
            business=business,
            is_active=serializer.validated_data['is_active'],
        )
        return Response(BusinessSerializer(business).data)


# =============================================================================
# Business admin: profile, stats, shops
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: BusinessSerializer},
    description="Business profile.",
    tags=['businesses'],
)
@extend_schema(
    methods=['PATCH'],
    request=BusinessUpdateSerializer,
    responses={200: BusinessSerializer},
    description="Update the business profile.",
    tags=['businesses'],
)
@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def business_detail(request, business_slug):
    """Get or update the business profile."""
    business = Business.objects.get(slug=business_slug)
    if request.method == 'GET':
        return Response(BusinessSerializer(business).data)

    serializer = BusinessUpdateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        business = update_business(actor=request.user, business=business, **serializer.validated_data)
    except BusinessValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(BusinessSerializer(business).data)


@extend_schema(
    description="Shop, product, customer and purchase counts for a business.",
    tags=['businesses'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def business_stats(request, business_slug):
    business = Business.objects.get(slug=business_slug)
    return Response(get_business_stats(business=business))


class BusinessShopViewSet(viewsets.GenericViewSet):
    """
    Shops of a business (business admins).

    list: Shops with product/customer/member/purchase counts
    create: Create a shop (and optionally its shop admin)
    partial_update: Rename or edit contact details
    destroy: Delete a shop without purchase history
    set_status: Activate or suspend a shop
    """
    permission_classes = [IsAuthenticated, IsBusinessAdmin]
    serializer_class = ShopSerializer
    pagination_class = TenantPagination

    def get_queryset(self):
        return (
            Shop.objects
            .filter(business=self.business)
            .select_related('business')
            .annotate(
                product_count=Count('stock_items', distinct=True),
                customer_count=Count('customers', distinct=True),
                member_count=Count('members', distinct=True),
                purchase_count=Count('purchases', distinct=True),
            )
            .order_by('name')
        )

    def _get_shop(self, pk):
        return get_business_shop(business=self.business, shop_id=pk)

    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(ShopSerializer(page, many=True).data)

    @extend_schema(request=ShopCreateSerializer, responses={201: ShopSerializer})
    def create(self, request, *args, **kwargs):
        serializer = ShopCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            shop, shop_admin = create_shop(
                actor=request.user,
                business=self.business,
                **serializer.validated_data,
            )
        except PlanLimitExceededError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except BusinessValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        data = ShopSerializer(shop).data
        data['shop_admin'] = (
            {'email': shop_admin.email, 'name': shop_admin.name} if shop_admin else None
        )
        return Response(data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ShopUpdateSerializer, responses={200: ShopSerializer})
    def partial_update(self, request, business_slug=None, pk=None):
        serializer = ShopUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            shop = update_shop(actor=request.user, shop=self._get_shop(pk), **serializer.validated_data)
        except ShopNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except BusinessValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ShopSerializer(shop).data)

    def destroy(self, request, business_slug=None, pk=None):
        try:
            delete_shop(actor=request.user, shop=self._get_shop(pk))
        except ShopNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except ShopHasPurchasesError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=ActiveStatusSerializer, responses={200: ShopSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, business_slug=None, pk=None):
        serializer = ActiveStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            shop = set_shop_active(
                actor=request.user,
                shop=self._get_shop(pk),
                is_active=serializer.validated_data['is_active'],
            )
        except ShopNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(ShopSerializer(shop).data)


# =============================================================================
# Shop admin: staff, collectors, policy
# =============================================================================

class ShopStaffViewSet(viewsets.GenericViewSet):
    """
    Members of a shop.

    list: All members, optionally filtered by ?role=
    create: Add a shop admin or sales staff member
    set_status: Activate or deactivate a member
    wallet_permission: Toggle can_load_wallet (business admins only)
    """
    permission_classes = [IsAuthenticated, IsShopAdmin]
    serializer_class = ShopMemberSerializer

    def get_permissions(self):
        if self.action == 'wallet_permission':
            return [IsAuthenticated(), IsShopBusinessAdmin()]
        return [IsAuthenticated(), IsShopAdmin()]

    def list(self, request, shop_slug=None):
        members = list_shop_members(shop=self.shop, role=request.query_params.get('role'))
        return Response(ShopMemberSerializer(members, many=True).data)

    @extend_schema(request=ShopMemberCreateSerializer, responses={201: ShopMemberSerializer})
    def create(self, request, shop_slug=None):
        serializer = ShopMemberCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            member = add_shop_member(actor=request.user, shop=self.shop, **serializer.validated_data)
        except BusinessValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ShopMemberSerializer(member).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ActiveStatusSerializer, responses={200: ShopMemberSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, shop_slug=None, pk=None):
        serializer = ActiveStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            member = get_shop_member(shop=self.shop, member_id=pk)
        except MemberNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        member = set_member_active(
            actor=request.user,
            member=member,
            is_active=serializer.validated_data['is_active'],
        )
        return Response(ShopMemberSerializer(member).data)

    @extend_schema(request=None, responses={200: ShopMemberSerializer})
    @action(detail=True, methods=['post'], url_path='wallet-permission')
    def wallet_permission(self, request, shop_slug=None, pk=None):
        try:
            member = get_shop_member(shop=self.shop, member_id=pk)
        except MemberNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        member = toggle_wallet_permission(actor=request.user, member=member)
        return Response(ShopMemberSerializer(member).data)


class DebtCollectorViewSet(viewsets.GenericViewSet):
    """
    Debt collectors of a shop (shop admins).

    list: Collectors with assigned customer counts and confirmed collections
    create: Create a collector account
    toggle: Activate/deactivate a collector
    destroy: Remove a collector with no assigned customers
    """
    permission_classes = [IsAuthenticated, IsShopAdmin]
    serializer_class = DebtCollectorSerializer

    def list(self, request, shop_slug=None):
        collectors = list_debt_collectors(shop=self.shop)
        return Response(DebtCollectorSerializer(collectors, many=True).data)

    @extend_schema(request=DebtCollectorCreateSerializer, responses={201: DebtCollectorSerializer})
    def create(self, request, shop_slug=None):
        serializer = DebtCollectorCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            collector = create_debt_collector(actor=request.user, shop=self.shop, **serializer.validated_data)
        except BusinessValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(DebtCollectorSerializer(collector).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: DebtCollectorSerializer})
    @action(detail=True, methods=['post'])
    def toggle(self, request, shop_slug=None, pk=None):
        try:
            collector = toggle_debt_collector_status(actor=request.user, shop=self.shop, collector_id=pk)
        except MemberNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(DebtCollectorSerializer(collector).data)

    def destroy(self, request, shop_slug=None, pk=None):
        try:
            delete_debt_collector(actor=request.user, shop=self.shop, collector_id=pk)
        except MemberNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except CollectorHasCustomersError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ShopPolicyView(viewsets.ViewSet):
    """Credit policy: readable by every member, writable by shop admins."""

    def get_permissions(self):
        if self.action == 'update':
            return [IsAuthenticated(), IsShopAdmin()]
        return [IsAuthenticated(), IsShopMember()]

    @extend_schema(responses={200: ShopPolicySerializer}, tags=['policy'])
    def retrieve(self, request, shop_slug=None):
        return Response(ShopPolicySerializer(get_policy(shop=self.shop)).data)

    @extend_schema(request=ShopPolicyInputSerializer, responses={200: ShopPolicySerializer}, tags=['policy'])
    def update(self, request, shop_slug=None):
        serializer = ShopPolicyInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            policy = upsert_policy(actor=request.user, shop=self.shop, **serializer.validated_data)
        except BusinessValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ShopPolicySerializer(policy).data)
