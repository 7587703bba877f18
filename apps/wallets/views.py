from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.businesses.models import Business
from apps.businesses.permissions import IsBusinessAdmin, IsShopAdmin, IsShopMember, IsShopStaff
from .serializers import (
    DepositInputSerializer,
    RejectTransactionSerializer,
    WalletAdjustmentSerializer,
    TransactionFilterSerializer,
    WalletTransactionSerializer,
)
from .services import (
    create_deposit,
    confirm_transaction,
    reject_transaction,
    adjust_wallet,
    list_transactions,
    get_customer_wallet,
    get_wallet_stats,
    WalletPermissionError,
    WalletCustomerNotFoundError,
    TransactionNotFoundError,
    WalletValidationError,
)


class WalletPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class WalletTransactionViewSet(viewsets.GenericViewSet):
    """
    Wallet transactions of a shop.

    list: Transactions, filterable by status and type (collectors: their own)
    create: Record a deposit (pending confirmation)
    confirm: Confirm a pending transaction and auto-apply deposits
    reject: Reject a pending transaction with a reason
    stats: Wallet totals for the shop
    customer: One customer's balance and history (collectors: assigned customers)
    """
    serializer_class = WalletTransactionSerializer
    pagination_class = WalletPagination

    def get_permissions(self):
        if self.action in ['confirm', 'reject']:
            return [IsAuthenticated(), IsShopAdmin()]
        if self.action in ['create', 'list', 'customer']:
            return [IsAuthenticated(), IsShopMember()]
        return [IsAuthenticated(), IsShopStaff()]

    @extend_schema(parameters=[TransactionFilterSerializer], tags=['wallets'])
    def list(self, request, shop_slug=None):
        filters = TransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        queryset = list_transactions(shop=self.shop, membership=self.membership, **filters.validated_data)
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(WalletTransactionSerializer(page, many=True).data)

    @extend_schema(request=DepositInputSerializer, responses={201: WalletTransactionSerializer}, tags=['wallets'])
    def create(self, request, shop_slug=None):
        serializer = DepositInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            deposit = create_deposit(
                actor=request.user,
                shop=self.shop,
                membership=self.membership,
                **serializer.validated_data,
            )
        except WalletPermissionError as e:
            return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
        except WalletCustomerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except WalletValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(WalletTransactionSerializer(deposit).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=None, responses={200: WalletTransactionSerializer}, tags=['wallets'])
    @action(detail=True, methods=['post'])
    def confirm(self, request, shop_slug=None, pk=None):
        try:
            wallet_tx = confirm_transaction(actor=request.user, shop=self.shop, transaction_id=pk)
        except TransactionNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        except WalletValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(WalletTransactionSerializer(wallet_tx).data)

    @extend_schema(request=RejectTransactionSerializer, responses={200: WalletTransactionSerializer}, tags=['wallets'])
    @action(detail=True, methods=['post'])
    def reject(self, request, shop_slug=None, pk=None):
        serializer = RejectTransactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            wallet_tx = reject_transaction(
                actor=request.user,
                shop=self.shop,
                transaction_id=pk,
                reason=serializer.validated_data['reason'],
            )
        except WalletValidationError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        except TransactionNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response(WalletTransactionSerializer(wallet_tx).data)

    @extend_schema(tags=['wallets'])
    @action(detail=False, methods=['get'])
    def stats(self, request, shop_slug=None):
        return Response(get_wallet_stats(shops=[self.shop]))

    @extend_schema(tags=['wallets'])
    @action(detail=False, methods=['get'], url_path=r'customers/(?P<customer_id>[0-9a-f-]+)')
    def customer(self, request, shop_slug=None, customer_id=None):
        try:
            customer, history = get_customer_wallet(
                shop=self.shop, customer_id=customer_id, membership=self.membership,
            )
        except WalletCustomerNotFoundError as e:
            return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
        return Response({
            'customer_id': str(customer.id),
            'customer_name': customer.full_name,
            'balance': str(customer.wallet_balance),
            'transactions': WalletTransactionSerializer(history, many=True).data,
        })


@extend_schema(tags=['wallets'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def business_wallet_stats(request, business_slug):
    business = Business.objects.get(slug=business_slug)
    return Response(get_wallet_stats(shops=business.shops.all()))


@extend_schema(request=WalletAdjustmentSerializer, responses={201: WalletTransactionSerializer}, tags=['wallets'])
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsBusinessAdmin])
def wallet_adjust(request, business_slug):
    serializer = WalletAdjustmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    business = Business.objects.get(slug=business_slug)
    try:
        adjustment = adjust_wallet(actor=request.user, business=business, **serializer.validated_data)
    except WalletCustomerNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
    except WalletValidationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(WalletTransactionSerializer(adjustment).data, status=status.HTTP_201_CREATED)
