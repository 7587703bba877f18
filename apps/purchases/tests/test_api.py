import pytest
from decimal import Decimal
from io import BytesIO
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from openpyxl import load_workbook
from rest_framework import status

from apps.inventory.services.spreadsheets import build_workbook, workbook_to_bytes
from apps.purchases.models import Payment, PaymentStatus, Purchase, PurchaseStatus
from apps.purchases.services import record_collector_payment
from apps.purchases.services.spreadsheets import PURCHASE_IMPORT_COLUMNS


def purchase_url(name, shop, **kwargs):
    return reverse(f'purchases:{name}', kwargs={'shop_slug': shop.slug, **kwargs})


# =============================================================================
# Purchases
# =============================================================================

@pytest.mark.django_db
class TestPurchaseList:
    """Tests for GET /api/shops/{slug}/purchases/"""

    def test_staff_sees_shop_purchases(self, staff_client, shop, credit_purchase):
        response = staff_client.get(purchase_url('purchase-list', shop))

        assert response.status_code == status.HTTP_200_OK
        ids = [p['id'] for p in response.data['results']]
        assert str(credit_purchase.id) in ids

    def test_collector_sees_only_assigned_customers(
        self, collector_client, shop, credit_purchase, collector_purchase
    ):
        response = collector_client.get(purchase_url('purchase-list', shop))

        assert response.status_code == status.HTTP_200_OK
        ids = [p['id'] for p in response.data['results']]
        assert ids == [str(collector_purchase.id)]

    def test_filter_by_status(self, staff_client, shop, credit_purchase, collector_purchase):
        response = staff_client.get(purchase_url('purchase-list', shop), {'status': PurchaseStatus.ACTIVE})

        ids = [p['id'] for p in response.data['results']]
        assert ids == [str(collector_purchase.id)]

    def test_search_by_customer_name(self, staff_client, shop, credit_purchase, collector_purchase):
        response = staff_client.get(purchase_url('purchase-list', shop), {'search': 'Mensah'})

        ids = [p['id'] for p in response.data['results']]
        assert ids == [str(credit_purchase.id)]

    def test_unauthenticated(self, api_client, shop):
        response = api_client.get(purchase_url('purchase-list', shop))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_outsider_forbidden(self, outsider_client, shop):
        response = outsider_client.get(purchase_url('purchase-list', shop))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_shop(self, staff_client):
        response = staff_client.get(reverse('purchases:purchase-list', kwargs={'shop_slug': 'nowhere'}))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_business_admin_sees_shop_purchases(self, owner_client, shop, credit_purchase):
        response = owner_client.get(purchase_url('purchase-list', shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1


@pytest.mark.django_db
class TestPurchaseCreate:
    """Tests for POST /api/shops/{slug}/purchases/"""

    def test_create_sale(self, staff_client, shop, customer, stock_item):
        payload = {
            'customer_id': str(customer.id),
            'purchase_type': 'CREDIT',
            'down_payment': '200.00',
            'items': [{'product_id': str(stock_item.product_id), 'quantity': 1}],
        }
        response = staff_client.post(purchase_url('purchase-list', shop), payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == PurchaseStatus.ACTIVE
        assert response.data['total_amount'] == '1200.00'
        assert response.data['outstanding_balance'] == '1000.00'
        assert len(response.data['items']) == 1
        assert len(response.data['payments']) == 1

    def test_validation_error_is_400(self, staff_client, shop, customer, stock_item):
        payload = {
            'customer_id': str(customer.id),
            'items': [{'product_id': str(stock_item.product_id), 'quantity': 50}],
        }
        response = staff_client.post(purchase_url('purchase-list', shop), payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'Insufficient stock' in response.data['error']

    def test_unknown_customer_is_404(self, staff_client, shop, stock_item):
        payload = {
            'customer_id': '00000000-0000-0000-0000-000000000000',
            'items': [{'product_id': str(stock_item.product_id), 'quantity': 1}],
        }
        response = staff_client.post(purchase_url('purchase-list', shop), payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Customer not found'


@pytest.mark.django_db
class TestPurchaseRetrieve:

    def test_retrieve(self, staff_client, shop, credit_purchase):
        response = staff_client.get(purchase_url('purchase-detail', shop, pk=credit_purchase.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['purchase_number'] == 'HP-0001'
        assert response.data['customer_name'] == 'Kwame Mensah'

    def test_collector_cannot_see_unassigned(self, collector_client, shop, credit_purchase):
        response = collector_client.get(purchase_url('purchase-detail', shop, pk=credit_purchase.id))
        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Payments
# =============================================================================

@pytest.mark.django_db
class TestRecordPayment:
    """Tests for POST /api/shops/{slug}/purchases/{id}/payments/"""

    def test_staff_payment(self, staff_client, shop, credit_purchase):
        response = staff_client.post(
            purchase_url('purchase-payments', shop, pk=credit_purchase.id),
            {'amount': '400.00', 'payment_method': 'MOBILE_MONEY', 'reference': 'MM-123'},
            format='json',
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['is_confirmed'] is True
        credit_purchase.refresh_from_db()
        assert credit_purchase.outstanding_balance == Decimal('800.00')

    def test_wallet_method_not_accepted(self, staff_client, shop, credit_purchase):
        response = staff_client.post(
            purchase_url('purchase-payments', shop, pk=credit_purchase.id),
            {'amount': '400.00', 'payment_method': 'WALLET'},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_overpayment(self, staff_client, shop, credit_purchase):
        response = staff_client.post(
            purchase_url('purchase-payments', shop, pk=credit_purchase.id),
            {'amount': '5000.00'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Payment amount cannot exceed outstanding balance'

    def test_collector_cannot_use_staff_endpoint(self, collector_client, shop, collector_purchase):
        response = collector_client.post(
            purchase_url('purchase-payments', shop, pk=collector_purchase.id),
            {'amount': '100.00'},
            format='json',
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestCollectorFlow:

    def test_collect_then_confirm(self, collector_client, manager_client, shop, collector_purchase):
        response = collector_client.post(
            purchase_url('purchase-collect', shop, pk=collector_purchase.id),
            {'amount': '250.00'},
            format='json',
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == PaymentStatus.PENDING
        payment_id = response.data['id']

        response = manager_client.get(purchase_url('payment-pending', shop))
        assert [p['id'] for p in response.data['results']] == [payment_id]

        response = manager_client.post(purchase_url('payment-confirm', shop, pk=payment_id))
        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_confirmed'] is True

        collector_purchase.refresh_from_db()
        assert collector_purchase.outstanding_balance == Decimal('750.00')

    def test_collect_on_unassigned_purchase(self, collector_client, shop, credit_purchase):
        response = collector_client.post(
            purchase_url('purchase-collect', shop, pk=credit_purchase.id),
            {'amount': '100.00'},
            format='json',
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Purchase not found or customer not assigned to you'

    def test_staff_cannot_confirm(self, staff_client, shop, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='100.00',
        )
        response = staff_client.post(purchase_url('payment-confirm', shop, pk=payment.id))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reject(self, manager_client, shop, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='100.00',
        )
        response = manager_client.post(
            purchase_url('payment-reject', shop, pk=payment.id),
            {'reason': 'Receipt mismatch'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == PaymentStatus.REJECTED

    def test_collector_history(self, collector_client, shop, collector_member, collector_purchase):
        record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='100.00',
        )
        response = collector_client.get(purchase_url('payment-history', shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_receipt(self, staff_client, shop, collector_purchase):
        payment = collector_purchase.payments.get()
        response = staff_client.get(purchase_url('payment-receipt', shop, pk=payment.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount'] == '200.00'
        assert response.data['purchaseNumber'] == collector_purchase.purchase_number
        assert response.data['shopName'] == shop.name

    def test_receipt_of_pending_payment(self, staff_client, shop, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='100.00',
        )
        response = staff_client.get(purchase_url('payment-receipt', shop, pk=payment.id))
        assert response.status_code == status.HTTP_404_NOT_FOUND


# =============================================================================
# Workbooks
# =============================================================================

def upload(rows):
    workbook = build_workbook('Purchases', PURCHASE_IMPORT_COLUMNS, rows)
    return SimpleUploadedFile('purchases.xlsx', workbook_to_bytes(workbook))


@pytest.mark.django_db
class TestPurchaseWorkbooks:

    def test_export(self, owner_client, business, credit_purchase):
        url = reverse('purchases_business:purchases-export', kwargs={'business_slug': business.slug})
        response = owner_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        sheet = load_workbook(BytesIO(response.content)).active
        rows = list(sheet.iter_rows(values_only=True))
        assert rows[0][0] == 'Purchase Number'
        assert rows[1][0] == 'HP-0001'

    def test_export_rejects_unknown_status(self, owner_client, business):
        url = reverse('purchases_business:purchases-export', kwargs={'business_slug': business.slug})
        response = owner_client.get(url, {'status': 'LOST'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_shop_admin_cannot_export(self, manager_client, business):
        url = reverse('purchases_business:purchases-export', kwargs={'business_slug': business.slug})
        response = manager_client.get(url)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_import(self, owner_client, business, shop, customer, stock_item):
        rows = [
            [shop.slug, customer.phone, 'TV-43', '1', '1000', 'CREDIT', 200, 500, 4, '', 'Ledger page 3'],
            [shop.slug, customer.phone, 'TV-43', '1', '1000', 'CREDIT', 300, 100, '', '', ''],
            ['unknown-shop', customer.phone, 'TV-43', '1', '', 'CREDIT', 0, '', '', '', ''],
        ]
        url = reverse('purchases_business:purchases-import', kwargs={'business_slug': business.slug})
        response = owner_client.post(url, {'file': upload(rows)}, format='multipart')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['created'] == 1
        assert response.data['totalErrors'] == 2
        assert response.data['errors'][0] == 'Row 3: Amount paid cannot be less than down payment'
        assert response.data['errors'][1] == 'Row 4: Shop not found: unknown-shop'

        purchase = Purchase.objects.get(customer=customer)
        assert purchase.status == PurchaseStatus.ACTIVE
        assert purchase.total_amount == Decimal('1000.00')
        assert purchase.interest_amount == Decimal('0.00')
        assert purchase.outstanding_balance == Decimal('500.00')
        assert purchase.installments == 4
        assert purchase.stock_deducted is True
        assert Payment.objects.get(purchase=purchase).amount == Decimal('500.00')

        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 10

    def test_import_without_file(self, owner_client, business):
        url = reverse('purchases_business:purchases-import', kwargs={'business_slug': business.slug})
        response = owner_client.post(url, {}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'No file uploaded'

    def test_import_rejects_non_workbook(self, owner_client, business):
        url = reverse('purchases_business:purchases-import', kwargs={'business_slug': business.slug})
        bogus = SimpleUploadedFile('purchases.xlsx', b'not a workbook')
        response = owner_client.post(url, {'file': bogus}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid spreadsheet file'

    def test_template(self, owner_client, business):
        url = reverse('purchases_business:purchases-template', kwargs={'business_slug': business.slug})
        response = owner_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        sheet = load_workbook(BytesIO(response.content)).active
        assert [cell.value for cell in sheet[1]] == PURCHASE_IMPORT_COLUMNS
