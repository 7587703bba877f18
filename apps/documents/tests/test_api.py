import pytest
from decimal import Decimal
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from apps.documents.models import ProgressInvoice, Waybill
from apps.documents.services import (
    generate_waybill,
    next_invoice_number,
    next_waybill_number,
    update_delivery_status,
    WaybillExistsError,
    WaybillValidationError,
)
from apps.purchases.models import DeliveryStatus
from apps.purchases.services import confirm_payment, record_collector_payment, record_payment


def documents_url(name, shop, **kwargs):
    return reverse(f'documents:{name}', kwargs={'shop_slug': shop.slug, **kwargs})


# =============================================================================
# Numbering
# =============================================================================

@pytest.mark.django_db
class TestNumbering:

    def test_invoice_numbers_run_per_day(self, shop, staff_member, credit_purchase):
        today = timezone.localdate()
        record_payment(actor=staff_member.user, shop=shop, purchase_id=credit_purchase.id, amount='100.00')

        assert ProgressInvoice.objects.get().invoice_number == f"INV-{today:%Y%m%d}-0001"
        assert next_invoice_number(shop) == f"INV-{today:%Y%m%d}-0002"

    def test_waybill_numbers_run_per_year(self, shop, paid_purchase):
        year = timezone.localdate().year

        assert paid_purchase.waybill.waybill_number == f"WB-{year}-00001"
        assert next_waybill_number(shop) == f"WB-{year}-00002"


# =============================================================================
# Progress invoices
# =============================================================================

@pytest.mark.django_db
class TestProgressInvoices:

    def test_invoice_snapshots_payment(self, shop, staff_member, credit_purchase):
        payment = record_payment(
            actor=staff_member.user, shop=shop, purchase_id=credit_purchase.id, amount='300.00',
        )
        invoice = payment.invoice

        assert invoice.payment_amount == Decimal('300.00')
        assert invoice.previous_balance == Decimal('1200.00')
        assert invoice.new_balance == Decimal('900.00')
        assert invoice.total_amount_paid == Decimal('300.00')
        assert invoice.customer_name == 'Kwame Mensah'
        assert invoice.shop_name == shop.name
        assert invoice.is_purchase_completed is False
        assert invoice.waybill_number == ''

    def test_final_invoice_carries_waybill(self, paid_purchase):
        invoice = ProgressInvoice.objects.get(purchase=paid_purchase)

        assert invoice.is_purchase_completed is True
        assert invoice.waybill_number == paid_purchase.waybill.waybill_number

    def test_collected_invoice_names_collector(self, shop, shop_admin, collector_member, collector_purchase):
        payment = record_collector_payment(
            actor=collector_member.user,
            shop=shop,
            membership=collector_member,
            purchase_id=collector_purchase.id,
            amount='100.00',
        )
        confirm_payment(actor=shop_admin, shop=shop, payment_id=payment.id)

        invoice = ProgressInvoice.objects.get(payment=payment)
        assert invoice.collector_name == 'Kofi Collector'
        assert invoice.confirmed_by_name == 'Shop Manager'

    def test_list_invoices(self, staff_client, shop, collector_purchase, credit_purchase):
        response = staff_client.get(documents_url('invoice-list', shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_filter_by_purchase(self, staff_client, shop, staff_member, collector_purchase, credit_purchase):
        record_payment(actor=staff_member.user, shop=shop, purchase_id=credit_purchase.id, amount='50.00')

        response = staff_client.get(documents_url('invoice-list', shop), {'purchase': str(credit_purchase.id)})

        assert response.data['count'] == 1
        assert response.data['results'][0]['purchase_id'] == str(credit_purchase.id)

    def test_collector_sees_own_collections_only(self, collector_client, shop, collector_purchase):
        response = collector_client.get(documents_url('invoice-list', shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 0

    def test_retrieve_unknown_invoice(self, staff_client, shop):
        url = documents_url('invoice-detail', shop, pk='00000000-0000-0000-0000-000000000000')
        response = staff_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Invoice not found'


# =============================================================================
# Waybills
# =============================================================================

@pytest.mark.django_db
class TestWaybillServices:

    def test_completion_generates_waybill(self, paid_purchase):
        waybill = paid_purchase.waybill

        assert waybill.recipient_name == 'Kwame Mensah'
        assert waybill.delivery_address == '12 Ring Road, Accra'
        assert paid_purchase.delivery_status == DeliveryStatus.SCHEDULED

    def test_unpaid_purchase_rejected(self, shop, staff_member, credit_purchase):
        with pytest.raises(WaybillValidationError, match='must be fully paid'):
            generate_waybill(actor=staff_member.user, shop=shop, purchase_id=credit_purchase.id)

    def test_second_waybill_rejected(self, shop, staff_member, paid_purchase):
        with pytest.raises(WaybillExistsError):
            generate_waybill(actor=staff_member.user, shop=shop, purchase_id=paid_purchase.id)

    def test_manual_waybill_with_overrides(self, shop, staff_member, paid_purchase):
        Waybill.objects.filter(purchase=paid_purchase).delete()

        waybill = generate_waybill(
            actor=staff_member.user,
            shop=shop,
            purchase_id=paid_purchase.id,
            recipient_name='Ama Mensah',
            delivery_city='Tema',
        )

        assert waybill.recipient_name == 'Ama Mensah'
        assert waybill.recipient_phone == '0244000001'
        assert waybill.delivery_city == 'Tema'
        assert waybill.generated_by == staff_member.user

    def test_delivery_requires_waybill(self, shop, staff_member, credit_purchase):
        with pytest.raises(WaybillValidationError, match='Generate a waybill'):
            update_delivery_status(
                actor=staff_member.user,
                shop=shop,
                purchase_id=credit_purchase.id,
                status=DeliveryStatus.IN_TRANSIT,
            )

    def test_delivered_stamps_waybill(self, shop, staff_member, paid_purchase):
        purchase = update_delivery_status(
            actor=staff_member.user,
            shop=shop,
            purchase_id=paid_purchase.id,
            status=DeliveryStatus.DELIVERED,
            received_by_name='Kwame Mensah',
        )

        waybill = Waybill.objects.get(purchase=purchase)
        assert purchase.delivery_status == DeliveryStatus.DELIVERED
        assert waybill.delivered_by == staff_member.user
        assert waybill.delivered_at is not None
        assert waybill.received_by_name == 'Kwame Mensah'


@pytest.mark.django_db
class TestWaybillApi:

    def test_list(self, staff_client, shop, paid_purchase):
        response = staff_client.get(documents_url('waybill-list', shop))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['results'][0]['purchase_number'] == paid_purchase.purchase_number
        assert response.data['results'][0]['delivery_status'] == DeliveryStatus.SCHEDULED

    def test_generate_existing_is_conflict(self, staff_client, shop, paid_purchase):
        response = staff_client.post(
            documents_url('waybill-generate', shop),
            {'purchase_id': str(paid_purchase.id)},
            format='json',
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['error'] == 'Waybill already exists for this purchase'

    def test_generate_unpaid_is_400(self, staff_client, shop, credit_purchase):
        response = staff_client.post(
            documents_url('waybill-generate', shop),
            {'purchase_id': str(credit_purchase.id)},
            format='json',
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_ready_for_delivery(self, staff_client, shop, paid_purchase, credit_purchase):
        response = staff_client.get(documents_url('waybill-ready', shop))

        assert response.status_code == status.HTTP_200_OK
        assert [p['id'] for p in response.data] == [str(paid_purchase.id)]

    def test_delivery_status(self, staff_client, shop, paid_purchase):
        response = staff_client.post(
            documents_url('waybill-delivery-status', shop),
            {'purchase_id': str(paid_purchase.id), 'status': 'IN_TRANSIT'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['delivery_status'] == 'IN_TRANSIT'

    def test_collector_cannot_manage_waybills(self, collector_client, shop):
        response = collector_client.get(documents_url('waybill-list', shop))
        assert response.status_code == status.HTTP_403_FORBIDDEN
