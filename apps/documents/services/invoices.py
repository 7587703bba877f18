"""Progress invoices, one per confirmed payment."""

import logging
from typing import Optional
from uuid import UUID

from apps.businesses.models import Shop, ShopMember, ShopRole
from apps.documents.models import ProgressInvoice, Waybill

from .exceptions import DocumentNotFoundError
from .numbering import next_invoice_number

logger = logging.getLogger(__name__)


def issue_progress_invoice(*, payment, previous_balance, confirmed_by=None) -> ProgressInvoice:
    """
    Snapshot the purchase after ``payment`` was applied.

    Call after the purchase balances (and, on completion, its waybill) are
    saved; ``previous_balance`` is the outstanding balance before the payment.
    """
    purchase = payment.purchase
    customer = purchase.customer
    shop = purchase.shop

    waybill_number = (
        Waybill.objects.filter(purchase=purchase).values_list('waybill_number', flat=True).first() or ''
    )
    collector_name = payment.collector.user.get_display_name() if payment.collector_id else ''

    invoice = ProgressInvoice.objects.create(
        invoice_number=next_invoice_number(shop),
        shop=shop,
        purchase=purchase,
        payment=payment,
        payment_amount=payment.amount,
        previous_balance=previous_balance,
        new_balance=purchase.outstanding_balance,
        total_purchase_amount=purchase.total_amount,
        total_amount_paid=purchase.amount_paid,
        payment_method=payment.payment_method,
        collector_name=collector_name,
        confirmed_by_name=confirmed_by.get_display_name() if confirmed_by else '',
        customer_name=customer.full_name,
        customer_phone=customer.phone,
        customer_address=customer.address,
        purchase_number=purchase.purchase_number,
        purchase_type=purchase.purchase_type,
        shop_name=shop.name,
        business_name=shop.business.name,
        is_purchase_completed=purchase.is_completed,
        waybill_number=waybill_number,
    )
    logger.info("Invoice %s issued for payment %s", invoice.invoice_number, payment.id)
    return invoice


def list_invoices(*, shop: Shop, membership: Optional[ShopMember] = None, purchase_id: Optional[UUID] = None):
    """Invoices of the shop; collectors only see invoices of their own payments."""
    queryset = ProgressInvoice.objects.filter(shop=shop).order_by('-generated_at')
    if membership is not None and membership.role == ShopRole.DEBT_COLLECTOR:
        queryset = queryset.filter(payment__collector=membership)
    if purchase_id:
        queryset = queryset.filter(purchase_id=purchase_id)
    return queryset


def get_invoice(*, shop: Shop, invoice_id: UUID, membership: Optional[ShopMember] = None) -> ProgressInvoice:
    invoice = list_invoices(shop=shop, membership=membership).filter(id=invoice_id).first()
    if invoice is None:
        raise DocumentNotFoundError("Invoice not found")
    return invoice
