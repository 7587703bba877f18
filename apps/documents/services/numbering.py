"""Document number sequences (per shop, per day or per year)."""

from django.utils import timezone

from apps.documents.models import ProgressInvoice, Waybill


def next_invoice_number(shop, today=None) -> str:
    """``INV-YYYYMMDD-NNNN``, restarting every day for each shop."""
    today = today or timezone.localdate()
    prefix = f"INV-{today:%Y%m%d}-"
    count = ProgressInvoice.objects.filter(shop=shop, invoice_number__startswith=prefix).count()
    return f"{prefix}{count + 1:04d}"


def next_waybill_number(shop, today=None) -> str:
    """``WB-YYYY-NNNNN``, restarting every year for each shop."""
    today = today or timezone.localdate()
    prefix = f"WB-{today.year}-"
    count = Waybill.objects.filter(shop=shop, waybill_number__startswith=prefix).count()
    return f"{prefix}{count + 1:05d}"


def receipt_number(payment) -> str:
    """``RCP-YYYYMMDD-XXXXXX``: payment date plus the tail of the payment id."""
    moment = payment.paid_at or payment.created_at or timezone.now()
    paid_on = timezone.localtime(moment).date()
    return f"RCP-{paid_on:%Y%m%d}-{str(payment.id)[-6:].upper()}"
