from django.conf import settings
from django.db import models
import uuid


class ProgressInvoice(models.Model):
    """
    Statement issued for one confirmed payment.

    Customer, shop and purchase details are copied at issue time so the
    invoice reads the same after later edits.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    invoice_number = models.CharField(max_length=24)

    shop = models.ForeignKey('businesses.Shop', on_delete=models.CASCADE, related_name='invoices')
    purchase = models.ForeignKey('purchases.Purchase', on_delete=models.CASCADE, related_name='invoices')
    payment = models.OneToOneField('purchases.Payment', on_delete=models.CASCADE, related_name='invoice')

    payment_amount = models.DecimalField(max_digits=12, decimal_places=2)
    previous_balance = models.DecimalField(max_digits=12, decimal_places=2)
    new_balance = models.DecimalField(max_digits=12, decimal_places=2)
    total_purchase_amount = models.DecimalField(max_digits=12, decimal_places=2)
    total_amount_paid = models.DecimalField(max_digits=12, decimal_places=2)
    payment_method = models.CharField(max_length=16)

    collector_name = models.CharField(max_length=150, blank=True)
    confirmed_by_name = models.CharField(max_length=150, blank=True)

    customer_name = models.CharField(max_length=200)
    customer_phone = models.CharField(max_length=30)
    customer_address = models.TextField(blank=True)

    purchase_number = models.CharField(max_length=20)
    purchase_type = models.CharField(max_length=10)
    shop_name = models.CharField(max_length=200)
    business_name = models.CharField(max_length=200)

    is_purchase_completed = models.BooleanField(default=False)
    waybill_number = models.CharField(max_length=24, blank=True)

    generated_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'progress_invoices'
        ordering = ['-generated_at']
        unique_together = [['shop', 'invoice_number']]

    def __str__(self):
        return self.invoice_number


class Waybill(models.Model):
    """Delivery note for a fully paid purchase; at most one per purchase."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    waybill_number = models.CharField(max_length=24)

    shop = models.ForeignKey('businesses.Shop', on_delete=models.CASCADE, related_name='waybills')
    purchase = models.OneToOneField('purchases.Purchase', on_delete=models.CASCADE, related_name='waybill')

    recipient_name = models.CharField(max_length=200)
    recipient_phone = models.CharField(max_length=30)
    delivery_address = models.TextField(default='N/A')
    delivery_city = models.CharField(max_length=100, blank=True)
    delivery_region = models.CharField(max_length=100, blank=True)
    special_instructions = models.TextField(blank=True)

    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='waybills_generated'
    )
    generated_at = models.DateTimeField(auto_now_add=True)
    scheduled_delivery = models.DateTimeField(null=True, blank=True)

    delivered_at = models.DateTimeField(null=True, blank=True)
    delivered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='waybills_delivered'
    )
    received_by_name = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        db_table = 'waybills'
        ordering = ['-generated_at']
        unique_together = [['shop', 'waybill_number']]

    def __str__(self):
        return self.waybill_number
