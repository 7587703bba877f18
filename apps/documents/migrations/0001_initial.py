# Generated manually for the initial schema

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('businesses', '0001_initial'),
        ('purchases', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ProgressInvoice',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('invoice_number', models.CharField(max_length=24)),
                ('payment_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('previous_balance', models.DecimalField(decimal_places=2, max_digits=12)),
                ('new_balance', models.DecimalField(decimal_places=2, max_digits=12)),
                ('total_purchase_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('total_amount_paid', models.DecimalField(decimal_places=2, max_digits=12)),
                ('payment_method', models.CharField(max_length=16)),
                ('collector_name', models.CharField(blank=True, max_length=150)),
                ('confirmed_by_name', models.CharField(blank=True, max_length=150)),
                ('customer_name', models.CharField(max_length=200)),
                ('customer_phone', models.CharField(max_length=30)),
                ('customer_address', models.TextField(blank=True)),
                ('purchase_number', models.CharField(max_length=20)),
                ('purchase_type', models.CharField(max_length=10)),
                ('shop_name', models.CharField(max_length=200)),
                ('business_name', models.CharField(max_length=200)),
                ('is_purchase_completed', models.BooleanField(default=False)),
                ('waybill_number', models.CharField(blank=True, max_length=24)),
                ('generated_at', models.DateTimeField(auto_now_add=True)),
                ('payment', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='invoice', to='purchases.payment')),
                ('purchase', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invoices', to='purchases.purchase')),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invoices', to='businesses.shop')),
            ],
            options={
                'db_table': 'progress_invoices',
                'ordering': ['-generated_at'],
                'unique_together': {('shop', 'invoice_number')},
            },
        ),
        migrations.CreateModel(
            name='Waybill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('waybill_number', models.CharField(max_length=24)),
                ('recipient_name', models.CharField(max_length=200)),
                ('recipient_phone', models.CharField(max_length=30)),
                ('delivery_address', models.TextField(default='N/A')),
                ('delivery_city', models.CharField(blank=True, max_length=100)),
                ('delivery_region', models.CharField(blank=True, max_length=100)),
                ('special_instructions', models.TextField(blank=True)),
                ('generated_at', models.DateTimeField(auto_now_add=True)),
                ('scheduled_delivery', models.DateTimeField(blank=True, null=True)),
                ('delivered_at', models.DateTimeField(blank=True, null=True)),
                ('received_by_name', models.CharField(blank=True, max_length=200)),
                ('notes', models.TextField(blank=True)),
                ('delivered_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='waybills_delivered', to=settings.AUTH_USER_MODEL)),
                ('generated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='waybills_generated', to=settings.AUTH_USER_MODEL)),
                ('purchase', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='waybill', to='purchases.purchase')),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='waybills', to='businesses.shop')),
            ],
            options={
                'db_table': 'waybills',
                'ordering': ['-generated_at'],
                'unique_together': {('shop', 'waybill_number')},
            },
        ),
    ]
