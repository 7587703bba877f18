# Generated manually for the initial schema

import uuid
from decimal import Decimal
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Business',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=100, unique=True)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('address', models.TextField(blank=True)),
                ('country', models.CharField(default='Ghana', max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'businesses',
                'ordering': ['name'],
                'verbose_name_plural': 'businesses',
            },
        ),
        migrations.CreateModel(
            name='Shop',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('slug', models.SlugField(max_length=100, unique=True)),
                ('address', models.TextField(blank=True)),
                ('phone', models.CharField(blank=True, max_length=30)),
                ('country', models.CharField(default='Ghana', max_length=100)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shops', to='businesses.business')),
            ],
            options={
                'db_table': 'shops',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['business', 'is_active'], name='shops_business_active_idx')],
            },
        ),
        migrations.CreateModel(
            name='BusinessMember',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('BUSINESS_ADMIN', 'Business Admin')], default='BUSINESS_ADMIN', max_length=32)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='businesses.business')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='business_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'business_members',
                'unique_together': {('business', 'user')},
            },
        ),
        migrations.CreateModel(
            name='ShopMember',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('SHOP_ADMIN', 'Shop Admin'), ('SALES_STAFF', 'Sales Staff'), ('DEBT_COLLECTOR', 'Debt Collector')], default='SALES_STAFF', max_length=32)),
                ('is_active', models.BooleanField(default=True)),
                ('can_load_wallet', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shop', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='businesses.shop')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shop_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'shop_members',
                'unique_together': {('shop', 'user')},
                'indexes': [models.Index(fields=['shop', 'role'], name='shop_members_shop_role_idx')],
            },
        ),
        migrations.CreateModel(
            name='ShopPolicy',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('interest_type', models.CharField(choices=[('FLAT', 'Flat'), ('MONTHLY', 'Monthly')], default='FLAT', max_length=16)),
                ('interest_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5, validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))])),
                ('grace_days', models.PositiveIntegerField(default=3)),
                ('max_tenor_days', models.PositiveIntegerField(default=60)),
                ('late_fee_fixed', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('late_fee_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('shop', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='policy', to='businesses.shop')),
            ],
            options={
                'db_table': 'shop_policies',
                'verbose_name_plural': 'shop policies',
            },
        ),
    ]
