import pytest
from decimal import Decimal
from io import BytesIO
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from openpyxl import load_workbook
from rest_framework import status

from apps.audit.models import AuditLog
from apps.inventory.models import Category, Product, ShopProduct
from apps.inventory.services import adjust_stock, create_product, ProductValidationError
from apps.inventory.services.product_management import parse_price
from apps.inventory.services.spreadsheets import PRODUCT_IMPORT_COLUMNS, build_workbook, workbook_to_bytes


def product_url(name, shop, **kwargs):
    return reverse(f'inventory:{name}', kwargs={'shop_slug': shop.slug, **kwargs})


def business_url(name, business):
    return reverse(f'inventory_business:{name}', kwargs={'business_slug': business.slug})


@pytest.mark.django_db
class TestProductServices:

    def test_create_stocks_product_in_shop(self, shop, shop_admin):
        stock_item = create_product(
            actor=shop_admin,
            shop=shop,
            name=' Tecno Spark 10 ',
            sku='TEC-10',
            category='Phones',
            stock_quantity=4,
            price='1500',
            credit_price='1800.5',
        )

        assert stock_item.stock_quantity == 4
        assert stock_item.product.name == 'Tecno Spark 10'
        assert stock_item.product.business == shop.business
        assert stock_item.product.category.name == 'Phones'
        assert stock_item.product.credit_price == Decimal('1800.50')
        assert stock_item.product.cash_price == Decimal('0.00')

        entry = AuditLog.objects.get(action='PRODUCT_CREATED')
        assert entry.shop == shop
        assert entry.metadata['sku'] == 'TEC-10'

    def test_negative_price(self, shop, shop_admin):
        with pytest.raises(ProductValidationError, match='Price must be 0 or greater'):
            create_product(actor=shop_admin, shop=shop, name='Fan', price='-1')

    @pytest.mark.parametrize('value', ['NaN', 'Infinity', '-inf', 'abc', '1E+40'])
    def test_non_numeric_price(self, value):
        with pytest.raises(ProductValidationError, match='must be a number'):
            parse_price(value)

    def test_adjust_stock(self, shop, shop_admin, stock_item):
        adjust_stock(
            actor=shop_admin, shop=shop, product_id=stock_item.product_id, quantity_change=-3, reason='Damaged',
        )

        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 7
        metadata = AuditLog.objects.get(action='STOCK_ADJUSTED').metadata
        assert metadata['previousQuantity'] == 10
        assert metadata['newQuantity'] == 7
        assert metadata['reason'] == 'Damaged'


@pytest.mark.django_db
class TestShopProductList:
    """Tests for GET /api/shops/{slug}/products/"""

    def test_list(self, staff_client, shop, stock_item):
        response = staff_client.get(product_url('product-list', shop))

        assert response.status_code == status.HTTP_200_OK
        row = response.data[0]
        assert row['id'] == str(stock_item.product_id)
        assert row['sku'] == 'TV-43'
        assert row['credit_price'] == '1200.00'
        assert row['stock_quantity'] == 10
        assert row['is_low_stock'] is False
        assert row['is_active'] is True

    def test_active_filter(self, staff_client, shop, stock_item):
        stock_item.product.is_active = False
        stock_item.product.save()

        response = staff_client.get(product_url('product-list', shop), {'active': 'true'})
        assert response.data == []

        response = staff_client.get(product_url('product-list', shop))
        assert response.data[0]['is_active'] is False

    def test_collector_can_list(self, collector_client, shop, stock_item):
        response = collector_client.get(product_url('product-list', shop))
        assert response.status_code == status.HTTP_200_OK

    def test_outsider_forbidden(self, outsider_client, shop, stock_item):
        response = outsider_client.get(product_url('product-list', shop))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_retrieve_unknown(self, staff_client, shop):
        url = product_url('product-detail', shop, pk='00000000-0000-0000-0000-000000000000')
        response = staff_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['error'] == 'Product not found'


@pytest.mark.django_db
class TestShopProductWrites:

    def test_create(self, manager_client, shop):
        response = manager_client.post(product_url('product-list', shop), {
            'name': 'LG Fridge',
            'sku': 'LG-FR1',
            'price': '3000.00',
            'credit_price': '3600.00',
            'stock_quantity': 3,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['name'] == 'LG Fridge'
        assert response.data['stock_quantity'] == 3
        assert response.data['low_stock_threshold'] == 5
        assert response.data['is_low_stock'] is True

    def test_create_duplicate_sku(self, manager_client, shop, stock_item):
        response = manager_client.post(
            product_url('product-list', shop), {'name': 'Another TV', 'sku': 'TV-43'}, format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'A product with this SKU already exists'

    def test_create_blank_name(self, manager_client, shop):
        response = manager_client.post(product_url('product-list', shop), {'name': '  '}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Product name is required'

    def test_staff_cannot_create(self, staff_client, shop):
        response = staff_client.post(product_url('product-list', shop), {'name': 'Kettle'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_owner_can_create(self, owner_client, shop):
        response = owner_client.post(product_url('product-list', shop), {'name': 'Kettle'}, format='json')
        assert response.status_code == status.HTTP_201_CREATED

    def test_partial_update(self, manager_client, shop, stock_item):
        response = manager_client.patch(
            product_url('product-detail', shop, pk=stock_item.product_id),
            {'cash_price': '950.00', 'stock_quantity': 1},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['cash_price'] == '950.00'
        assert response.data['stock_quantity'] == 1
        assert response.data['is_low_stock'] is True
        assert response.data['name'] == 'Samsung TV 43"'

    def test_delete_unsold_product(self, manager_client, shop, stock_item):
        response = manager_client.delete(product_url('product-detail', shop, pk=stock_item.product_id))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Product.objects.filter(id=stock_item.product_id).exists()
        assert AuditLog.objects.get(action='PRODUCT_DELETED').metadata['softDelete'] is False

    def test_delete_sold_product_deactivates(self, manager_client, shop, stock_item, credit_purchase):
        response = manager_client.delete(product_url('product-detail', shop, pk=stock_item.product_id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'deactivated': True}
        stock_item.refresh_from_db()
        assert stock_item.is_active is False
        assert stock_item.product.is_active is False

    def test_toggle(self, manager_client, shop, stock_item):
        url = product_url('product-toggle', shop, pk=stock_item.product_id)

        response = manager_client.post(url)
        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_active'] is False
        assert AuditLog.objects.filter(action='PRODUCT_DEACTIVATED').exists()

        response = manager_client.post(url)
        assert response.data['is_active'] is True


@pytest.mark.django_db
class TestAdjustStock:
    """Tests for POST /api/shops/{slug}/products/{id}/adjust-stock/"""

    def test_restock(self, manager_client, shop, stock_item):
        response = manager_client.post(
            product_url('product-adjust-stock', shop, pk=stock_item.product_id),
            {'quantity_change': 5, 'reason': 'Delivery from supplier'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['stock_quantity'] == 15

    @pytest.mark.parametrize('change, message', [
        (0, 'Quantity change cannot be 0'),
        (-11, 'Stock quantity must be 0 or greater'),
    ])
    def test_rejected_changes(self, manager_client, shop, stock_item, change, message):
        response = manager_client.post(
            product_url('product-adjust-stock', shop, pk=stock_item.product_id),
            {'quantity_change': change},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == message
        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 10

    def test_staff_forbidden(self, staff_client, shop, stock_item):
        response = staff_client.post(
            product_url('product-adjust-stock', shop, pk=stock_item.product_id),
            {'quantity_change': 1},
            format='json',
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestCategories:
    """Tests for /api/businesses/{slug}/categories/"""

    def test_create_and_list(self, owner_client, business):
        url = business_url('category-list', business)

        response = owner_client.post(url, {'name': 'Phones', 'description': 'Handsets'}, format='json')
        assert response.status_code == status.HTTP_201_CREATED

        response = owner_client.get(url)
        assert [c['name'] for c in response.data] == ['Phones']

    def test_duplicate_name(self, owner_client, business):
        Category.objects.create(business=business, name='Phones')

        response = owner_client.post(business_url('category-list', business), {'name': 'Phones'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'A category with this name already exists'

    def test_shop_admin_forbidden(self, manager_client, business):
        response = manager_client.get(business_url('category-list', business))
        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Workbooks
# =============================================================================

def upload(rows):
    workbook = build_workbook('Products', PRODUCT_IMPORT_COLUMNS, rows)
    return SimpleUploadedFile('products.xlsx', workbook_to_bytes(workbook))


@pytest.mark.django_db
class TestProductWorkbooks:

    def test_export(self, owner_client, business, stock_item):
        response = owner_client.get(business_url('products-export', business))

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Disposition'].startswith('attachment; filename="products-accra-electronics-')
        rows = list(load_workbook(BytesIO(response.content)).active.iter_rows(values_only=True))
        assert rows[0][0] == 'Name'
        assert rows[1][0] == 'Samsung TV 43"'
        assert rows[1][-2:] == ('osu-branch', 10)

    def test_export_shop_filter(self, owner_client, business, stock_item):
        response = owner_client.get(business_url('products-export', business), {'shop': 'elsewhere'})

        rows = list(load_workbook(BytesIO(response.content)).active.iter_rows(values_only=True))
        assert len(rows) == 1

    def test_import(self, owner_client, business, shop, stock_item):
        rows = [
            ['Samsung TV 43"', 'TV-43', '', '', 700, 950, 1000, 1250, 1000, '', shop.slug, 6],
            ['Nasco Blender', 'NAS-B1', 'Kitchen', '', 100, 150, 160, 180, 150, 3, shop.slug, 12],
            ['', 'NO-NAME', '', '', '', '', '', '', '', '', '', ''],
            ['Iron', 'IRN-1', '', '', '', '', '', '', '', '', 'unknown-shop', 1],
        ]
        response = owner_client.post(
            business_url('products-import', business), {'file': upload(rows)}, format='multipart',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['created'] == 1
        assert response.data['updated'] == 1
        assert response.data['totalErrors'] == 2
        assert response.data['errors'] == [
            'Row 4: Product name is required',
            'Row 5: Shop not found: unknown-shop',
        ]

        stock_item.refresh_from_db()
        assert stock_item.stock_quantity == 6
        assert stock_item.product.credit_price == Decimal('1250.00')

        blender = ShopProduct.objects.get(shop=shop, product__sku='NAS-B1')
        assert blender.stock_quantity == 12
        assert blender.product.category.name == 'Kitchen'
        assert blender.product.low_stock_threshold == 3
        assert not Product.objects.filter(sku='IRN-1').exists()

    def test_import_reports_non_numeric_price(self, owner_client, business, shop):
        rows = [
            ['Kettle', 'KET-1', '', '', '', 80, '', '', 80, '', shop.slug, 2],
            ['Toaster', 'TOA-1', '', '', '', 'NaN', '', '', '', '', shop.slug, 1],
        ]
        response = owner_client.post(
            business_url('products-import', business), {'file': upload(rows)}, format='multipart',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['created'] == 1
        assert response.data['errors'] == ['Row 3: Price must be a number']
        assert not Product.objects.filter(sku='TOA-1').exists()

    def test_import_without_file(self, owner_client, business):
        response = owner_client.post(business_url('products-import', business), {}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'No file uploaded'

    def test_import_rejects_non_workbook(self, owner_client, business):
        bogus = SimpleUploadedFile('products.xlsx', b'not a workbook')
        response = owner_client.post(business_url('products-import', business), {'file': bogus}, format='multipart')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'Invalid spreadsheet file'

    def test_template(self, owner_client, business):
        response = owner_client.get(business_url('products-template', business))

        assert response.status_code == status.HTTP_200_OK
        sheet = load_workbook(BytesIO(response.content)).active
        assert [cell.value for cell in sheet[1]] == PRODUCT_IMPORT_COLUMNS

    def test_shop_admin_cannot_import(self, manager_client, business):
        response = manager_client.post(business_url('products-import', business), {}, format='multipart')
        assert response.status_code == status.HTTP_403_FORBIDDEN
