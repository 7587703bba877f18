from rest_framework import serializers

from .models import Category, ShopProduct


class ProductInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, allow_blank=True)
    sku = serializers.CharField(max_length=64, required=False, allow_blank=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    image_url = serializers.URLField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    cost_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    cash_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    layaway_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    credit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    low_stock_threshold = serializers.IntegerField(min_value=0, required=False)
    stock_quantity = serializers.IntegerField(required=False)


class StockAdjustmentSerializer(serializers.Serializer):
    quantity_change = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'description', 'is_active', 'created_at']
        read_only_fields = ['id', 'is_active', 'created_at']


class ShopProductSerializer(serializers.ModelSerializer):
    """A product as seen from one shop: catalogue fields plus that shop's stock."""
    id = serializers.UUIDField(source='product.id', read_only=True)
    name = serializers.CharField(source='product.name', read_only=True)
    sku = serializers.CharField(source='product.sku', read_only=True)
    description = serializers.CharField(source='product.description', read_only=True)
    category = serializers.CharField(source='product.category.name', read_only=True, default=None)
    image_url = serializers.CharField(source='product.image_url', read_only=True)
    price = serializers.DecimalField(source='product.price', max_digits=12, decimal_places=2, read_only=True)
    cost_price = serializers.DecimalField(source='product.cost_price', max_digits=12, decimal_places=2, read_only=True)
    cash_price = serializers.DecimalField(source='product.cash_price', max_digits=12, decimal_places=2, read_only=True)
    layaway_price = serializers.DecimalField(source='product.layaway_price', max_digits=12, decimal_places=2, read_only=True)
    credit_price = serializers.DecimalField(source='product.credit_price', max_digits=12, decimal_places=2, read_only=True)
    low_stock_threshold = serializers.IntegerField(source='product.low_stock_threshold', read_only=True)
    is_active = serializers.SerializerMethodField()
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = ShopProduct
        fields = [
            'id',
            'name',
            'sku',
            'description',
            'category',
            'image_url',
            'price',
            'cost_price',
            'cash_price',
            'layaway_price',
            'credit_price',
            'low_stock_threshold',
            'stock_quantity',
            'is_low_stock',
            'is_active',
            'updated_at',
        ]
        read_only_fields = fields

    def get_is_active(self, obj):
        return obj.is_active and obj.product.is_active
