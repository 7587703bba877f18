from django.contrib import admin

from .models import Category, Product, ShopProduct


class ShopProductInline(admin.TabularInline):
    model = ShopProduct
    extra = 0
    raw_id_fields = ['shop']


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'business', 'price', 'cash_price', 'credit_price', 'is_active']
    list_filter = ['is_active', 'business']
    search_fields = ['name', 'sku']
    inlines = [ShopProductInline]
