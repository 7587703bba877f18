from django.contrib import admin

from .models import Business, BusinessMember, Shop, ShopMember, ShopPolicy


class BusinessMemberInline(admin.TabularInline):
    model = BusinessMember
    extra = 0
    raw_id_fields = ['user']


class ShopMemberInline(admin.TabularInline):
    model = ShopMember
    extra = 0
    raw_id_fields = ['user']


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'email', 'phone', 'is_active', 'created_at']
    list_filter = ['is_active', 'country']
    search_fields = ['name', 'slug', 'email']
    inlines = [BusinessMemberInline]


@admin.register(Shop)
class ShopAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'business', 'is_active', 'created_at']
    list_filter = ['is_active', 'business']
    search_fields = ['name', 'slug']
    inlines = [ShopMemberInline]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('business')


@admin.register(ShopMember)
class ShopMemberAdmin(admin.ModelAdmin):
    list_display = ['user', 'shop', 'role', 'is_active', 'can_load_wallet']
    list_filter = ['role', 'is_active', 'can_load_wallet']
    search_fields = ['user__email', 'shop__slug']
    raw_id_fields = ['user', 'shop']


@admin.register(ShopPolicy)
class ShopPolicyAdmin(admin.ModelAdmin):
    list_display = ['shop', 'interest_type', 'interest_rate', 'grace_days', 'max_tenor_days']
    list_filter = ['interest_type']
