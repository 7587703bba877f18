from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'businesses'

platform_router = SimpleRouter()
platform_router.register(r'businesses', views.PlatformBusinessViewSet, basename='platform-business')

business_router = SimpleRouter()
business_router.register(r'shops', views.BusinessShopViewSet, basename='business-shop')

shop_router = SimpleRouter()
shop_router.register(r'staff', views.ShopStaffViewSet, basename='staff')
shop_router.register(r'collectors', views.DebtCollectorViewSet, basename='collector')

policy = views.ShopPolicyView.as_view({'get': 'retrieve', 'put': 'update'})

urlpatterns = [
    # Platform admin
    # GET/POST /api/platform/businesses/
    # POST     /api/platform/businesses/{slug}/status/
    path('platform/', include(platform_router.urls)),

    # Business admin
    path('businesses/<slug:business_slug>/', views.business_detail, name='business-detail'),
    path('businesses/<slug:business_slug>/stats/', views.business_stats, name='business-stats'),
    path('businesses/<slug:business_slug>/', include(business_router.urls)),

    # Shop admin
    path('shops/<slug:shop_slug>/policy/', policy, name='shop-policy'),
    path('shops/<slug:shop_slug>/', include(shop_router.urls)),
]
