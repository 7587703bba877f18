from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Shop
    path('shops/<slug:shop_slug>/dashboard/', views.shop_dashboard, name='shop-dashboard'),
    path('shops/<slug:shop_slug>/collector/', views.collector_dashboard, name='collector-dashboard'),
    path('shops/<slug:shop_slug>/aging/', views.shop_aging, name='shop-aging'),
    path('shops/<slug:shop_slug>/collectors/', views.collector_performance, name='collector-performance'),

    # Business
    path('businesses/<slug:business_slug>/dashboard/', views.business_dashboard, name='business-dashboard'),
    path('businesses/<slug:business_slug>/aging/', views.business_aging, name='business-aging'),

    # Platform
    path('platform/', views.platform_analytics, name='platform'),
]
