"""
URL configuration for the Hire Purchase API.

Tenant scoping is carried in the path:
    /api/businesses/<business_slug>/...   business admin surface
    /api/shops/<shop_slug>/...            shop staff / collector surface
    /api/platform/...                     platform admin surface
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenRefreshView

from config.views import health_check

urlpatterns = [
    # Health check (for Render)
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/', include('apps.accounts.urls')),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Tenancy (businesses, shops, staff, policy)
    path('api/', include('apps.businesses.urls')),

    # Shop-scoped endpoints
    path('api/shops/<slug:shop_slug>/', include('apps.inventory.urls')),
    path('api/shops/<slug:shop_slug>/', include('apps.customers.urls')),
    path('api/shops/<slug:shop_slug>/', include('apps.purchases.urls')),
    path('api/shops/<slug:shop_slug>/', include('apps.documents.urls')),
    path('api/shops/<slug:shop_slug>/', include('apps.wallets.urls')),

    # Business-scoped spreadsheet and wallet admin endpoints
    path('api/businesses/<slug:business_slug>/', include('apps.inventory.business_urls')),
    path('api/businesses/<slug:business_slug>/', include('apps.purchases.business_urls')),
    path('api/businesses/<slug:business_slug>/', include('apps.wallets.business_urls')),

    # Platform
    path('api/platform/', include('apps.subscriptions.urls')),
    path('api/support/', include('apps.support.urls')),
    path('api/audit/', include('apps.audit.urls')),
    path('api/analytics/', include('apps.analytics.urls')),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
