from django.urls import path
from . import views

app_name = 'audit'

urlpatterns = [
    path('', views.PlatformAuditLogView.as_view(), name='platform-log'),
    path('businesses/<slug:business_slug>/', views.BusinessAuditLogView.as_view(), name='business-log'),
]
