from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'documents'

router = SimpleRouter()
router.register(r'invoices', views.InvoiceViewSet, basename='invoice')
router.register(r'waybills', views.WaybillViewSet, basename='waybill')

urlpatterns = [
    path('', include(router.urls)),
]
