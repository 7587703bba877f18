from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'purchases'

router = SimpleRouter()
router.register(r'purchases', views.PurchaseViewSet, basename='purchase')
router.register(r'payments', views.PaymentViewSet, basename='payment')

urlpatterns = [
    path('', include(router.urls)),
]
