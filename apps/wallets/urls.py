from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'wallets'

router = SimpleRouter()
router.register(r'wallet-transactions', views.WalletTransactionViewSet, basename='wallet-transaction')

urlpatterns = [
    path('', include(router.urls)),
]
