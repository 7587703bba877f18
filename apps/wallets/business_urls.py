from django.urls import path
from . import views

app_name = 'wallets_business'

urlpatterns = [
    path('wallet/stats/', views.business_wallet_stats, name='wallet-stats'),
    path('wallet/adjust/', views.wallet_adjust, name='wallet-adjust'),
]
