from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'inventory'

router = SimpleRouter()
router.register(r'products', views.ShopProductViewSet, basename='product')

urlpatterns = [
    path('', include(router.urls)),
]
