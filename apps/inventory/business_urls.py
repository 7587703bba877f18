from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'inventory_business'

router = SimpleRouter()
router.register(r'categories', views.CategoryViewSet, basename='category')

urlpatterns = [
    path('products/export/', views.products_export, name='products-export'),
    path('products/import/', views.products_import, name='products-import'),
    path('products/import-template/', views.products_import_template, name='products-template'),
    path('', include(router.urls)),
]
