from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'customers'

router = SimpleRouter()
router.register(r'customers', views.CustomerViewSet, basename='customer')

urlpatterns = [
    path('', include(router.urls)),
]
