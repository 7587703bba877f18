from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'support'

router = SimpleRouter()
router.register(r'tickets', views.SupportTicketViewSet, basename='ticket')

urlpatterns = [
    path('', include(router.urls)),
]
