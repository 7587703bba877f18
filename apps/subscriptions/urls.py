from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'subscriptions'

router = SimpleRouter()
router.register(r'plans', views.SubscriptionPlanViewSet, basename='plan')
router.register(r'subscriptions', views.SubscriptionViewSet, basename='subscription')

urlpatterns = [
    path('', include(router.urls)),
]
