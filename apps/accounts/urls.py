from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),
    path('login/', views.login, name='login'),

    # User profile
    path('user/', views.current_user, name='current-user'),
    path('change-password/', views.change_password, name='change-password'),
]
