from django.urls import path
from . import views

app_name = 'purchases_business'

urlpatterns = [
    path('purchases/export/', views.purchases_export, name='purchases-export'),
    path('purchases/import/', views.purchases_import, name='purchases-import'),
    path('purchases/import-template/', views.purchases_import_template, name='purchases-template'),
]
