from django.urls import path
from usage import views

app_name = 'usage'

urlpatterns = [
    path('usage/summary', views.usage_summary, name='usage_summary'),
    path('admin/usage/', views.admin_usage, name='admin_usage'),
]
