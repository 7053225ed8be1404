from django.urls import path
from wallet import views

app_name = 'wallet'

urlpatterns = [
    path('admin/wallets/<uuid:user_id>/credit', views.admin_credit_wallet, name='admin_credit_wallet'),
]
