from django.urls import path
from gateway import views

app_name = 'gateway'

urlpatterns = [
    # Client API (X-API-Key)
    path('client/v1/sms/send', views.client_sms_send, name='sms_send'),
    path('client/v1/sms/bulk', views.client_sms_bulk, name='sms_bulk'),
    path('client/v1/sms/status/<uuid:message_id>', views.client_sms_status, name='sms_status'),
    path('client/v1/sms/history', views.client_sms_history, name='sms_history'),
    path('client/v1/sms/calculate-cost', views.client_sms_calculate_cost, name='sms_calculate_cost'),
    path('client/v1/wallet/balance', views.client_wallet_balance, name='wallet_balance'),
    path('client/v1/wallet/transactions', views.client_wallet_transactions, name='wallet_transactions'),
    path('client/v1/sender-ids', views.client_sender_ids, name='client_sender_ids'),
    path('client/v1/otp/generate', views.client_otp_generate, name='otp_generate'),
    path('client/v1/otp/verify', views.client_otp_verify, name='otp_verify'),

    # Gateway
    path('gateway/<path:route>', views.gateway_dispatch, name='gateway_dispatch'),
    path('gateway-routes/', views.gateway_routes, name='gateway_routes'),

    # Client self-service (JWT)
    path('client-routes/', views.client_routes, name='client_routes'),
    path('client-routes/<uuid:route_pk>/', views.client_route_detail, name='client_route_detail'),
    path('api-keys/', views.api_keys, name='api_keys'),
    path('api-keys/<uuid:key_pk>/', views.api_key_detail, name='api_key_detail'),
]
