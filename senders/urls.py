from django.urls import path
from senders import views

app_name = 'senders'

urlpatterns = [
    path('sender-ids/', views.sender_ids, name='sender_ids'),
    path('sender-ids/<uuid:sender_pk>/status', views.sender_id_status, name='sender_id_status'),
    path('admin/sender-ids/', views.admin_sender_ids, name='admin_sender_ids'),
    path('admin/sender-ids/pending/', views.admin_pending_sender_ids, name='admin_pending_sender_ids'),
]
