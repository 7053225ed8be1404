from django.apps import AppConfig


class SendersConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'senders'
    verbose_name = 'Sender IDs'
