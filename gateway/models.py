import uuid
import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone


class APIKey(models.Model):
    """
    Client API key. Sent as X-API-Key on every /api/client/ and /api/gateway/
    request; resolves to the owning user and the scopes it may use.
    """
    KEY_PREFIX = 'msk_live_'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='api_keys')
    label = models.CharField(max_length=100, default='Default')
    key = models.CharField(max_length=64, unique=True, db_index=True)
    permissions = models.JSONField(default=list, blank=True,
        help_text='Scopes, e.g. ["sms:send", "wallet:read"]. "*" grants everything.')
    rate_limit_per_hour = models.PositiveIntegerField(default=1000)
    is_active = models.BooleanField(default=True)
    last_used_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'API Key'

    def __str__(self):
        status = 'active' if self.is_active else 'revoked'
        return f'{self.user} - {self.label} ({status})'

    @classmethod
    def generate_key(cls):
        return f'{cls.KEY_PREFIX}{secrets.token_hex(24)}'

    @property
    def masked_key(self):
        return f'{self.key[:len(self.KEY_PREFIX) + 4]}...{self.key[-4:]}'

    @property
    def is_expired(self):
        return self.expires_at is not None and timezone.now() >= self.expires_at


class ClientApiRoute(models.Model):
    """
    Client-chosen alias for one of the internal gateway routes.
    mapped_to is checked against gateway.routing.INTERNAL_ROUTES on creation.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='api_routes')
    route = models.CharField(max_length=200, help_text='Must start with /')
    mapped_to = models.CharField(max_length=100)
    rate_limit = models.PositiveIntegerField(default=100)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Client API Route'
        constraints = [
            models.UniqueConstraint(fields=['user', 'route'], name='unique_route_per_user'),
        ]

    def __str__(self):
        return f'{self.route} -> {self.mapped_to}'


class SmsMessage(models.Model):
    STATUS_PENDING = 'PENDING'
    STATUS_SENT = 'SENT'
    STATUS_FAILED = 'FAILED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_SENT, 'Sent'),
        (STATUS_FAILED, 'Failed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sms_messages')
    sender = models.ForeignKey('senders.SenderID', on_delete=models.PROTECT, related_name='messages')
    api_key = models.ForeignKey(APIKey, on_delete=models.SET_NULL, null=True, blank=True, related_name='messages')
    recipients = models.JSONField(default=list)
    message = models.TextField()
    segments = models.PositiveIntegerField(default=1)
    cost = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    provider_ref = models.CharField(max_length=100, blank=True, default='')
    error_message = models.TextField(blank=True, default='')
    wallet_reference = models.CharField(max_length=100, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'created_at'], name='gateway_sms_user_id_5c2e9a_idx'),
        ]

    def __str__(self):
        return f'{self.sender.sender_id} -> {len(self.recipients)} recipient(s) ({self.status})'
