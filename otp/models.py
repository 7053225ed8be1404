import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class OTPRequest(models.Model):
    """One generated code. Only its SHA-256 hash is stored."""
    STATUS_CHOICES = [
        ('sent', 'Sent'),
        ('verified', 'Verified'),
        ('expired', 'Expired'),
        ('failed', 'Failed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='otp_requests')
    sender = models.ForeignKey('senders.SenderID', on_delete=models.PROTECT, related_name='otp_requests')
    sms = models.OneToOneField('gateway.SmsMessage', on_delete=models.SET_NULL, null=True, blank=True,
                               related_name='otp_request')
    phone = models.CharField(max_length=20, db_index=True)
    code_hash = models.CharField(max_length=64)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='sent', db_index=True)
    attempts = models.PositiveIntegerField(default=0)
    max_attempts = models.PositiveIntegerField(default=3)
    reference_id = models.CharField(max_length=100, blank=True, default='',
                                    help_text='Client-side reference, echoed back on verify')
    expires_at = models.DateTimeField()
    verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'OTP Request'
        indexes = [
            models.Index(fields=['user', 'phone', 'status'], name='otp_otpreq_user_id_9a41d3_idx'),
        ]

    def __str__(self):
        return f'OTP {self.phone} ({self.status})'

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at
