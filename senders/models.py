import uuid

from django.conf import settings
from django.db import models


class SenderID(models.Model):
    """
    Alphanumeric label recipients see as the SMS sender.

    Starts PENDING and is moved exactly once, by an admin, to APPROVED or
    REJECTED (senders.services.transition_sender_id). Once terminal exactly
    one of approved_at / rejected_at is set.
    """
    STATUS_PENDING = 'PENDING'
    STATUS_APPROVED = 'APPROVED'
    STATUS_REJECTED = 'REJECTED'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending Approval'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    TERMINAL_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sender_ids')
    sender_id = models.CharField(max_length=11, help_text='3-11 alphanumeric characters')
    purpose = models.TextField(blank=True, default='')
    sample_message = models.TextField(blank=True, default='')
    company_name = models.CharField(max_length=200, blank=True, null=True)

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    submitted_at = models.DateTimeField(auto_now_add=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='reviewed_sender_ids',
    )
    admin_notes = models.TextField(blank=True, default='')
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-submitted_at']
        verbose_name = 'Sender ID'
        constraints = [
            models.UniqueConstraint(fields=['user', 'sender_id'], name='unique_sender_id_per_user'),
        ]

    def __str__(self):
        return f'{self.sender_id} ({self.status})'

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING

    @property
    def is_approved(self):
        return self.status == self.STATUS_APPROVED
