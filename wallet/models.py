import uuid

from django.conf import settings
from django.db import models


class Wallet(models.Model):
    """
    Prepaid balance of a client. Only ever decremented through
    wallet.services.reserve_funds, which is a single conditional UPDATE.
    """
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='wallet')
    balance = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    currency = models.CharField(max_length=3, default='GHS')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=models.Q(balance__gte=0), name='wallet_balance_non_negative'),
        ]

    def __str__(self):
        return f'{self.user} - {self.currency} {self.balance}'


class WalletTransaction(models.Model):
    TX_TYPES = [
        ('debit', 'SMS Debit'),
        ('refund', 'Refund'),
        ('topup', 'Top-up'),
        ('admin_credit', 'Admin Credit'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('failed', 'Failed'),
        ('reversed', 'Reversed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    wallet = models.ForeignKey(Wallet, on_delete=models.CASCADE, related_name='transactions')
    amount = models.DecimalField(max_digits=14, decimal_places=4)
    tx_type = models.CharField(max_length=20, choices=TX_TYPES, db_index=True)
    reference = models.CharField(max_length=100, unique=True, db_index=True)
    status = models.CharField(max_length=15, choices=STATUS_CHOICES, default='completed')
    balance_after = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    description = models.CharField(max_length=255, blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['wallet', 'tx_type'], name='wallet_wall_wallet__3f1a2c_idx'),
            models.Index(fields=['created_at'], name='wallet_wall_created_8b7d41_idx'),
        ]

    def __str__(self):
        return f'{self.tx_type} - {self.amount} ({self.status})'
