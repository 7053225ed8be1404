import uuid

from django.conf import settings
from django.db import models


class UsageRecord(models.Model):
    """
    One metered API call. Append-only: rows are written once by the
    record_api_usage task and only ever removed by the retention purge.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='usage_records')
    api_key = models.ForeignKey('gateway.APIKey', on_delete=models.SET_NULL, null=True, blank=True,
                                related_name='usage_records')
    endpoint = models.CharField(max_length=200, db_index=True)
    method = models.CharField(max_length=10)
    status_code = models.PositiveSmallIntegerField()
    response_time_ms = models.PositiveIntegerField(default=0)
    request_size_bytes = models.PositiveIntegerField(default=0)
    response_size_bytes = models.PositiveIntegerField(default=0)
    cost = models.DecimalField(max_digits=14, decimal_places=6, default=0)
    request_id = models.CharField(max_length=64, blank=True, default='')
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.CharField(max_length=500, blank=True, default='')
    timestamp = models.DateTimeField(db_index=True)

    class Meta:
        ordering = ['-timestamp']
        verbose_name = 'Usage Record'
        indexes = [
            models.Index(fields=['user', 'timestamp'], name='usage_usage_user_id_7e0b12_idx'),
            models.Index(fields=['api_key', 'timestamp'], name='usage_usage_api_key_4d9c77_idx'),
        ]

    def __str__(self):
        return f'{self.method} {self.endpoint} {self.status_code} ({self.user_id})'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('Usage records are append-only')
        super().save(*args, **kwargs)

    @property
    def is_error(self):
        return self.status_code >= 400
