"""
Celery tasks for API usage:
- Persisting metered requests (fire-and-forget, never retried)
- Retention purge
"""

import logging
from datetime import timedelta
from decimal import Decimal

from celery import shared_task
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def record_api_usage(payload):
    """Write one UsageRecord. Failures are logged; the client response is long gone."""
    from usage.models import UsageRecord

    try:
        record = UsageRecord.objects.create(
            user_id=payload['user_id'],
            api_key_id=payload.get('api_key_id'),
            endpoint=payload['endpoint'][:200],
            method=payload['method'],
            status_code=payload['status_code'],
            response_time_ms=payload.get('response_time_ms', 0),
            request_size_bytes=payload.get('request_size_bytes', 0),
            response_size_bytes=payload.get('response_size_bytes', 0),
            cost=Decimal(payload.get('cost', '0')),
            request_id=payload.get('request_id', ''),
            ip_address=payload.get('ip_address') or None,
            user_agent=payload.get('user_agent', ''),
            timestamp=parse_datetime(payload['timestamp']) if payload.get('timestamp') else timezone.now(),
        )
    except Exception as e:
        logger.error(f'record_api_usage failed for request {payload.get("request_id")}: {e}')
        return None
    return str(record.id)


@shared_task
def purge_usage_records():
    """Delete usage records older than USAGE_RETENTION_DAYS."""
    from usage.models import UsageRecord

    cutoff = timezone.now() - timedelta(days=settings.USAGE_RETENTION_DAYS)
    deleted, _ = UsageRecord.objects.filter(timestamp__lt=cutoff).delete()
    logger.info(f'Purged {deleted} usage records older than {cutoff.date()}')
    return {'deleted': deleted}
