"""
Aggregations over UsageRecord for the client usage dashboard and admin view.
"""

from datetime import timedelta
from decimal import Decimal

from django.db.models import Avg, Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from usage.models import UsageRecord

MAX_DAYS = 365


def clamp_days(value, default=30):
    try:
        days = int(value)
    except (TypeError, ValueError):
        return default
    return min(max(days, 1), MAX_DAYS)


def _totals(qs):
    agg = qs.aggregate(
        total_requests=Count('id'),
        failed_requests=Count('id', filter=Q(status_code__gte=400)),
        total_cost=Sum('cost'),
        avg_response_time_ms=Avg('response_time_ms'),
        request_bytes=Sum('request_size_bytes'),
        response_bytes=Sum('response_size_bytes'),
    )
    total = agg['total_requests']
    return {
        'total_requests': total,
        'failed_requests': agg['failed_requests'],
        'error_rate': round(agg['failed_requests'] / total * 100, 2) if total else 0.0,
        'total_cost': str(agg['total_cost'] or Decimal('0')),
        'avg_response_time_ms': round(agg['avg_response_time_ms'] or 0, 1),
        'data_transferred_bytes': (agg['request_bytes'] or 0) + (agg['response_bytes'] or 0),
    }


def user_summary(user, days=30):
    since = timezone.now() - timedelta(days=days)
    qs = UsageRecord.objects.filter(user=user, timestamp__gte=since)

    endpoints = qs.values('endpoint').annotate(
        requests=Count('id'),
        cost=Sum('cost'),
        avg_response_time_ms=Avg('response_time_ms'),
        errors=Count('id', filter=Q(status_code__gte=400)),
    ).order_by('-requests')

    daily = qs.annotate(day=TruncDate('timestamp')).values('day').annotate(
        requests=Count('id'),
        cost=Sum('cost'),
    ).order_by('day')

    return {
        'period_days': days,
        **_totals(qs),
        'endpoints': [{
            'endpoint': row['endpoint'],
            'requests': row['requests'],
            'errors': row['errors'],
            'cost': str(row['cost'] or Decimal('0')),
            'avg_response_time_ms': round(row['avg_response_time_ms'] or 0, 1),
        } for row in endpoints],
        'daily': [{
            'date': row['day'].isoformat(),
            'requests': row['requests'],
            'cost': str(row['cost'] or Decimal('0')),
        } for row in daily],
    }


def system_summary(days=30, top=10):
    since = timezone.now() - timedelta(days=days)
    qs = UsageRecord.objects.filter(timestamp__gte=since)

    consumers = qs.values('user_id', 'user__email').annotate(
        requests=Count('id'),
        cost=Sum('cost'),
    ).order_by('-requests')[:top]

    return {
        'period_days': days,
        **_totals(qs),
        'active_users': qs.values('user_id').distinct().count(),
        'top_consumers': [{
            'user_id': str(row['user_id']),
            'email': row['user__email'],
            'requests': row['requests'],
            'cost': str(row['cost'] or Decimal('0')),
        } for row in consumers],
    }
