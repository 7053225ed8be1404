"""
Per-request cost for metered API calls.

    cost = rate(endpoint) x failure factor + (request + response bytes) x per-byte rate

Rates come from settings.USAGE_METERING and are billing configuration, not
code: change them there.
"""

import re
from decimal import Decimal

from django.conf import settings

_ID_SEGMENT = re.compile(
    r'^(\d+|[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}|[0-9a-fA-F]{24,})$'
)
_PREFIXES = ('api', 'client', 'gateway', 'v1')


def _config():
    return settings.USAGE_METERING


def normalize_endpoint(path):
    """
    '/api/client/v1/sms/status/6f1c...'  -> 'sms/status/:id'
    '/api/gateway/v1/sms/send/'          -> 'sms/send'
    """
    parts = [p for p in (path or '').split('?', 1)[0].split('/') if p]
    while parts and parts[0] in _PREFIXES:
        parts.pop(0)
    return '/'.join(':id' if _ID_SEGMENT.match(p) else p for p in parts)


def endpoint_rate(endpoint):
    rates = _config()['ENDPOINT_RATES']
    return Decimal(str(rates.get(endpoint, _config()['DEFAULT_RATE'])))


def calculate_request_cost(endpoint, status_code, request_bytes=0, response_bytes=0):
    """Monotone in bytes for a fixed endpoint and status; failed calls pay the reduced factor."""
    base = endpoint_rate(endpoint)
    if status_code >= 400:
        base *= Decimal(str(_config()['FAILED_REQUEST_FACTOR']))
    data_cost = Decimal(max(request_bytes, 0) + max(response_bytes, 0)) * Decimal(str(_config()['PER_BYTE_RATE']))
    return base + data_cost
