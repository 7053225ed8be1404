"""
API usage metering.

Every request under USAGE_METERING['METERED_PATH_PREFIXES'] that carries a
valid X-API-Key gets a RequestContext at entry. When the response body is
complete its size, latency and cost are handed to a Celery task; a failure to
enqueue is logged and never reaches the client.
"""

import logging
from functools import partial

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_ipv46_address
from django.utils import timezone

from gateway.auth import get_raw_key, resolve_api_key
from usage.context import RequestContext
from usage.pricing import calculate_request_cost, normalize_endpoint

logger = logging.getLogger(__name__)


class ResponseMeter:
    """
    Calls on_complete(size_bytes) exactly once: immediately for buffered
    responses, after the last chunk has been sent for streaming ones.
    """

    def __init__(self, response, on_complete):
        self.response = response
        self.on_complete = on_complete
        self._done = False

    def attach(self):
        if getattr(self.response, 'streaming', False):
            self.response.streaming_content = self._counting(self.response.streaming_content)
        else:
            self._finish(len(self.response.content))
        return self.response

    def _counting(self, chunks):
        size = 0
        try:
            for chunk in chunks:
                size += len(chunk)
                yield chunk
        finally:
            self._finish(size)

    def _finish(self, size):
        if self._done:
            return
        self._done = True
        self.on_complete(size)


def _valid_ip(value):
    try:
        validate_ipv46_address(value)
    except DjangoValidationError:
        return None
    return value


def _client_ip(request):
    xff = request.META.get('HTTP_X_FORWARDED_FOR', '')
    forwarded = _valid_ip(xff.split(',')[0].strip()) if xff else None
    return forwarded or _valid_ip(request.META.get('REMOTE_ADDR', ''))


class UsageMeteringMiddleware:

    def __init__(self, get_response):
        self.get_response = get_response
        self.prefixes = tuple(settings.USAGE_METERING['METERED_PATH_PREFIXES'])

    def __call__(self, request):
        if not request.path.startswith(self.prefixes):
            return self.get_response(request)

        identity = resolve_api_key(get_raw_key(request))
        context = RequestContext.start(request, identity)
        request.context = context

        response = self.get_response(request)
        if not context.is_metered:
            return response

        response['X-Usage-Tracked'] = 'true'
        response['X-API-Key-ID'] = str(identity.api_key_id)
        response['X-Request-ID'] = context.request_id
        return ResponseMeter(response, partial(self.record, request, response, context)).attach()

    def record(self, request, response, context, response_size):
        endpoint = getattr(request, 'usage_endpoint', None) or normalize_endpoint(request.path)
        cost = calculate_request_cost(endpoint, response.status_code, context.request_size_bytes, response_size)
        payload = {
            'user_id': str(context.identity.user_id),
            'api_key_id': str(context.identity.api_key_id),
            'endpoint': endpoint,
            'method': request.method,
            'status_code': response.status_code,
            'response_time_ms': context.elapsed_ms(),
            'request_size_bytes': context.request_size_bytes,
            'response_size_bytes': response_size,
            'cost': str(cost),
            'request_id': context.request_id,
            'ip_address': _client_ip(request),
            'user_agent': request.META.get('HTTP_USER_AGENT', '')[:500],
            'timestamp': timezone.now().isoformat(),
        }

        from usage.tasks import record_api_usage
        try:
            record_api_usage.delay(payload)
        except Exception as e:
            logger.error(f'Could not enqueue usage record {context.request_id} for {endpoint}: {e}')
