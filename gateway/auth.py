"""
X-API-Key authentication for the client SMS API and the custom-route gateway.

The metering middleware resolves the key first and stores the identity on
request.context; ApiKeyAuthentication reuses it instead of hitting the
database twice.
"""

import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework import authentication, exceptions

from config.exceptions import AuthError, ForbiddenError
from gateway.models import APIKey

logger = logging.getLogger(__name__)

API_KEY_HEADER = 'HTTP_X_API_KEY'


@dataclass(frozen=True)
class ApiKeyIdentity:
    user_id: object
    api_key_id: object
    permissions: tuple
    rate_limit_per_hour: int

    def has_permission(self, required):
        if not required:
            return True
        if '*' in self.permissions or required in self.permissions:
            return True
        family = required.split(':', 1)[0]
        return f'{family}:*' in self.permissions


def get_raw_key(request):
    meta = getattr(request, 'META', {})
    return meta.get(API_KEY_HEADER, '').strip()


def resolve_api_key(raw_key):
    """Return an ApiKeyIdentity for an active, unexpired key or None."""
    if not raw_key:
        return None
    key_obj = APIKey.objects.filter(
        key=raw_key, is_active=True, user__is_active=True,
    ).only('id', 'user_id', 'permissions', 'rate_limit_per_hour', 'expires_at').first()
    if key_obj is None or key_obj.is_expired:
        return None
    return ApiKeyIdentity(
        user_id=key_obj.user_id,
        api_key_id=key_obj.id,
        permissions=tuple(key_obj.permissions or ()),
        rate_limit_per_hour=key_obj.rate_limit_per_hour,
    )


def require_permission(identity, permission):
    if not identity.has_permission(permission):
        raise ForbiddenError(
            f'API key lacks the "{permission}" permission',
            code='INSUFFICIENT_PERMISSIONS',
            extra={'required': permission},
        )


class ApiKeyAuthentication(authentication.BaseAuthentication):
    """
    Authenticates via the X-API-Key header.

    request.user = owning User, request.auth = ApiKeyIdentity.
    """

    def authenticate(self, request):
        raw_key = get_raw_key(request)
        if not raw_key:
            raise AuthError('API key required. Send it in the X-API-Key header.')

        context = getattr(request, 'context', None)
        identity = context.identity if context is not None else None
        if identity is None:
            identity = resolve_api_key(raw_key)
        if identity is None:
            raise AuthError('Invalid or revoked API key')

        user = get_user_model().objects.filter(pk=identity.user_id, is_active=True).first()
        if user is None:
            raise AuthError('Invalid or revoked API key')

        # Rate limiting, per key per clock hour
        bucket = timezone.now().strftime('%Y%m%d%H')
        rate_key = f'apikey_rate:{identity.api_key_id}:{bucket}'
        current = cache.get(rate_key, 0)
        if current >= identity.rate_limit_per_hour:
            raise exceptions.Throttled(detail='API key rate limit exceeded. Try again later.')
        cache.set(rate_key, current + 1, timeout=3600)

        APIKey.objects.filter(pk=identity.api_key_id).update(last_used_at=timezone.now())
        return (user, identity)

    def authenticate_header(self, request):
        return 'X-API-Key'
