import logging

from django.db import IntegrityError, transaction

from config.exceptions import ConflictError, NotFoundError, ValidationError
from gateway.models import APIKey, ClientApiRoute
from gateway.routing import INTERNAL_ROUTES

logger = logging.getLogger(__name__)

DEFAULT_KEY_PERMISSIONS = [
    'sms:send', 'sms:bulk', 'sms:status', 'sms:logs',
    'wallet:read', 'sender:read', 'otp:generate', 'otp:verify',
]


def create_client_route(user, route, mapped_to, rate_limit=100):
    """Register a client alias; mapped_to must be one of INTERNAL_ROUTES."""
    route = (route or '').strip()
    if not route.startswith('/') or len(route) < 2:
        raise ValidationError('Route must start with "/"', code='INVALID_ROUTE')
    route = route.rstrip('/')

    if mapped_to not in INTERNAL_ROUTES:
        raise ValidationError(
            f'"{mapped_to}" is not a route you can map to',
            code='INVALID_MAPPED_ROUTE',
            extra={'allowed': sorted(INTERNAL_ROUTES)},
        )

    if ClientApiRoute.objects.filter(user_id=user.pk, route=route).exists():
        raise ConflictError('You already have a route with this path', code='ROUTE_EXISTS')

    try:
        with transaction.atomic():
            client_route = ClientApiRoute.objects.create(
                user=user, route=route, mapped_to=mapped_to, rate_limit=rate_limit,
            )
    except IntegrityError:
        raise ConflictError('You already have a route with this path', code='ROUTE_EXISTS')

    logger.info(f'Client route {route} -> {mapped_to} created for {user.pk}')
    return client_route


def delete_client_route(user, route_pk):
    deleted, _ = ClientApiRoute.objects.filter(pk=route_pk, user_id=user.pk).delete()
    if not deleted:
        raise NotFoundError('Route not found', code='ROUTE_NOT_FOUND')
    logger.info(f'Client route {route_pk} deleted by {user.pk}')


def create_api_key(user, label='Default', permissions=None, rate_limit_per_hour=1000, expires_at=None):
    key = APIKey.objects.create(
        user=user,
        label=label or 'Default',
        key=APIKey.generate_key(),
        permissions=list(permissions) if permissions else list(DEFAULT_KEY_PERMISSIONS),
        rate_limit_per_hour=rate_limit_per_hour,
        expires_at=expires_at,
    )
    logger.info(f'API key {key.pk} created for {user.pk}')
    return key


def revoke_api_key(user, key_pk):
    updated = APIKey.objects.filter(pk=key_pk, user_id=user.pk, is_active=True).update(is_active=False)
    if not updated:
        raise NotFoundError('API key not found', code='API_KEY_NOT_FOUND')
    logger.info(f'API key {key_pk} revoked by {user.pk}')
