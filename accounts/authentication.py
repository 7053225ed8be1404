"""
JWT bearer tokens for the dashboard API (/api/accounts/, /api/sender-ids/,
/api/client-routes/, /api/api-keys/, admin endpoints).

Access tokens carry the user's role. A token whose role no longer matches
the account (an admin demoted to client, say) is rejected, so role changes
take effect without waiting for the token to expire.
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings
from rest_framework.authentication import BaseAuthentication

from config.exceptions import AuthError

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'
ACCESS = 'access'
REFRESH = 'refresh'


def _issue(user, token_type, lifetime, **claims):
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': str(user.id),
        'type': token_type,
        'iat': now,
        'exp': now + lifetime,
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=ALGORITHM)


def generate_access_token(user):
    return _issue(
        user, ACCESS, timedelta(minutes=settings.JWT_ACCESS_TOKEN_LIFETIME_MINUTES),
        role=user.role,
    )


def generate_refresh_token(user):
    return _issue(user, REFRESH, timedelta(days=settings.JWT_REFRESH_TOKEN_LIFETIME_DAYS))


def decode_token(token, expected_type):
    """Return the payload of a valid token of `expected_type` or raise AuthError."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[ALGORITHM],
            options={'require': ['exp', 'user_id', 'type']},
        )
    except jwt.ExpiredSignatureError:
        raise AuthError(f'{expected_type.capitalize()} token has expired', code='TOKEN_EXPIRED')
    except jwt.InvalidTokenError:
        raise AuthError('Invalid token', code='INVALID_TOKEN')

    if payload['type'] != expected_type:
        raise AuthError('Invalid token type', code='INVALID_TOKEN')
    return payload


def verify_refresh_token(token):
    return decode_token(token, REFRESH)


class JWTAuthentication(BaseAuthentication):
    """Authorization: Bearer <access token>. request.auth is the decoded payload."""

    def authenticate_header(self, request):
        return 'Bearer'

    def authenticate(self, request):
        auth_header = request.headers.get('Authorization', '')
        if not auth_header.startswith('Bearer '):
            return None

        payload = decode_token(auth_header[7:], ACCESS)

        from accounts.models import User
        user = User.objects.filter(id=payload['user_id'], is_active=True).first()
        if user is None:
            raise AuthError('User not found', code='INVALID_TOKEN')
        if payload.get('role') != user.role:
            logger.info(f'Rejected token for {user.email}: role changed to {user.role}')
            raise AuthError('Role changed, sign in again', code='INVALID_TOKEN')

        return (user, payload)
