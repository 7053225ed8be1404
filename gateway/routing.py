"""
Internal route table for the API gateway.

Every client-facing operation is listed once here with the method it answers,
the API-key permission it needs and the handler that serves it. Client
custom routes (ClientApiRoute.mapped_to) may only point at paths in this table.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class RouteTarget:
    path: str
    method: str
    handler: str
    permission: str
    description: str

    @property
    def regex(self):
        pattern = re.sub(r':(\w+)', r'(?P<\1>[^/]+)', self.path)
        return re.compile(f'^{pattern}/?$')


ROUTES = (
    RouteTarget('/v1/sms/send', 'POST', 'sms_send', 'sms:send', 'Send a single SMS'),
    RouteTarget('/v1/sms/bulk', 'POST', 'sms_bulk', 'sms:bulk', 'Send the same SMS to many recipients'),
    RouteTarget('/v1/sms/status/:message_id', 'GET', 'sms_status', 'sms:status', 'Delivery status of a message'),
    RouteTarget('/v1/sms/history', 'GET', 'sms_history', 'sms:logs', 'Paginated message history'),
    RouteTarget('/v1/sms/calculate-cost', 'POST', 'sms_calculate_cost', 'sms:send', 'Estimate the cost of a send'),
    RouteTarget('/v1/wallet/balance', 'GET', 'wallet_balance', 'wallet:read', 'Current wallet balance'),
    RouteTarget('/v1/wallet/transactions', 'GET', 'wallet_transactions', 'wallet:read', 'Wallet transaction history'),
    RouteTarget('/v1/sender-ids', 'GET', 'sender_ids', 'sender:read', 'Approved sender IDs'),
    RouteTarget('/v1/otp/generate', 'POST', 'otp_generate', 'otp:generate', 'Generate and send an OTP'),
    RouteTarget('/v1/otp/verify', 'POST', 'otp_verify', 'otp:verify', 'Verify an OTP code'),
)

# Targets a client route may be mapped to
INTERNAL_ROUTES = frozenset(route.path for route in ROUTES if ':' not in route.path)


def normalize_route(path):
    path = '/' + (path or '').strip().strip('/')
    return path if path != '/' else ''


def find_route(method, path):
    """Return (RouteTarget, kwargs) for a method/path pair, or (None, None)."""
    path = normalize_route(path)
    for route in ROUTES:
        match = route.regex.match(path)
        if match and route.method == method.upper():
            return route, match.groupdict()
    return None, None


def route_allows_path(path):
    """True when some internal route serves `path`, whatever the method."""
    path = normalize_route(path)
    return any(route.regex.match(path) for route in ROUTES)


def get_route_documentation():
    return [
        {
            'path': f'/api/gateway{route.path}',
            'method': route.method,
            'permission': route.permission,
            'description': route.description,
        }
        for route in ROUTES
    ]
