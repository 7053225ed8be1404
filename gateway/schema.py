"""
drf-spectacular extension for the client API.

Registers ApiKeyAuthentication so the OpenAPI schema documents the
X-API-Key security scheme.
"""

from drf_spectacular.extensions import OpenApiAuthenticationExtension


class ApiKeyAuthExtension(OpenApiAuthenticationExtension):
    target_class = 'gateway.auth.ApiKeyAuthentication'
    name = 'ApiKeyAuth'

    def get_security_definition(self, auto_schema):
        return {
            'type': 'apiKey',
            'in': 'header',
            'name': 'X-API-Key',
            'description': (
                'Client API key (`msk_live_...`) created under /api/api-keys/. '
                'Each key carries scopes such as `sms:send` or `wallet:read`.'
            ),
        }
