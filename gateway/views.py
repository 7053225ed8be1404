"""
Client API views.

/api/client/v1/...       fixed endpoints, X-API-Key auth
/api/gateway/<route>     client-registered aliases and the internal route table
/api/client-routes/      manage aliases (JWT)
/api/api-keys/           manage API keys (JWT)
"""

import logging

from django.core.cache import cache
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse, inline_serializer
from rest_framework import serializers as drf_serializers, status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import Throttled
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from config.exceptions import NotFoundError, PlatformError
from gateway.auth import ApiKeyAuthentication
from gateway.handlers import serve, serve_named
from gateway.models import APIKey, ClientApiRoute
from gateway.routing import INTERNAL_ROUTES, find_route, get_route_documentation, normalize_route, route_allows_path
from gateway.serializers import (
    APIKeyCreatedSerializer, APIKeyCreateSerializer, APIKeySerializer,
    CalculateCostSerializer, ClientApiRouteCreateSerializer, ClientApiRouteSerializer,
)
from gateway.services import (
    create_api_key, create_client_route, delete_client_route, revoke_api_key,
)
from usage.pricing import normalize_endpoint

logger = logging.getLogger(__name__)

API_KEY_AUTH = [ApiKeyAuthentication]
API_KEY_PERMS = [AllowAny]  # Auth handled by X-API-Key


class MethodNotAllowedOnRoute(PlatformError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED
    default_code = 'METHOD_NOT_ALLOWED'
    default_detail = 'Method not allowed for this route'


_SMS_SEND_REQUEST = inline_serializer('SmsSendRequest', fields={
    'to': drf_serializers.CharField(help_text='Recipient, e.g. 0241234567 or +233241234567'),
    'message': drf_serializers.CharField(),
    'from': drf_serializers.CharField(help_text='Your approved sender ID (3-11 alphanumeric)'),
})

_SMS_ERRORS = {
    400: OpenApiResponse(description='MISSING_PARAMETERS, MISSING_SENDER_ID, INVALID_SENDER_ID_FORMAT, '
                                     'INVALID_PHONE_NUMBER or INSUFFICIENT_BALANCE'),
    401: OpenApiResponse(description='UNAUTHORIZED'),
    403: OpenApiResponse(description='INVALID_SENDER_ID or INSUFFICIENT_PERMISSIONS'),
    502: OpenApiResponse(description='UPSTREAM_ERROR (reservation refunded)'),
    504: OpenApiResponse(description='UPSTREAM_TIMEOUT (reservation refunded)'),
}


# ==================== CLIENT SMS ====================


@extend_schema(
    tags=['Client: SMS'],
    summary='Send SMS',
    description=(
        'Send a message to one recipient from an approved sender ID.\n\n'
        '**Billing**: segments x rate per segment is reserved before the provider is called '
        'and refunded if the provider rejects the message.'
    ),
    request=_SMS_SEND_REQUEST,
    responses={200: OpenApiResponse(description='Message accepted'), **_SMS_ERRORS},
    examples=[
        OpenApiExample('Send', value={'to': '0241234567', 'message': 'Hello', 'from': 'MyBrand'}, request_only=True),
    ],
)
@api_view(['POST'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_sms_send(request):
    return serve_named(request, 'sms_send')


@extend_schema(
    tags=['Client: SMS'],
    summary='Send bulk SMS',
    description='Send the same message to many recipients. Invalid numbers are dropped and reported.',
    request=inline_serializer('SmsBulkRequest', fields={
        'recipients': drf_serializers.ListField(child=drf_serializers.CharField()),
        'message': drf_serializers.CharField(),
        'from': drf_serializers.CharField(),
    }),
    responses={200: OpenApiResponse(description='Messages accepted'), **_SMS_ERRORS},
)
@api_view(['POST'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_sms_bulk(request):
    return serve_named(request, 'sms_bulk')


@extend_schema(tags=['Client: SMS'], summary='Message status')
@api_view(['GET'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_sms_status(request, message_id):
    return serve_named(request, 'sms_status', message_id=message_id)


@extend_schema(tags=['Client: SMS'], summary='Message history')
@api_view(['GET'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_sms_history(request):
    return serve_named(request, 'sms_history')


@extend_schema(tags=['Client: SMS'], summary='Estimate cost', request=CalculateCostSerializer)
@api_view(['POST'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_sms_calculate_cost(request):
    return serve_named(request, 'sms_calculate_cost')


# ==================== CLIENT WALLET / SENDERS / OTP ====================


@extend_schema(tags=['Client: Wallet'], summary='Wallet balance')
@api_view(['GET'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_wallet_balance(request):
    return serve_named(request, 'wallet_balance')


@extend_schema(tags=['Client: Wallet'], summary='Wallet transactions')
@api_view(['GET'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_wallet_transactions(request):
    return serve_named(request, 'wallet_transactions')


@extend_schema(tags=['Client: Sender IDs'], summary='Approved sender IDs')
@api_view(['GET'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_sender_ids(request):
    return serve_named(request, 'sender_ids')


@extend_schema(
    tags=['Client: OTP'],
    summary='Generate OTP',
    description='Generate a code, send it by SMS from your approved sender ID and keep its hash for verification.',
    responses={
        201: OpenApiResponse(description='OTP sent'),
        **_SMS_ERRORS,
    },
)
@api_view(['POST'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_otp_generate(request):
    return serve_named(request, 'otp_generate')


@extend_schema(
    tags=['Client: OTP'],
    summary='Verify OTP',
    responses={
        200: OpenApiResponse(description='Code verified'),
        400: OpenApiResponse(description='INVALID_OTP_CODE with attempts_remaining'),
        404: OpenApiResponse(description='OTP_NOT_FOUND'),
        429: OpenApiResponse(description='MAX_ATTEMPTS_EXCEEDED'),
    },
)
@api_view(['POST'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def client_otp_verify(request):
    return serve_named(request, 'otp_verify')


# ==================== GATEWAY ====================


def _check_route_rate(client_route_key, limit):
    rate_key = f'client_route_rate:{client_route_key}'
    current = cache.get(rate_key, 0)
    if current >= limit:
        raise Throttled(detail='Route rate limit exceeded. Try again shortly.')
    cache.set(rate_key, current + 1, timeout=60)


@extend_schema(
    tags=['Gateway'],
    summary='Call a route through the gateway',
    description=(
        'Resolves `route` against the internal route table (e.g. `v1/sms/send`) or one of your '
        'registered aliases, checks the API key permission and runs the target.'
    ),
    responses={404: OpenApiResponse(description='ROUTE_NOT_FOUND')},
)
@api_view(['GET', 'POST', 'PUT', 'PATCH', 'DELETE'])
@authentication_classes(API_KEY_AUTH)
@permission_classes(API_KEY_PERMS)
def gateway_dispatch(request, route):
    path = normalize_route(route)

    target, kwargs = find_route(request.method, path)
    if target is None and not route_allows_path(path):
        client_route = ClientApiRoute.objects.filter(user=request.user, route=path).first()
        if client_route is None:
            raise NotFoundError(f'No route configured for {path}', code='ROUTE_NOT_FOUND')
        _check_route_rate(client_route.pk, client_route.rate_limit)
        logger.info(f'Gateway alias {path} -> {client_route.mapped_to} for {request.user.pk}')
        path = client_route.mapped_to
        # Bill the call at the rate of the route it actually ran
        request._request.usage_endpoint = normalize_endpoint(path)
        target, kwargs = find_route(request.method, path)

    if target is None:
        if route_allows_path(path):
            raise MethodNotAllowedOnRoute(f'{request.method} is not allowed on {path}')
        raise NotFoundError(f'No route configured for {path}', code='ROUTE_NOT_FOUND')

    return serve(request, target, **kwargs)


@extend_schema(tags=['Gateway'], summary='Gateway route documentation')
@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def gateway_routes(request):
    return Response({
        'success': True,
        'data': {
            'routes': get_route_documentation(),
            'mappable_targets': sorted(INTERNAL_ROUTES),
            'authentication': 'Send your API key in the X-API-Key header',
        },
    })


# ==================== CLIENT ROUTES (JWT) ====================


@extend_schema(
    tags=['Gateway'],
    summary='List or create route aliases',
    request=ClientApiRouteCreateSerializer,
    responses={
        201: ClientApiRouteSerializer,
        400: OpenApiResponse(description='INVALID_ROUTE or INVALID_MAPPED_ROUTE'),
        409: OpenApiResponse(description='ROUTE_EXISTS'),
    },
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def client_routes(request):
    if request.method == 'GET':
        qs = ClientApiRoute.objects.filter(user=request.user)
        return Response({'success': True, 'data': ClientApiRouteSerializer(qs, many=True).data})

    serializer = ClientApiRouteCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    client_route = create_client_route(request.user, **serializer.validated_data)
    return Response({
        'success': True,
        'data': ClientApiRouteSerializer(client_route).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(tags=['Gateway'], summary='Delete a route alias')
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def client_route_detail(request, route_pk):
    delete_client_route(request.user, route_pk)
    return Response(status=status.HTTP_204_NO_CONTENT)


# ==================== API KEYS (JWT) ====================


@extend_schema(
    tags=['Gateway'],
    summary='List or create API keys',
    description='The full key is returned only once, in the POST response.',
    request=APIKeyCreateSerializer,
    responses={201: APIKeyCreatedSerializer},
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def api_keys(request):
    if request.method == 'GET':
        qs = APIKey.objects.filter(user=request.user)
        return Response({'success': True, 'data': APIKeySerializer(qs, many=True).data})

    serializer = APIKeyCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    key = create_api_key(request.user, **serializer.validated_data)
    return Response({
        'success': True,
        'data': APIKeyCreatedSerializer(key).data,
    }, status=status.HTTP_201_CREATED)


@extend_schema(tags=['Gateway'], summary='Revoke an API key')
@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def api_key_detail(request, key_pk):
    revoke_api_key(request.user, key_pk)
    return Response(status=status.HTTP_204_NO_CONTENT)
