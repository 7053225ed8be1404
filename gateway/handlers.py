"""
Handlers behind every route in gateway.routing.ROUTES.

Each takes the authenticated DRF request (request.user = owner,
request.auth = ApiKeyIdentity) plus path kwargs and returns a Response. The
direct /api/client/v1/ views and the /api/gateway/ dispatcher share them.
"""

import logging
import uuid

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response

from config.exceptions import NotFoundError, ValidationError
from config.pagination import paginate
from gateway.auth import require_permission
from gateway.dispatch import SmsDispatcher, estimate_sms_cost, rate_per_segment, require_message_fields
from gateway.models import SmsMessage
from gateway.routing import ROUTES
from gateway.serializers import CalculateCostSerializer, SmsMessageSerializer
from otp.serializers import OTPGenerateSerializer, OTPRequestSerializer, OTPVerifySerializer
from otp.services import generate_otp, verify_otp
from senders.models import SenderID
from senders.serializers import SenderIDSerializer
from wallet.models import WalletTransaction
from wallet.serializers import WalletTransactionSerializer
from wallet.services import get_or_create_wallet

logger = logging.getLogger(__name__)


def _ok(data, status_code=status.HTTP_200_OK, **extra):
    return Response({'success': True, 'data': data, **extra}, status=status_code)


def sms_send(request):
    to = request.data.get('to')
    message = request.data.get('message')
    require_message_fields(to, message)

    result = SmsDispatcher().send(
        request.user, request.data.get('from'), [to], message,
        api_key_id=request.auth.api_key_id,
    )
    return _ok(result.as_dict())


def sms_bulk(request):
    recipients = request.data.get('recipients')
    message = request.data.get('message')
    require_message_fields(recipients, message)
    if not isinstance(recipients, list):
        raise ValidationError('recipients must be a list of phone numbers', code='INVALID_RECIPIENTS')
    if len(recipients) > settings.SMS_MAX_BULK_RECIPIENTS:
        raise ValidationError(
            f'At most {settings.SMS_MAX_BULK_RECIPIENTS} recipients per request',
            code='TOO_MANY_RECIPIENTS',
        )

    result = SmsDispatcher().send(
        request.user, request.data.get('from'), recipients, message,
        api_key_id=request.auth.api_key_id, bulk=True,
    )
    return _ok(result.as_dict())


def sms_status(request, message_id):
    try:
        message_id = uuid.UUID(str(message_id))
    except ValueError:
        raise NotFoundError('Message not found', code='MESSAGE_NOT_FOUND')
    sms = SmsMessage.objects.select_related('sender').filter(pk=message_id, user=request.user).first()
    if sms is None:
        raise NotFoundError('Message not found', code='MESSAGE_NOT_FOUND')
    return _ok(SmsMessageSerializer(sms).data)


def sms_history(request):
    qs = SmsMessage.objects.select_related('sender').filter(user=request.user)
    status_filter = request.query_params.get('status')
    if status_filter:
        qs = qs.filter(status=status_filter.upper())
    page_qs, pagination = paginate(request, qs)
    return _ok(SmsMessageSerializer(page_qs, many=True).data, pagination=pagination)


def sms_calculate_cost(request):
    serializer = CalculateCostSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    message = serializer.validated_data['message']
    recipients = serializer.validated_data['recipients']

    segments, cost = estimate_sms_cost(message, recipients)
    return _ok({
        'segments': segments,
        'recipients': recipients,
        'rate_per_segment': str(rate_per_segment()),
        'total_cost': str(cost),
        'currency': settings.SMS_CURRENCY,
    })


def wallet_balance(request):
    wallet = get_or_create_wallet(request.user)
    return _ok({'balance': str(wallet.balance), 'currency': wallet.currency})


def wallet_transactions(request):
    qs = WalletTransaction.objects.filter(wallet__user=request.user)
    tx_type = request.query_params.get('type')
    if tx_type:
        qs = qs.filter(tx_type=tx_type)
    page_qs, pagination = paginate(request, qs)
    return _ok(WalletTransactionSerializer(page_qs, many=True).data, pagination=pagination)


def sender_ids(request):
    qs = SenderID.objects.filter(user=request.user, status=SenderID.STATUS_APPROVED)
    return _ok(SenderIDSerializer(qs, many=True).data)


def otp_generate(request):
    serializer = OTPGenerateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    otp_req = generate_otp(
        request.user,
        data['phone_number'],
        data['sender_id'],
        code_length=data['code_length'],
        expiry_minutes=data['expiry_minutes'],
        message_template=data['message_template'],
        reference_id=data['reference_id'],
        api_key_id=request.auth.api_key_id,
    )
    return _ok(OTPRequestSerializer(otp_req).data, status_code=status.HTTP_201_CREATED)


def otp_verify(request):
    serializer = OTPVerifySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    otp_req = verify_otp(request.user, serializer.validated_data['phone_number'], serializer.validated_data['code'])
    return _ok({
        'verified': True,
        'otp_id': str(otp_req.id),
        'phone': otp_req.phone,
        'reference_id': otp_req.reference_id,
    })


HANDLERS = {
    'sms_send': sms_send,
    'sms_bulk': sms_bulk,
    'sms_status': sms_status,
    'sms_history': sms_history,
    'sms_calculate_cost': sms_calculate_cost,
    'wallet_balance': wallet_balance,
    'wallet_transactions': wallet_transactions,
    'sender_ids': sender_ids,
    'otp_generate': otp_generate,
    'otp_verify': otp_verify,
}

ROUTES_BY_HANDLER = {route.handler: route for route in ROUTES}


def serve(request, route, **kwargs):
    """Check the route's permission against the API key, then run its handler."""
    require_permission(request.auth, route.permission)
    return HANDLERS[route.handler](request, **kwargs)


def serve_named(request, handler_name, **kwargs):
    return serve(request, ROUTES_BY_HANDLER[handler_name], **kwargs)
