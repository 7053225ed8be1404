"""
OTP generation and verification for client applications.

The code is delivered as an ordinary SMS through the gateway dispatch
pipeline, so it is charged, refunded and metered exactly like any other send.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from config.exceptions import NotFoundError, PlatformError, ValidationError
from gateway.dispatch import SmsDispatcher
from gateway.phone import format_phone_number, validate_phone_number
from otp.models import OTPRequest

logger = logging.getLogger(__name__)

LIVE_STATUSES = ('sent',)


class TooManyAttempts(PlatformError):
    status_code = 429
    default_code = 'MAX_ATTEMPTS_EXCEEDED'
    default_detail = 'Maximum verification attempts exceeded. Request a new OTP.'


def hash_code(code):
    return hashlib.sha256(code.encode()).hexdigest()


def generate_code(length):
    return ''.join(secrets.choice('0123456789') for _ in range(length))


def render_message(template, code, minutes):
    template = template or settings.OTP_DEFAULT_TEMPLATE
    if '{code}' not in template:
        raise ValidationError('message_template must contain {code}', code='INVALID_TEMPLATE')
    return template.replace('{code}', code).replace('{minutes}', str(minutes))


def _require_phone(phone_number):
    phone = format_phone_number(phone_number)
    if not validate_phone_number(phone):
        raise ValidationError(f'Invalid phone number: {phone_number}', code='INVALID_PHONE_NUMBER')
    return phone


def generate_otp(user, phone_number, sender_value, code_length=None, expiry_minutes=None,
                 message_template=None, reference_id='', api_key_id=None, dispatcher=None):
    """Create, send and record an OTP. Returns the OTPRequest."""
    # Validated by the dispatcher, after the sender checks
    phone = format_phone_number(phone_number)
    code_length = code_length or settings.OTP_DEFAULT_LENGTH
    expiry_minutes = expiry_minutes or settings.OTP_DEFAULT_EXPIRY_MINUTES

    code = generate_code(code_length)
    message = render_message(message_template, code, expiry_minutes)

    dispatcher = dispatcher or SmsDispatcher()
    result = dispatcher.send(user, sender_value, [phone], message, api_key_id=api_key_id)

    # Only the newest code for a phone stays usable
    OTPRequest.objects.filter(user_id=user.pk, phone=phone, status__in=LIVE_STATUSES).update(status='expired')

    otp_req = OTPRequest.objects.create(
        user=user,
        sender=result.sms.sender,
        sms=result.sms,
        phone=phone,
        code_hash=hash_code(code),
        status='sent',
        max_attempts=settings.OTP_MAX_ATTEMPTS,
        reference_id=reference_id or '',
        expires_at=timezone.now() + timedelta(minutes=expiry_minutes),
    )
    logger.info(f'OTP {otp_req.id} sent to {phone[:6]}*** for {user.pk}')
    return otp_req


def verify_otp(user, phone_number, code):
    """
    Check `code` against the newest live OTP for the phone.

    Raises NotFoundError (OTP_NOT_FOUND), TooManyAttempts or ValidationError
    (INVALID_OTP_CODE, with attempts_remaining). Returns the verified OTPRequest.
    """
    phone = _require_phone(phone_number)
    now = timezone.now()

    otp_req = OTPRequest.objects.filter(
        user_id=user.pk, phone=phone, status__in=LIVE_STATUSES,
    ).order_by('-created_at').first()

    if otp_req is not None and otp_req.expires_at <= now:
        OTPRequest.objects.filter(pk=otp_req.pk).update(status='expired')
        otp_req = None
    if otp_req is None:
        raise NotFoundError('No valid OTP found for this phone number. It may have expired.', code='OTP_NOT_FOUND')

    if otp_req.attempts >= otp_req.max_attempts:
        OTPRequest.objects.filter(pk=otp_req.pk).update(status='failed')
        raise TooManyAttempts()

    if hmac.compare_digest(otp_req.code_hash, hash_code(str(code))):
        OTPRequest.objects.filter(pk=otp_req.pk, status='sent').update(status='verified', verified_at=now)
        otp_req.refresh_from_db()
        logger.info(f'OTP {otp_req.id} verified')
        return otp_req

    OTPRequest.objects.filter(pk=otp_req.pk).update(attempts=F('attempts') + 1)
    otp_req.refresh_from_db(fields=['attempts'])
    remaining = max(otp_req.max_attempts - otp_req.attempts, 0)
    raise ValidationError(
        'Invalid OTP code.',
        code='INVALID_OTP_CODE',
        extra={'attempts_remaining': remaining},
    )
