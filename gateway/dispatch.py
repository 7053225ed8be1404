"""
SMS dispatch pipeline.

Checks run in a fixed order and the first failure wins; nothing is written
until all of them pass:

    sender present -> sender format -> sender approved for this user
    -> recipients valid -> funds reserved

The reservation is taken before the provider call and refunded if that call
fails, so a client is only ever charged for messages the provider accepted.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings
from django.utils import timezone

from config.exceptions import UpstreamError, ValidationError
from gateway.arkesel import ArkeselClient
from gateway.models import SmsMessage
from gateway.phone import calculate_sms_segments, format_phone_number, validate_phone_number
from senders.services import get_approved_sender, require_valid_sender_id
from wallet.services import quantize_amount, refund_reservation, reserve_funds

logger = logging.getLogger(__name__)


def rate_per_segment():
    return Decimal(str(settings.SMS_RATE_PER_SEGMENT))


def estimate_sms_cost(message, recipient_count):
    segments = calculate_sms_segments(message)
    return segments, quantize_amount(rate_per_segment() * segments * recipient_count)


def split_recipients(raw_recipients):
    """Normalize a list of numbers. Returns (valid, invalid), de-duplicated in order."""
    valid, invalid = [], []
    for raw in raw_recipients:
        phone = format_phone_number(raw) if isinstance(raw, str) else ''
        if validate_phone_number(phone):
            if phone not in valid:
                valid.append(phone)
        else:
            invalid.append(str(raw))
    return valid, invalid


def require_message_fields(to, message):
    if not to or not message:
        raise ValidationError(
            'Missing required parameters: to, message',
            code='MISSING_PARAMETERS',
        )
    if not isinstance(message, str):
        raise ValidationError(
            'message must be a string',
            code='VALIDATION_ERROR',
            extra={'fields': {'message': ['Not a valid string.']}},
        )


@dataclass
class DispatchResult:
    sms: SmsMessage
    recipients: list
    invalid_recipients: list = field(default_factory=list)

    def as_dict(self):
        data = {
            'message_id': str(self.sms.id),
            'status': self.sms.status,
            'recipients': len(self.recipients),
            'segments': self.sms.segments,
            'cost': str(self.sms.cost),
            'currency': settings.SMS_CURRENCY,
            'sender_id': self.sms.sender.sender_id,
        }
        if self.invalid_recipients:
            data['invalid_recipients'] = self.invalid_recipients
        return data


class SmsDispatcher:

    def __init__(self, client=None):
        self.client = client or ArkeselClient.from_settings()

    def resolve_recipients(self, raw_recipients, bulk=False):
        valid, invalid = split_recipients(raw_recipients)
        if bulk:
            if not valid:
                raise ValidationError(
                    'None of the recipients is a valid phone number',
                    code='NO_VALID_RECIPIENTS',
                    extra={'invalid_recipients': invalid},
                )
            return valid, invalid
        if invalid or not valid:
            raise ValidationError(
                f'Invalid phone number: {invalid[0] if invalid else ""}',
                code='INVALID_PHONE_NUMBER',
            )
        return valid, []

    def send(self, user, sender_value, raw_recipients, message, api_key_id=None, bulk=False):
        require_valid_sender_id(sender_value)
        sender = get_approved_sender(user, sender_value)
        recipients, invalid = self.resolve_recipients(raw_recipients, bulk=bulk)
        self.client.ensure_configured()

        segments, cost = estimate_sms_cost(message, len(recipients))
        debit = reserve_funds(
            user, cost,
            description=f'SMS from {sender.sender_id} to {len(recipients)} recipient(s)',
            metadata={'segments': segments, 'recipients': len(recipients)},
        )

        # Anything that fails after the reservation must give the money back
        sms = None
        try:
            sms = SmsMessage.objects.create(
                user=user,
                sender=sender,
                api_key_id=api_key_id,
                recipients=recipients,
                message=message,
                segments=segments,
                cost=cost,
                status=SmsMessage.STATUS_PENDING,
                wallet_reference=debit.reference,
            )
            receipt = self.client.send_sms(recipients, sender.sender_id, message)
        except Exception as e:
            reason = str(e.detail) if isinstance(e, UpstreamError) else f'dispatch error: {type(e).__name__}'
            refund_reservation(debit, reason=reason)
            if sms is not None:
                SmsMessage.objects.filter(pk=sms.pk).update(
                    status=SmsMessage.STATUS_FAILED, error_message=reason[:500],
                )
            logger.warning(f'SMS from {sender.sender_id} failed ({reason}), reservation {debit.reference} refunded')
            raise

        sms.status = SmsMessage.STATUS_SENT
        sms.provider_ref = receipt.reference
        sms.sent_at = timezone.now()
        sms.save(update_fields=['status', 'provider_ref', 'sent_at'])
        logger.info(f'SMS {sms.id} sent from {sender.sender_id}, cost {cost}')
        return DispatchResult(sms=sms, recipients=recipients, invalid_recipients=invalid)
