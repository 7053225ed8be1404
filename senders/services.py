"""
Sender ID registry and approval workflow.

PENDING -> APPROVED | REJECTED, once. The transition is a single conditional
UPDATE guarded by status = PENDING, so two admins acting on the same request
can never both succeed and a terminal record is never rewritten.
"""

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from config.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from senders.models import SenderID
from senders.validators import SenderIdCheck, validate_sender_id

logger = logging.getLogger(__name__)


def require_valid_sender_id(value):
    """Raise the client-facing error for a missing or malformed sender ID."""
    check = validate_sender_id(value)
    if check is SenderIdCheck.MISSING:
        raise ValidationError(
            'Sender ID (from) is required. Please use your approved sender ID.',
            code='MISSING_SENDER_ID',
        )
    if check is SenderIdCheck.INVALID_FORMAT:
        raise ValidationError(
            'Sender ID must be 3-11 alphanumeric characters',
            code='INVALID_SENDER_ID_FORMAT',
        )
    return value


def get_approved_sender(user, value):
    """Return the user's APPROVED SenderID named `value` or raise INVALID_SENDER_ID."""
    sender = SenderID.objects.filter(
        user_id=user.pk, sender_id=value, status=SenderID.STATUS_APPROVED,
    ).first()
    if sender is None:
        raise ForbiddenError(
            f'Sender ID "{value}" is not approved for this account',
            code='INVALID_SENDER_ID',
        )
    return sender


def submit_sender_id(user, sender_id, purpose='', sample_message='', company_name=None):
    require_valid_sender_id(sender_id)

    if SenderID.objects.filter(user_id=user.pk, sender_id=sender_id).exists():
        raise ConflictError('You have already requested this sender ID', code='SENDER_ID_EXISTS')

    try:
        with transaction.atomic():
            sender = SenderID.objects.create(
                user=user,
                sender_id=sender_id,
                purpose=purpose or '',
                sample_message=sample_message or '',
                company_name=company_name or None,
                status=SenderID.STATUS_PENDING,
            )
    except IntegrityError:
        raise ConflictError('You have already requested this sender ID', code='SENDER_ID_EXISTS')

    logger.info(f'Sender ID {sender_id} submitted by {user.pk} ({sender.pk})')
    return sender


def transition_sender_id(sender_pk, target_status, admin, notes=''):
    """
    Move a PENDING sender ID to APPROVED or REJECTED.

    Raises NotFoundError when the record does not exist and ConflictError
    when it is already terminal; in both cases nothing is written.
    """
    if not getattr(admin, 'is_admin', False):
        raise ForbiddenError('Only admins can perform this action')

    if target_status not in SenderID.TERMINAL_STATUSES:
        raise ValidationError('Status must be APPROVED or REJECTED', code='INVALID_STATUS')

    now = timezone.now()
    updated = SenderID.objects.filter(pk=sender_pk, status=SenderID.STATUS_PENDING).update(
        status=target_status,
        approved_at=now if target_status == SenderID.STATUS_APPROVED else None,
        rejected_at=now if target_status == SenderID.STATUS_REJECTED else None,
        approved_by=admin,
        admin_notes=notes or '',
        updated_at=now,
    )

    if not updated:
        current = SenderID.objects.filter(pk=sender_pk).values_list('status', flat=True).first()
        if current is None:
            raise NotFoundError('Sender ID not found', code='SENDER_ID_NOT_FOUND')
        raise ConflictError(
            f'Sender ID is already {current}',
            code='SENDER_ID_NOT_PENDING',
            extra={'status': current},
        )

    logger.info(f'Sender ID {sender_pk} {target_status} by {admin.pk}')
    return SenderID.objects.select_related('user', 'approved_by').get(pk=sender_pk)
