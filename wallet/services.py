"""
Wallet service: prepaid balance movements.

Debits are reservations taken before an SMS is forwarded upstream. They are a
single conditional UPDATE (balance >= amount) so two concurrent sends from
the same account can never overdraw it. A reservation whose upstream call
fails is returned with refund_reservation().
"""

import uuid
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from config.exceptions import NotFoundError, ValidationError
from wallet.models import Wallet, WalletTransaction

logger = logging.getLogger(__name__)

AMOUNT_PLACES = Decimal('0.0001')


class InsufficientBalance(ValidationError):
    default_code = 'INSUFFICIENT_BALANCE'
    default_detail = 'Insufficient wallet balance'


def quantize_amount(amount):
    return Decimal(str(amount)).quantize(AMOUNT_PLACES, rounding=ROUND_HALF_UP)


def _reference(prefix):
    return f'MS-{prefix}-{uuid.uuid4().hex[:16].upper()}'


def get_or_create_wallet(user):
    wallet, _ = Wallet.objects.get_or_create(
        user=user, defaults={'currency': settings.SMS_CURRENCY},
    )
    return wallet


def get_balance(user):
    wallet = Wallet.objects.filter(user_id=user.pk).values_list('balance', flat=True).first()
    return wallet if wallet is not None else Decimal('0')


def reserve_funds(user, amount, description='', metadata=None):
    """
    Atomically take `amount` from the user's wallet.

    Raises InsufficientBalance when the balance would go negative; nothing is
    written in that case.
    """
    amount = quantize_amount(amount)
    if amount <= 0:
        raise ValidationError('Debit amount must be positive', code='INVALID_AMOUNT')

    with transaction.atomic():
        updated = Wallet.objects.filter(user_id=user.pk, balance__gte=amount).update(
            balance=F('balance') - amount,
            updated_at=timezone.now(),
        )
        if not updated:
            logger.info(f'Insufficient balance for {user.pk}: needs {amount}')
            raise InsufficientBalance(extra={'required': str(amount)})

        wallet = Wallet.objects.get(user_id=user.pk)
        tx = WalletTransaction.objects.create(
            wallet=wallet,
            amount=amount,
            tx_type='debit',
            reference=_reference('DEB'),
            status='completed',
            balance_after=wallet.balance,
            description=description,
            metadata=metadata or {},
        )

    logger.info(f'Reserved {amount} from wallet {wallet.pk} ({tx.reference})')
    return tx


def refund_reservation(debit_tx, reason=''):
    """Return a debit to the wallet and mark the debit reversed."""
    with transaction.atomic():
        reversed_count = WalletTransaction.objects.filter(
            pk=debit_tx.pk, tx_type='debit', status='completed',
        ).update(status='reversed')
        if not reversed_count:
            logger.warning(f'Refund skipped, {debit_tx.reference} already reversed')
            return None

        Wallet.objects.filter(pk=debit_tx.wallet_id).update(
            balance=F('balance') + debit_tx.amount,
            updated_at=timezone.now(),
        )
        wallet = Wallet.objects.get(pk=debit_tx.wallet_id)
        refund = WalletTransaction.objects.create(
            wallet=wallet,
            amount=debit_tx.amount,
            tx_type='refund',
            reference=_reference('REF'),
            status='completed',
            balance_after=wallet.balance,
            description=f'Refund of {debit_tx.reference}',
            metadata={'original_reference': debit_tx.reference, 'reason': reason[:200]},
        )

    logger.info(f'Refunded {debit_tx.amount} to wallet {wallet.pk} ({debit_tx.reference})')
    return refund


def credit_wallet(user, amount, tx_type='topup', description='', metadata=None):
    amount = quantize_amount(amount)
    if amount <= 0:
        raise ValidationError('Credit amount must be positive', code='INVALID_AMOUNT')

    with transaction.atomic():
        wallet = get_or_create_wallet(user)
        Wallet.objects.filter(pk=wallet.pk).update(
            balance=F('balance') + amount,
            updated_at=timezone.now(),
        )
        wallet.refresh_from_db(fields=['balance'])
        tx = WalletTransaction.objects.create(
            wallet=wallet,
            amount=amount,
            tx_type=tx_type,
            reference=_reference('CRD'),
            status='completed',
            balance_after=wallet.balance,
            description=description,
            metadata=metadata or {},
        )

    logger.info(f'Credited {amount} to wallet {wallet.pk} ({tx.reference})')
    return tx


def get_wallet_or_404(user_id):
    try:
        return Wallet.objects.select_related('user').get(user_id=user_id)
    except Wallet.DoesNotExist:
        raise NotFoundError('Wallet not found', code='WALLET_NOT_FOUND')
