import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from accounts.permissions import IsPlatformAdmin
from wallet.serializers import WalletCreditSerializer, WalletTransactionSerializer
from wallet.services import credit_wallet, get_wallet_or_404

logger = logging.getLogger(__name__)


@extend_schema(exclude=True)
@api_view(['POST'])
@permission_classes([IsPlatformAdmin])
def admin_credit_wallet(request, user_id):
    """Top up a client's wallet (offline payment, goodwill credit)."""
    wallet = get_wallet_or_404(user_id)

    serializer = WalletCreditSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    tx = credit_wallet(
        wallet.user,
        serializer.validated_data['amount'],
        tx_type='admin_credit',
        description=serializer.validated_data['description'],
        metadata={'admin_id': str(request.user.pk)},
    )
    logger.info(f'Admin {request.user.email} credited {tx.amount} to {wallet.user.email}')

    return Response({
        'success': True,
        'data': WalletTransactionSerializer(tx).data,
    }, status=status.HTTP_201_CREATED)
