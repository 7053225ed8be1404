from decimal import Decimal

from rest_framework import serializers

from wallet.models import WalletTransaction


class WalletTransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = WalletTransaction
        fields = ['id', 'amount', 'tx_type', 'reference', 'status', 'balance_after', 'description', 'created_at']
        read_only_fields = fields


class WalletCreditSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=Decimal('0.0001'))
    description = serializers.CharField(max_length=255, required=False, default='Admin credit')
