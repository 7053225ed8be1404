import uuid
from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from config.exceptions import ValidationError
from tests.factories import fund, make_admin, make_user
from wallet.models import Wallet, WalletTransaction
from wallet.services import InsufficientBalance, credit_wallet, refund_reservation, reserve_funds


class WalletServiceTest(TestCase):

    def setUp(self):
        self.user = make_user()
        fund(self.user, '1')

    def balance(self):
        return Wallet.objects.get(user=self.user).balance

    def test_reserve_records_debit(self):
        tx = reserve_funds(self.user, Decimal('0.25'), description='sms')
        self.assertEqual(tx.tx_type, 'debit')
        self.assertEqual(tx.balance_after, Decimal('0.75'))
        self.assertEqual(self.balance(), Decimal('0.75'))

    def test_reserve_exact_balance(self):
        reserve_funds(self.user, Decimal('1'))
        self.assertEqual(self.balance(), Decimal('0'))

    def test_reserve_more_than_balance_writes_nothing(self):
        with self.assertRaises(InsufficientBalance) as ctx:
            reserve_funds(self.user, Decimal('1.0001'))
        self.assertEqual(ctx.exception.code, 'INSUFFICIENT_BALANCE')
        self.assertEqual(self.balance(), Decimal('1'))
        self.assertFalse(WalletTransaction.objects.filter(tx_type='debit').exists())

    def test_non_positive_amounts_rejected(self):
        with self.assertRaises(ValidationError):
            reserve_funds(self.user, Decimal('0'))
        with self.assertRaises(ValidationError):
            credit_wallet(self.user, Decimal('-1'))

    def test_refund_is_applied_once(self):
        debit = reserve_funds(self.user, Decimal('0.5'))

        refund = refund_reservation(debit, reason='provider down')
        again = refund_reservation(debit, reason='retry')

        self.assertEqual(refund.amount, Decimal('0.5'))
        self.assertIsNone(again)
        self.assertEqual(self.balance(), Decimal('1'))
        self.assertEqual(WalletTransaction.objects.filter(tx_type='refund').count(), 1)

    def test_sequential_reservations_stop_at_zero(self):
        results = []
        for _ in range(5):
            try:
                reserve_funds(self.user, Decimal('0.3'))
                results.append(True)
            except InsufficientBalance:
                results.append(False)
        self.assertEqual(results, [True, True, True, False, False])
        self.assertEqual(self.balance(), Decimal('0.1'))


class AdminCreditApiTest(TestCase):

    def setUp(self):
        self.api = APIClient()
        self.user = make_user()

    def test_admin_credits_wallet(self):
        self.api.force_authenticate(user=make_admin())
        response = self.api.post(
            f'/api/admin/wallets/{self.user.pk}/credit', {'amount': '12.5', 'description': 'bank transfer'}, format='json',
        )
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['data']['tx_type'], 'admin_credit')
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal('12.5'))

    def test_unknown_wallet(self):
        self.api.force_authenticate(user=make_admin())
        response = self.api.post(f'/api/admin/wallets/{uuid.uuid4()}/credit', {'amount': '1'}, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['code'], 'WALLET_NOT_FOUND')

    def test_client_cannot_credit(self):
        self.api.force_authenticate(user=self.user)
        response = self.api.post(f'/api/admin/wallets/{self.user.pk}/credit', {'amount': '1'}, format='json')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal('0'))
