from decimal import Decimal
from unittest.mock import patch

import requests
from django.test import TestCase
from rest_framework.test import APIClient

from gateway.models import SmsMessage
from senders.models import SenderID
from tests.factories import fund, make_api_key, make_sender, make_user, provider_response
from wallet.models import Wallet, WalletTransaction

SEND_URL = '/api/client/v1/sms/send'
BULK_URL = '/api/client/v1/sms/bulk'
PROVIDER_GET = 'gateway.arkesel.requests.get'


class SmsTestCase(TestCase):

    def setUp(self):
        self.api = APIClient()
        self.user = make_user()
        self.key = make_api_key(self.user)
        self.api.credentials(HTTP_X_API_KEY=self.key.key)
        self.sender = make_sender(self.user, 'TestSend', status=SenderID.STATUS_APPROVED)
        fund(self.user, '10')

    def balance(self):
        return Wallet.objects.get(user=self.user).balance

    def send(self, payload, url=SEND_URL):
        return self.api.post(url, payload, format='json')

    def assertError(self, response, status_code, code):
        self.assertEqual(response.status_code, status_code, response.content)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertEqual(body['error']['code'], code)


class SingleSendTest(SmsTestCase):

    @patch(PROVIDER_GET)
    def test_send_charges_one_segment(self, mock_get):
        mock_get.return_value = provider_response()

        response = self.send({'to': '0241234567', 'message': 'Hello there', 'from': 'TestSend'})

        self.assertEqual(response.status_code, 200, response.content)
        data = response.json()['data']
        self.assertEqual(data['status'], 'SENT')
        self.assertEqual(Decimal(data['cost']), Decimal('0.059'))
        self.assertEqual(self.balance(), Decimal('9.9410'))

        params = mock_get.call_args.kwargs['params']
        self.assertEqual(params['action'], 'send-sms')
        self.assertEqual(params['api_key'], 'reseller-test-key')
        self.assertEqual(params['to'], '233241234567')
        self.assertEqual(params['from'], 'TestSend')
        self.assertEqual(params['sms'], 'Hello there')

        sms = SmsMessage.objects.get()
        self.assertEqual(sms.status, SmsMessage.STATUS_SENT)
        self.assertEqual(sms.api_key_id, self.key.id)

    @patch(PROVIDER_GET)
    def test_two_digit_sender_is_invalid_format(self, mock_get):
        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': '12'})

        self.assertError(response, 400, 'INVALID_SENDER_ID_FORMAT')
        mock_get.assert_not_called()
        self.assertEqual(self.balance(), Decimal('10'))

    @patch(PROVIDER_GET)
    def test_missing_sender(self, mock_get):
        response = self.send({'to': '0241234567', 'message': 'Hi'})

        self.assertError(response, 400, 'MISSING_SENDER_ID')
        mock_get.assert_not_called()

    @patch(PROVIDER_GET)
    def test_unapproved_sender_is_forbidden(self, mock_get):
        other = make_user(email='other@example.com')
        make_api_key(other)
        make_sender(other, 'TestSend', status=SenderID.STATUS_PENDING)
        fund(other, '10')
        api = APIClient()
        api.credentials(HTTP_X_API_KEY=other.api_keys.get().key)

        response = api.post(SEND_URL, {'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'}, format='json')

        self.assertError(response, 403, 'INVALID_SENDER_ID')
        mock_get.assert_not_called()
        self.assertFalse(SmsMessage.objects.exists())

    @patch(PROVIDER_GET)
    def test_someone_elses_approved_sender_is_forbidden(self, mock_get):
        make_sender(make_user(email='brand@example.com'), 'OtherBrand', status=SenderID.STATUS_APPROVED)

        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'OtherBrand'})

        self.assertError(response, 403, 'INVALID_SENDER_ID')
        mock_get.assert_not_called()

    @patch(PROVIDER_GET)
    def test_missing_parameters_checked_before_sender(self, mock_get):
        response = self.send({'message': 'Hi', 'from': '12'})
        self.assertError(response, 400, 'MISSING_PARAMETERS')

    @patch(PROVIDER_GET)
    def test_invalid_phone(self, mock_get):
        response = self.send({'to': 'not-a-number', 'message': 'Hi', 'from': 'TestSend'})
        self.assertError(response, 400, 'INVALID_PHONE_NUMBER')
        self.assertEqual(self.balance(), Decimal('10'))

    @patch(PROVIDER_GET)
    def test_insufficient_balance(self, mock_get):
        Wallet.objects.filter(user=self.user).update(balance=Decimal('0.01'))

        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'})

        self.assertError(response, 400, 'INSUFFICIENT_BALANCE')
        mock_get.assert_not_called()
        self.assertEqual(self.balance(), Decimal('0.01'))
        self.assertFalse(SmsMessage.objects.exists())

    @patch(PROVIDER_GET)
    def test_provider_rejection_refunds(self, mock_get):
        mock_get.return_value = provider_response({'code': '102', 'message': 'Insufficient balance'})

        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'})

        self.assertError(response, 502, 'UPSTREAM_ERROR')
        self.assertEqual(self.balance(), Decimal('10'))
        sms = SmsMessage.objects.get()
        self.assertEqual(sms.status, SmsMessage.STATUS_FAILED)
        debit = WalletTransaction.objects.get(tx_type='debit')
        self.assertEqual(debit.status, 'reversed')
        refund = WalletTransaction.objects.get(tx_type='refund')
        self.assertEqual(refund.amount, debit.amount)

    @patch(PROVIDER_GET)
    def test_provider_timeout_refunds(self, mock_get):
        mock_get.side_effect = requests.Timeout('read timed out')

        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'})

        self.assertError(response, 504, 'UPSTREAM_TIMEOUT')
        self.assertEqual(self.balance(), Decimal('10'))
        self.assertEqual(mock_get.call_count, 1)

    @patch(PROVIDER_GET)
    def test_long_message_is_charged_per_segment(self, mock_get):
        mock_get.return_value = provider_response()

        response = self.send({'to': '0241234567', 'message': 'x' * 161, 'from': 'TestSend'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['segments'], 2)
        self.assertEqual(self.balance(), Decimal('9.8820'))


class NoOverdraftTest(SmsTestCase):

    @patch(PROVIDER_GET)
    def test_second_send_cannot_overdraw(self, mock_get):
        mock_get.return_value = provider_response()
        Wallet.objects.filter(user=self.user).update(balance=Decimal('0.1'))
        payload = {'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'}

        first = self.send(payload)
        second = self.send(payload)

        self.assertEqual(first.status_code, 200)
        self.assertError(second, 400, 'INSUFFICIENT_BALANCE')
        self.assertEqual(self.balance(), Decimal('0.0410'))
        self.assertEqual(mock_get.call_count, 1)


class BulkSendTest(SmsTestCase):

    @patch(PROVIDER_GET)
    def test_bulk_drops_invalid_numbers(self, mock_get):
        mock_get.return_value = provider_response()

        response = self.send({
            'recipients': ['0241234567', 'bad', '+233201234567', '0241234567'],
            'message': 'Promo',
            'from': 'TestSend',
        }, url=BULK_URL)

        self.assertEqual(response.status_code, 200, response.content)
        data = response.json()['data']
        self.assertEqual(data['recipients'], 2)
        self.assertEqual(data['invalid_recipients'], ['bad'])
        self.assertEqual(Decimal(data['cost']), Decimal('0.118'))
        self.assertEqual(mock_get.call_args.kwargs['params']['to'], '233241234567,233201234567')

    @patch(PROVIDER_GET)
    def test_bulk_without_valid_numbers(self, mock_get):
        response = self.send({'recipients': ['bad', '12'], 'message': 'Promo', 'from': 'TestSend'}, url=BULK_URL)

        self.assertError(response, 400, 'NO_VALID_RECIPIENTS')
        mock_get.assert_not_called()

    @patch(PROVIDER_GET)
    def test_bulk_needs_bulk_scope(self, mock_get):
        self.api.credentials(HTTP_X_API_KEY=make_api_key(self.user, permissions=['sms:send']).key)

        response = self.send({'recipients': ['0241234567'], 'message': 'Promo', 'from': 'TestSend'}, url=BULK_URL)

        self.assertError(response, 403, 'INSUFFICIENT_PERMISSIONS')


class ApiKeyAuthTest(SmsTestCase):

    def test_missing_key(self):
        self.api.credentials()
        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'})
        self.assertError(response, 401, 'UNAUTHORIZED')

    def test_unknown_key(self):
        self.api.credentials(HTTP_X_API_KEY='msk_live_doesnotexist')
        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'})
        self.assertError(response, 401, 'UNAUTHORIZED')

    def test_revoked_key(self):
        self.key.is_active = False
        self.key.save(update_fields=['is_active'])
        response = self.api.get('/api/client/v1/wallet/balance')
        self.assertError(response, 401, 'UNAUTHORIZED')

    def test_family_wildcard_grants_scope(self):
        self.api.credentials(HTTP_X_API_KEY=make_api_key(self.user, permissions=['wallet:*']).key)
        response = self.api.get('/api/client/v1/wallet/balance')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['balance'], '10.0000')

    def test_scope_missing(self):
        self.api.credentials(HTTP_X_API_KEY=make_api_key(self.user, permissions=['sms:send']).key)
        response = self.api.get('/api/client/v1/wallet/balance')
        self.assertError(response, 403, 'INSUFFICIENT_PERMISSIONS')


class ClientReadEndpointsTest(SmsTestCase):

    @patch(PROVIDER_GET)
    def test_status_and_history(self, mock_get):
        mock_get.return_value = provider_response()
        message_id = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'}).json()['data']['message_id']

        response = self.api.get(f'/api/client/v1/sms/status/{message_id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['status'], 'SENT')

        response = self.api.get('/api/client/v1/sms/history')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['pagination']['total'], 1)

    def test_calculate_cost(self):
        response = self.api.post('/api/client/v1/sms/calculate-cost', {'message': 'x' * 200, 'recipients': 3}, format='json')
        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['segments'], 2)
        self.assertEqual(Decimal(data['total_cost']), Decimal('0.354'))

    def test_sender_ids_lists_only_approved(self):
        make_sender(self.user, 'Pending1')
        response = self.api.get('/api/client/v1/sender-ids')
        self.assertEqual(response.status_code, 200)
        self.assertEqual([s['sender_id'] for s in response.json()['data']], ['TestSend'])

    def test_wallet_transactions(self):
        response = self.api.get('/api/client/v1/wallet/transactions')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'][0]['tx_type'], 'topup')


class UnexpectedFailureTest(SmsTestCase):

    @patch(PROVIDER_GET)
    def test_non_object_provider_body_refunds(self, mock_get):
        mock_get.return_value = provider_response([])

        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'})

        self.assertError(response, 502, 'UPSTREAM_ERROR')
        self.assertEqual(self.balance(), Decimal('10'))
        self.assertEqual(SmsMessage.objects.get().status, SmsMessage.STATUS_FAILED)

    @patch(PROVIDER_GET)
    def test_unexpected_error_after_reservation_refunds(self, mock_get):
        mock_get.side_effect = ValueError('malformed url')

        response = self.send({'to': '0241234567', 'message': 'Hi', 'from': 'TestSend'})

        self.assertError(response, 500, 'INTERNAL_ERROR')
        self.assertEqual(self.balance(), Decimal('10'))
        sms = SmsMessage.objects.get()
        self.assertEqual(sms.status, SmsMessage.STATUS_FAILED)
        self.assertIn('ValueError', sms.error_message)
        self.assertEqual(WalletTransaction.objects.get(tx_type='debit').status, 'reversed')

    @patch(PROVIDER_GET)
    def test_message_must_be_text(self, mock_get):
        response = self.send({'to': '0241234567', 'message': 12345, 'from': 'TestSend'})

        self.assertError(response, 400, 'VALIDATION_ERROR')
        mock_get.assert_not_called()
        self.assertEqual(self.balance(), Decimal('10'))

    @patch(PROVIDER_GET)
    def test_bulk_message_must_be_text(self, mock_get):
        response = self.send({'recipients': ['0241234567'], 'message': ['Hi'], 'from': 'TestSend'}, url=BULK_URL)
        self.assertError(response, 400, 'VALIDATION_ERROR')
        mock_get.assert_not_called()

    @patch(PROVIDER_GET)
    def test_bulk_non_text_recipients_are_invalid(self, mock_get):
        mock_get.return_value = provider_response()

        response = self.send({
            'recipients': [233241234567, '0201234567'],
            'message': 'Promo',
            'from': 'TestSend',
        }, url=BULK_URL)

        self.assertEqual(response.status_code, 200, response.content)
        data = response.json()['data']
        self.assertEqual(data['recipients'], 1)
        self.assertEqual(data['invalid_recipients'], ['233241234567'])
        self.assertEqual(mock_get.call_args.kwargs['params']['to'], '233201234567')

    @patch(PROVIDER_GET)
    def test_single_non_text_recipient(self, mock_get):
        response = self.send({'to': 233241234567, 'message': 'Hi', 'from': 'TestSend'})
        self.assertError(response, 400, 'INVALID_PHONE_NUMBER')
        mock_get.assert_not_called()
