import re
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from config.exceptions import ValidationError
from otp.models import OTPRequest
from otp.services import render_message
from senders.models import SenderID
from tests.factories import fund, make_api_key, make_sender, make_user, provider_response
from wallet.models import Wallet

GENERATE_URL = '/api/client/v1/otp/generate'
VERIFY_URL = '/api/client/v1/otp/verify'
PHONE = '0241234567'


class OTPApiTest(TestCase):

    def setUp(self):
        self.api = APIClient()
        self.user = make_user()
        self.api.credentials(HTTP_X_API_KEY=make_api_key(self.user).key)
        make_sender(self.user, 'TestSend', status=SenderID.STATUS_APPROVED)
        fund(self.user, '1')
        patcher = patch('gateway.arkesel.requests.get', return_value=provider_response())
        self.mock_get = patcher.start()
        self.addCleanup(patcher.stop)

    def generate(self, **extra):
        payload = {'phone_number': PHONE, 'sender_id': 'TestSend', **extra}
        return self.api.post(GENERATE_URL, payload, format='json')

    def sent_code(self):
        message = self.mock_get.call_args.kwargs['params']['sms']
        return re.search(r'\b(\d{6})\b', message).group(1)

    def verify(self, code, phone=PHONE):
        return self.api.post(VERIFY_URL, {'phone_number': phone, 'code': code}, format='json')

    def test_generate_sends_and_charges(self):
        response = self.generate(reference_id='order-42')

        self.assertEqual(response.status_code, 201, response.content)
        data = response.json()['data']
        self.assertEqual(data['phone'], '+233241234567')
        self.assertEqual(data['status'], 'sent')
        self.assertEqual(data['reference_id'], 'order-42')
        self.assertNotIn('code', data)
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal('0.9410'))

        otp_req = OTPRequest.objects.get()
        self.assertNotEqual(otp_req.code_hash, self.sent_code())

    def test_verify_correct_code(self):
        self.generate()
        response = self.verify(self.sent_code())

        self.assertEqual(response.status_code, 200, response.content)
        self.assertTrue(response.json()['data']['verified'])
        otp_req = OTPRequest.objects.get()
        self.assertEqual(otp_req.status, 'verified')
        self.assertIsNotNone(otp_req.verified_at)

    def test_code_cannot_be_reused(self):
        self.generate()
        code = self.sent_code()
        self.verify(code)
        response = self.verify(code)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['code'], 'OTP_NOT_FOUND')

    def test_wrong_code_reports_remaining_attempts(self):
        self.generate()
        wrong = '000000' if self.sent_code() != '000000' else '111111'

        response = self.verify(wrong)

        self.assertEqual(response.status_code, 400)
        error = response.json()['error']
        self.assertEqual(error['code'], 'INVALID_OTP_CODE')
        self.assertEqual(error['details']['attempts_remaining'], 2)

    def test_locked_after_max_attempts(self):
        self.generate()
        code = self.sent_code()
        wrong = '000000' if code != '000000' else '111111'
        for _ in range(3):
            self.verify(wrong)

        response = self.verify(code)

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json()['error']['code'], 'MAX_ATTEMPTS_EXCEEDED')
        self.assertEqual(OTPRequest.objects.get().status, 'failed')

    def test_new_code_expires_previous(self):
        self.generate()
        first = self.sent_code()
        self.generate()
        second = self.sent_code()

        statuses = sorted(OTPRequest.objects.values_list('status', flat=True))
        self.assertEqual(statuses, ['expired', 'sent'])
        if first != second:
            self.assertEqual(self.verify(first).status_code, 400)
        self.assertEqual(self.verify(second).status_code, 200)

    def test_expired_code(self):
        self.generate()
        OTPRequest.objects.update(expires_at=timezone.now() - timedelta(seconds=1))

        response = self.verify(self.sent_code())

        self.assertEqual(response.status_code, 404)
        self.assertEqual(OTPRequest.objects.get().status, 'expired')

    def test_unknown_phone(self):
        response = self.verify('123456', phone='0201112222')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error']['code'], 'OTP_NOT_FOUND')

    def test_unapproved_sender(self):
        make_sender(self.user, 'Pending1')
        response = self.generate(sender_id='Pending1')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error']['code'], 'INVALID_SENDER_ID')
        self.assertFalse(OTPRequest.objects.exists())

    def test_provider_failure_creates_no_otp(self):
        self.mock_get.return_value = provider_response({'code': '102', 'message': 'failed'})
        response = self.generate()
        self.assertEqual(response.status_code, 502)
        self.assertFalse(OTPRequest.objects.exists())
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal('1'))

    def test_custom_length_and_template(self):
        response = self.generate(code_length=4, message_template='Code: {code}')
        self.assertEqual(response.status_code, 201)
        self.assertRegex(self.mock_get.call_args.kwargs['params']['sms'], r'^Code: \d{4}$')


class RenderMessageTest(TestCase):

    def test_template_requires_placeholder(self):
        with self.assertRaises(ValidationError) as ctx:
            render_message('No placeholder here', '123456', 5)
        self.assertEqual(ctx.exception.code, 'INVALID_TEMPLATE')

    def test_default_template(self):
        message = render_message('', '123456', 5)
        self.assertIn('123456', message)
        self.assertIn('5 minutes', message)
