"""
Arkesel SMS provider client (v1 HTTP API).

All sends use the reseller's own ARKESEL_API_KEY; clients never see it.
Sends are never retried: a timed-out request may still have been delivered.
"""

import logging
from dataclasses import dataclass, field

import requests
from django.conf import settings

from config.exceptions import InternalError, UpstreamError, UpstreamTimeout

logger = logging.getLogger(__name__)


@dataclass
class ProviderReceipt:
    reference: str = ''
    balance: str = ''
    raw: dict = field(default_factory=dict)


class ArkeselClient:

    def __init__(self, api_key, base_url, timeout=30, session=None):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests

    @classmethod
    def from_settings(cls):
        return cls(
            api_key=settings.ARKESEL_API_KEY,
            base_url=settings.ARKESEL_BASE_URL,
            timeout=settings.ARKESEL_TIMEOUT,
        )

    @property
    def is_configured(self):
        return bool(self.api_key)

    def ensure_configured(self):
        if not self.is_configured:
            logger.error('ARKESEL_API_KEY is not set; SMS dispatch unavailable')
            raise InternalError('SMS provider is not configured', code='PROVIDER_NOT_CONFIGURED')

    def _get(self, params):
        params = {**params, 'api_key': self.api_key}
        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.Timeout:
            logger.warning(f'Arkesel {params["action"]} timed out after {self.timeout}s')
            raise UpstreamTimeout()
        except requests.RequestException as e:
            logger.error(f'Arkesel {params["action"]} connection error: {type(e).__name__}')
            raise UpstreamError('Could not reach the SMS provider')

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code != 200:
            logger.error(f'Arkesel {params["action"]} HTTP {response.status_code}: {response.text[:200]}')
            raise UpstreamError(f'SMS provider returned HTTP {response.status_code}')
        if not isinstance(data, dict):
            logger.error(f'Arkesel {params["action"]} returned an unexpected body: {response.text[:200]}')
            raise UpstreamError('SMS provider returned an unreadable response')
        return data

    def send_sms(self, recipients, sender, message):
        """Send `message` to a list of E.164 numbers. Returns a ProviderReceipt."""
        data = self._get({
            'action': 'send-sms',
            'to': ','.join(r.lstrip('+') for r in recipients),
            'from': sender,
            'sms': message,
        })
        if data.get('code') != 'ok':
            provider_message = data.get('message') or 'unknown error'
            logger.error(f'Arkesel rejected send from {sender}: {provider_message}')
            raise UpstreamError(
                f'SMS provider rejected the request: {provider_message}',
                extra={'provider_code': str(data.get('code', ''))},
            )

        logger.info(f'Arkesel accepted send from {sender} to {len(recipients)} recipient(s)')
        return ProviderReceipt(
            reference=str(data.get('id') or data.get('message_id') or ''),
            balance=str(data.get('balance', '')),
            raw=data,
        )

    def check_balance(self):
        data = self._get({'action': 'check-balance', 'response': 'json'})
        return {
            'balance': data.get('balance'),
            'user': data.get('user'),
            'country': data.get('country'),
        }
