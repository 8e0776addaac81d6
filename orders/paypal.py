"""PayPal REST client used to verify checkout payments.

Only the two calls needed to confirm a captured PayPal order are implemented:
an OAuth client-credentials token and an order lookup.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from urllib.parse import quote

import requests
from django.conf import settings


logger = logging.getLogger(__name__)

# PayPal order ids are upper-case letters, digits and dashes.
TRANSACTION_ID_PATTERN = r"^[A-Z0-9-]+$"
TRANSACTION_ID_RE = re.compile(TRANSACTION_ID_PATTERN)


class PaymentGatewayError(Exception):
    """The gateway could not be reached or answered with something unusable."""


@dataclass(frozen=True)
class GatewayVerification:
    verified: bool
    amount: Decimal | None
    status: str = ''
    transaction_id: str = ''


class PayPalClient:
    """Minimal PayPal Orders v2 client.

    A new access token is requested for every verification; nothing is
    cached between calls.
    """

    def __init__(self, client_id: str, app_secret: str, api_url: str, timeout: float = 10):
        self.client_id = client_id
        self.app_secret = app_secret
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout

    def get_access_token(self) -> str:
        try:
            resp = requests.post(
                f"{self.api_url}/v1/oauth2/token",
                auth=(self.client_id, self.app_secret),
                data={'grant_type': 'client_credentials'},
                headers={'Accept': 'application/json', 'Accept-Language': 'en_US'},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            token = resp.json()['access_token']
        except requests.RequestException as exc:
            logger.error("PayPal token request failed: %s", exc)
            raise PaymentGatewayError('Failed to get PayPal access token.') from exc
        except (ValueError, KeyError) as exc:
            raise PaymentGatewayError('Malformed PayPal token response.') from exc
        return token

    def verify_transaction(self, transaction_id: str) -> GatewayVerification:
        """Look up a PayPal order and report whether it is COMPLETED and for how much.

        ``transaction_id`` on the result is the id PayPal reports for the order,
        not the one that was asked for.
        """
        access_token = self.get_access_token()
        try:
            resp = requests.get(
                f"{self.api_url}/v2/checkout/orders/{quote(transaction_id, safe='')}",
                headers={
                    'Content-Type': 'application/json',
                    'Authorization': f'Bearer {access_token}',
                },
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("PayPal order lookup failed for %s: %s", transaction_id, exc)
            raise PaymentGatewayError('Failed to verify payment.') from exc

        if resp.status_code == 404:
            return GatewayVerification(verified=False, amount=None, status='NOT_FOUND')
        try:
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            logger.error("PayPal order lookup for %s returned %s", transaction_id, resp.status_code)
            raise PaymentGatewayError('Failed to verify payment.') from exc
        except ValueError as exc:
            raise PaymentGatewayError('Malformed PayPal order response.') from exc

        status = str(data.get('status') or '')
        try:
            amount = Decimal(str(data['purchase_units'][0]['amount']['value']))
        except (KeyError, IndexError, TypeError, InvalidOperation):
            amount = None
        return GatewayVerification(
            verified=status == 'COMPLETED',
            amount=amount,
            status=status,
            transaction_id=str(data.get('id') or ''),
        )


def get_gateway() -> PayPalClient:
    """Build the gateway client from ``settings.PAYPAL``."""
    conf = settings.PAYPAL
    return PayPalClient(
        client_id=conf['CLIENT_ID'],
        app_secret=conf['APP_SECRET'],
        api_url=conf['API_URL'],
        timeout=conf.get('TIMEOUT', 10),
    )
