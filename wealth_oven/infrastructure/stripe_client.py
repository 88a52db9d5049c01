"""
Stripe REST client

Thin httpx wrapper over the endpoints the marketplace uses: setup intents
(card saved for a bid), payment intents (buy-now / direct sale) and refunds.
Stripe takes form-encoded bodies with bracketed keys for nested fields.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from wealth_oven.core.config import get_settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Stripe call failed (transport error or non-2xx response)"""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


def encode_form(data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """
    Flatten a nested dict into Stripe form fields

    {"metadata": {"buyer_id": "u1"}} -> {"metadata[buyer_id]": "u1"}
    """
    fields = {}
    for key, value in data.items():
        if value is None:
            continue
        name = f"{prefix}[{key}]" if prefix else key
        if isinstance(value, dict):
            fields.update(encode_form(value, name))
        elif isinstance(value, bool):
            fields[name] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                fields[f"{name}[{index}]"] = str(item)
        else:
            fields[name] = str(value)
    return fields


class StripeClient:
    """Synchronous Stripe API client"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = get_settings()
        self.http_client = httpx.Client(
            base_url=api_base or settings.STRIPE_API_BASE,
            timeout=httpx.Timeout(timeout or settings.STRIPE_TIMEOUT_SECONDS),
            headers={"Authorization": f"Bearer {secret_key or settings.STRIPE_SECRET_KEY}"},
            transport=transport,
        )

    def close(self) -> None:
        self.http_client.close()

    def _request(self, method: str, path: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Send a request and return the decoded JSON object

        Raises:
            PaymentGatewayError: On transport errors and 4xx/5xx responses
        """
        try:
            response = self.http_client.request(
                method,
                path,
                data=encode_form(data) if data else None,
            )
        except httpx.HTTPError as e:
            logger.error(f"Stripe {method} {path} failed: {e}")
            raise PaymentGatewayError(f"Payment provider unreachable: {e}") from e

        if response.status_code >= 400:
            try:
                error = response.json().get("error", {})
            except ValueError:
                error = {}
            logger.error(
                f"Stripe {method} {path} returned {response.status_code}: {error.get('message')}",
                extra={"status_code": response.status_code},
            )
            raise PaymentGatewayError(
                error.get("message") or f"Payment provider returned {response.status_code}",
                status_code=response.status_code,
                code=error.get("code"),
            )

        return response.json()

    # ==================== Setup intents ====================

    def create_setup_intent(self, metadata: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/v1/setup_intents",
            {"usage": "off_session", "payment_method_types": ["card"], "metadata": metadata or {}},
        )

    def retrieve_setup_intent(self, setup_intent_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/v1/setup_intents/{setup_intent_id}")

    # ==================== Payment intents ====================

    def create_payment_intent(
        self,
        amount_cents: int,
        currency: str,
        metadata: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/v1/payment_intents",
            {
                "amount": amount_cents,
                "currency": currency,
                "automatic_payment_methods": {"enabled": True},
                "metadata": metadata or {},
            },
        )

    def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/v1/payment_intents/{payment_intent_id}")

    def confirm_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/v1/payment_intents/{payment_intent_id}/confirm")

    # ==================== Refunds ====================

    def create_refund(self, payment_intent_id: str) -> Dict[str, Any]:
        return self._request("POST", "/v1/refunds", {"payment_intent": payment_intent_id})
