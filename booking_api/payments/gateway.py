"""Minimal Cashfree PG client for opening payment sessions."""

import json
import logging
import uuid
from typing import Any, Dict, List, Optional

import httpx

from booking_api.config import Settings

logger = logging.getLogger(__name__)


class PaymentGatewayError(RuntimeError):
    """Raised when the payment gateway fails, times out or answers nonsense."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_body = error_body


class CashfreeClient:
    """Thin client for the Cashfree orders API"""

    def __init__(
        self,
        *,
        app_id: str,
        secret_key: str,
        base_url: str = "https://sandbox.cashfree.com/pg",
        api_version: str = "2022-09-01",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._app_id = app_id
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.BaseTransport] = None) -> "CashfreeClient":
        return cls(
            app_id=settings.PAYMENT_APP_ID,
            secret_key=settings.PAYMENT_SECRET_KEY,
            base_url=settings.PAYMENT_BASE_URL,
            api_version=settings.PAYMENT_API_VERSION,
            timeout=settings.PAYMENT_TIMEOUT_SECONDS,
            transport=transport,
        )

    def create_order(
        self,
        *,
        order_id: str,
        amount: float,
        currency: str,
        customer_id: str,
        customer_email: str,
        customer_phone: str,
        note: str = "Booking payment",
    ) -> Dict[str, Any]:
        """Create an order and return the gateway payload, including ``payment_session_id``"""
        body = {
            "order_id": order_id,
            "order_amount": amount,
            "order_currency": currency,
            "order_note": note,
            "customer_details": {
                "customer_id": customer_id,
                "customer_email": customer_email,
                "customer_phone": customer_phone,
            },
        }
        data = self.request("POST", "/orders", json_body=body)
        if not data.get("payment_session_id"):
            logger.error("Cashfree order %s response has no payment_session_id", order_id)
            raise PaymentGatewayError("Payment gateway did not return a session id", error_body=data)
        return data

    def request(self, method: str, path: str, *, json_body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self._app_id or not self._secret_key:
            raise PaymentGatewayError("Payment gateway credentials are not configured")

        url = f"{self._base_url}{path}"
        headers = {
            "Accept": "application/json",
            "x-client-id": self._app_id,
            "x-client-secret": self._secret_key,
            "x-api-version": self._api_version,
        }
        with httpx.Client(timeout=self._timeout, transport=self._transport, headers=headers) as client:
            try:
                response = client.request(method, url, json=json_body)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                try:
                    error_payload: Any = exc.response.json()
                except json.JSONDecodeError:
                    error_payload = exc.response.text
                logger.error("Cashfree API error %s for %s %s: %s", status, method, path, exc.response.text[:500])
                raise PaymentGatewayError(
                    f"Payment gateway responded with status {status}",
                    status_code=status,
                    error_body=error_payload,
                ) from exc
            except httpx.TimeoutException as exc:
                logger.error("Cashfree request timed out for %s %s", method, path)
                raise PaymentGatewayError("Payment gateway timed out") from exc
            except httpx.RequestError as exc:
                logger.error("Cashfree request failure for %s %s: %s", method, path, str(exc))
                raise PaymentGatewayError("Failed to reach payment gateway") from exc

        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON from Cashfree for %s %s", method, path)
            raise PaymentGatewayError("Received malformed JSON from payment gateway") from exc
        if not isinstance(payload, dict):
            raise PaymentGatewayError("Received malformed JSON from payment gateway", error_body=payload)
        return payload


class FakePaymentGateway(CashfreeClient):
    """In-memory stand-in that records orders instead of calling Cashfree"""

    def __init__(self, fail_with: Optional[str] = None):
        super().__init__(app_id="fake", secret_key="fake")
        self.fail_with = fail_with
        self.orders: List[Dict[str, Any]] = []

    def create_order(self, **order: Any) -> Dict[str, Any]:
        if self.fail_with:
            raise PaymentGatewayError(self.fail_with)
        self.orders.append(order)
        return {
            "order_id": order["order_id"],
            "order_status": "ACTIVE",
            "payment_session_id": f"session_{uuid.uuid4().hex}",
        }
