# services/gateway.py
"""
Razorpay Orders API client.

Only order creation is needed server-side; payment capture happens between
the client and Razorpay, and comes back to us as a signed callback or webhook.
"""
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from config import (
     RAZORPAY_KEY_ID,
     RAZORPAY_KEY_SECRET,
     RAZORPAY_API_BASE,
     GATEWAY_TIMEOUT_SECONDS,
     logger,
)
from .errors import PaymentGatewayUnavailable, PaymentNotConfigured


@dataclass(frozen=True)
class GatewayOrder:
     id: str
     amount: int
     currency: str


class RazorpayGateway:

     def __init__(
          self,
          key_id: str = RAZORPAY_KEY_ID,
          key_secret: str = RAZORPAY_KEY_SECRET,
          base_url: str = RAZORPAY_API_BASE,
          timeout: float = GATEWAY_TIMEOUT_SECONDS,
          session: Optional[requests.Session] = None,
     ):
          self.key_id = key_id
          self.key_secret = key_secret
          self.base_url = base_url.rstrip("/")
          self.timeout = timeout
          self.http = session or requests.Session()

     @property
     def is_configured(self) -> bool:
          return bool(self.key_id and self.key_secret)

     def create_order(self, amount: int, currency: str, receipt: str, notes: Dict[str, str]) -> GatewayOrder:
          """
          Open a gateway order.

          Raises:
               PaymentNotConfigured: API keys are missing
               PaymentGatewayUnavailable: timeout, network error, non-2xx or malformed response
          """
          if not self.is_configured:
               raise PaymentNotConfigured("Payment gateway not configured")

          payload = {
               "amount": amount,
               "currency": currency,
               "receipt": receipt,
               "notes": notes,
          }
          try:
               response = self.http.post(
                    f"{self.base_url}/orders",
                    json=payload,
                    auth=(self.key_id, self.key_secret),
                    timeout=self.timeout,
               )
          except requests.RequestException as e:
               logger.error(f"Razorpay order request failed: {e}")
               raise PaymentGatewayUnavailable("Payment gateway unavailable, please retry") from e

          if response.status_code not in (200, 201):
               logger.error(f"Razorpay order creation returned {response.status_code}: {response.text[:500]}")
               raise PaymentGatewayUnavailable("Failed to create payment order")

          try:
               data = response.json()
               return GatewayOrder(id=str(data["id"]), amount=int(data["amount"]), currency=str(data["currency"]))
          except (ValueError, KeyError, TypeError) as e:
               logger.error(f"Malformed Razorpay order response: {e}")
               raise PaymentGatewayUnavailable("Failed to create payment order") from e
