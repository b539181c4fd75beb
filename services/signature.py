# services/signature.py
"""
Gateway signature verification.

Razorpay signs a checkout callback as hex(HMAC-SHA256(key_secret,
"{order_id}|{payment_id}")) and a webhook delivery as
hex(HMAC-SHA256(webhook_secret, raw_body)). Both are compared in constant time.
"""
import hashlib
import hmac
from typing import Union


def compute_signature(order_id: str, payment_id: str, secret: str) -> str:
     """Hex HMAC-SHA256 of ``order_id|payment_id``."""
     payload = f"{order_id}|{payment_id}"
     return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
     """
     Check a checkout callback signature.

     Returns False on any mismatch. Raises TypeError/ValueError only for
     malformed input (non-string arguments or an empty secret).
     """
     for name, value in (("order_id", order_id), ("payment_id", payment_id), ("signature", signature), ("secret", secret)):
          if not isinstance(value, str):
               raise TypeError(f"{name} must be a str, got {type(value).__name__}")
     if not secret:
          raise ValueError("secret must not be empty")

     expected = compute_signature(order_id, payment_id, secret)
     return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def compute_webhook_signature(body: Union[bytes, str], secret: str) -> str:
     if isinstance(body, str):
          body = body.encode("utf-8")
     return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_webhook_signature(body: Union[bytes, str], signature: str, secret: str) -> bool:
     """Check the X-Razorpay-Signature header against the raw request body."""
     if not secret:
          raise ValueError("secret must not be empty")
     if not signature:
          return False
     expected = compute_webhook_signature(body, secret)
     return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
