# services/errors.py
"""
Payment error taxonomy.

Every error carries the HTTP status it maps to, a stable machine-readable
``code`` and whether the client should simply retry. Clients need to tell
"payment invalid, try again" apart from "already purchased" and from
"temporarily unavailable".
"""
from fastapi import status


class PaymentError(Exception):
     status_code: int = status.HTTP_400_BAD_REQUEST
     code: str = "payment_error"
     retryable: bool = False

     def __init__(self, message: str, status_code: int = None):
          super().__init__(message)
          self.message = message
          if status_code is not None:
               self.status_code = status_code

     def to_dict(self) -> dict:
          return {"detail": self.message, "code": self.code, "retryable": self.retryable}


# Validation errors
class ItemNotFound(PaymentError):
     status_code = status.HTTP_404_NOT_FOUND
     code = "item_not_found"


class ItemNotPurchasable(PaymentError):
     code = "item_not_purchasable"


class OrderNotFound(PaymentError):
     status_code = status.HTTP_404_NOT_FOUND
     code = "order_not_found"


# Conflict errors
class AlreadyPurchased(PaymentError):
     status_code = status.HTTP_409_CONFLICT
     code = "already_purchased"


class OrderOwnershipMismatch(PaymentError):
     status_code = status.HTTP_403_FORBIDDEN
     code = "order_ownership_mismatch"


class OrderAlreadyFailed(PaymentError):
     status_code = status.HTTP_409_CONFLICT
     code = "order_failed"


class IllegalPurchaseTransition(PaymentError):
     status_code = status.HTTP_409_CONFLICT
     code = "illegal_purchase_transition"


# Integrity errors
class InvalidSignature(PaymentError):
     code = "invalid_signature"


class InvalidWebhookSignature(PaymentError):
     code = "invalid_webhook_signature"


# Upstream / configuration errors
class PaymentGatewayUnavailable(PaymentError):
     status_code = status.HTTP_503_SERVICE_UNAVAILABLE
     code = "gateway_unavailable"
     retryable = True


class PaymentNotConfigured(PaymentError):
     status_code = status.HTTP_503_SERVICE_UNAVAILABLE
     code = "payments_not_configured"
     retryable = True


# Internal / ledger errors
class SplitCalculationError(PaymentError):
     status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
     code = "split_calculation_error"


class LedgerError(PaymentError):
     """The verification transaction was rolled back; re-submitting is safe."""
     status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
     code = "ledger_error"
     retryable = True
