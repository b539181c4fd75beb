# schemas/__init__.py
from .payment import (
     CreateOrderRequest,
     VerifyPaymentRequest,
     OrderEnvelope,
     VerifyPaymentResponse,
     PurchaseHistoryEnvelope,
     EarningsEnvelope,
     WalletEnvelope,
)

__all__ = [
     "CreateOrderRequest",
     "VerifyPaymentRequest",
     "OrderEnvelope",
     "VerifyPaymentResponse",
     "PurchaseHistoryEnvelope",
     "EarningsEnvelope",
     "WalletEnvelope",
]
