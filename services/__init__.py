# services/__init__.py
from .payments_service import PaymentsService, Receipt, build_payments_service
from .ledger_service import get_or_create_wallet, credit_wallet, reconcile_wallet
from .signature import verify_signature, verify_webhook_signature
from .split_calculator import calculate_split, RevenueSplit

__all__ = [
     "PaymentsService",
     "Receipt",
     "build_payments_service",
     "get_or_create_wallet",
     "credit_wallet",
     "reconcile_wallet",
     "verify_signature",
     "verify_webhook_signature",
     "calculate_split",
     "RevenueSplit",
]
