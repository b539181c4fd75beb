# models/__init__.py
from .base import Base
from .blog import Blog
from .purchase import Purchase, PurchaseStatus
from .wallet import Wallet
from .transaction import Transaction, TransactionType, TransactionStatus

__all__ = [
     "Base",
     "Blog",
     "Purchase",
     "PurchaseStatus",
     "Wallet",
     "Transaction",
     "TransactionType",
     "TransactionStatus",
]
