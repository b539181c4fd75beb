# models/transaction.py
"""
Transaction model - append-only ledger entry against a wallet.

Rows are inserted inside the payment verification transaction and are never
updated or deleted. The sum of a wallet's transactions equals its balance.
"""
import enum
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum, JSON, UniqueConstraint, func
from sqlalchemy.orm import relationship
from .base import Base, new_id


class TransactionType(str, enum.Enum):
     EARNING = "EARNING"            # creator share of a sale
     PLATFORM_FEE = "PLATFORM_FEE"  # platform share of a sale


class TransactionStatus(str, enum.Enum):
     COMPLETED = "COMPLETED"


class Transaction(Base):
     """Immutable balance-affecting event. One row per (wallet, purchase, type)."""
     __tablename__ = "transactions"
     __table_args__ = (
          # A purchase can credit a given wallet at most once per type
          UniqueConstraint("wallet_id", "reference_id", "type", name="uq_transactions_wallet_reference_type"),
     )

     id = Column(String(36), primary_key=True, default=new_id)
     wallet_id = Column(
          String(36),
          ForeignKey("wallets.id", ondelete="RESTRICT"),
          nullable=False,
          index=True
     )
     reference_id = Column(
          String(36),
          ForeignKey("purchases.id", ondelete="RESTRICT"),
          nullable=False,
          index=True
     )

     amount = Column(Integer, nullable=False)
     type = Column(
          Enum(TransactionType, name="transaction_type", create_constraint=True),
          nullable=False,
          index=True
     )
     status = Column(
          Enum(TransactionStatus, name="transaction_status", create_constraint=True),
          default=TransactionStatus.COMPLETED,
          nullable=False
     )
     details = Column("metadata", JSON, nullable=False, default=dict)  # {itemId, buyerId, description, ...}

     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     wallet = relationship("Wallet", back_populates="transactions")
     purchase = relationship("Purchase", back_populates="transactions")

     def __repr__(self):
          return f"<Transaction(id={self.id}, type='{self.type.value}', amount={self.amount}, reference_id={self.reference_id})>"
