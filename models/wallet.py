# models/wallet.py
from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from .base import Base, new_id


class Wallet(Base):
     """
     Wallet model - one running balance per payee, created lazily on first sale.

     ``balance`` is a cached projection of the wallet's transactions and only
     changes through a ledger credit.
     """
     __tablename__ = "wallets"
     __table_args__ = (
          CheckConstraint("balance >= 0", name="ck_wallets_balance_non_negative"),
     )

     id = Column(String(36), primary_key=True, default=new_id)
     owner_id = Column(String(64), nullable=False, unique=True, index=True)
     balance = Column(Integer, nullable=False, default=0)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     transactions = relationship("Transaction", back_populates="wallet", order_by="Transaction.created_at")

     def __repr__(self):
          return f"<Wallet(id={self.id}, owner_id={self.owner_id}, balance={self.balance})>"
