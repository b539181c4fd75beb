# models/purchase.py
import enum
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from .base import Base, new_id


class PurchaseStatus(str, enum.Enum):
     """Lifecycle of a purchase: PENDING -> COMPLETED or PENDING -> FAILED."""
     PENDING = "PENDING"
     COMPLETED = "COMPLETED"
     FAILED = "FAILED"


class Purchase(Base):
     """
     Purchase model - one buyer's attempt to acquire one priced item.

     At most one row exists per (buyer_id, item_id). ``amount`` is in the
     smallest currency unit (paise) and is snapshotted from the item's price
     when the gateway order is opened.
     """
     __tablename__ = "purchases"
     __table_args__ = (
          UniqueConstraint("buyer_id", "item_id", name="uq_purchases_buyer_item"),
     )

     id = Column(String(36), primary_key=True, default=new_id)
     buyer_id = Column(String(64), nullable=False, index=True)
     item_id = Column(
          String(36),
          ForeignKey("blogs.id", ondelete="RESTRICT"),
          nullable=False,
          index=True
     )

     # Gateway references
     order_id = Column(String(64), nullable=True, unique=True, index=True)
     payment_id = Column(String(64), nullable=True)
     signature = Column(String(128), nullable=True)

     amount = Column(Integer, nullable=False)
     currency = Column(String(3), nullable=False, default="INR")
     status = Column(
          Enum(PurchaseStatus, name="purchase_status", create_constraint=True),
          default=PurchaseStatus.PENDING,
          nullable=False,
          index=True
     )

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)
     updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

     # Relationships
     item = relationship("Blog", back_populates="purchases")
     transactions = relationship("Transaction", back_populates="purchase")

     def __repr__(self):
          return f"<Purchase(id={self.id}, order_id={self.order_id}, amount={self.amount}, status='{self.status.value}')>"

     @property
     def is_terminal(self) -> bool:
          return self.status in (PurchaseStatus.COMPLETED, PurchaseStatus.FAILED)
