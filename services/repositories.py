# services/repositories.py
"""
Per-entity repositories over a single SQLAlchemy session.

Repositories flush but never commit: the caller's UnitOfWork owns the
transaction. Status changes and balance changes are issued as single
conditional UPDATE statements so concurrent requests are serialized by the
database rather than by Python read-modify-write.
"""
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, joinedload

from models import Purchase, PurchaseStatus, Wallet, Transaction, TransactionType


class PurchaseRepository:

     def __init__(self, db: Session):
          self.db = db

     def get(self, purchase_id: str) -> Optional[Purchase]:
          return self.db.get(Purchase, purchase_id)

     def get_by_order_id(self, order_id: str, for_update: bool = False) -> Optional[Purchase]:
          stmt = select(Purchase).where(Purchase.order_id == order_id)
          if for_update:
               stmt = stmt.with_for_update()
          return self.db.execute(stmt).scalar_one_or_none()

     def get_for_buyer_item(self, buyer_id: str, item_id: str) -> Optional[Purchase]:
          stmt = select(Purchase).where(Purchase.buyer_id == buyer_id, Purchase.item_id == item_id)
          return self.db.execute(stmt).scalar_one_or_none()

     def add(self, purchase: Purchase) -> Purchase:
          self.db.add(purchase)
          self.db.flush()
          return purchase

     def reopen(self, purchase_id: str, order_id: str, amount: int, currency: str) -> int:
          """Point a non-completed purchase at a fresh gateway order. Returns rows affected."""
          stmt = (
               update(Purchase)
               .where(Purchase.id == purchase_id, Purchase.status != PurchaseStatus.COMPLETED)
               .values(
                    order_id=order_id,
                    amount=amount,
                    currency=currency,
                    status=PurchaseStatus.PENDING,
                    payment_id=None,
                    signature=None,
               )
               .execution_options(synchronize_session=False)
          )
          return self.db.execute(stmt).rowcount

     def transition(self, purchase_id: str, from_status: PurchaseStatus, to_status: PurchaseStatus, **values) -> int:
          """Compare-and-set on ``status``. Returns 1 if this caller won the transition, else 0."""
          stmt = (
               update(Purchase)
               .where(Purchase.id == purchase_id, Purchase.status == from_status)
               .values(status=to_status, **values)
               .execution_options(synchronize_session=False)
          )
          return self.db.execute(stmt).rowcount

     def refresh(self, purchase: Purchase) -> Purchase:
          self.db.refresh(purchase)
          return purchase

     def list_completed_for_buyer(self, buyer_id: str) -> List[Purchase]:
          stmt = (
               select(Purchase)
               .options(joinedload(Purchase.item))
               .where(Purchase.buyer_id == buyer_id, Purchase.status == PurchaseStatus.COMPLETED)
               .order_by(Purchase.created_at.desc())
          )
          return list(self.db.execute(stmt).scalars().all())


class WalletRepository:

     def __init__(self, db: Session):
          self.db = db

     def get_by_owner(self, owner_id: str) -> Optional[Wallet]:
          stmt = select(Wallet).where(Wallet.owner_id == owner_id)
          return self.db.execute(stmt).scalar_one_or_none()

     def add(self, wallet: Wallet) -> Wallet:
          self.db.add(wallet)
          self.db.flush()
          return wallet

     def increment_balance(self, wallet_id: str, delta: int) -> int:
          """Atomic ``balance = balance + delta`` in SQL. Returns rows affected."""
          stmt = (
               update(Wallet)
               .where(Wallet.id == wallet_id)
               .values(balance=Wallet.balance + delta)
               .execution_options(synchronize_session=False)
          )
          return self.db.execute(stmt).rowcount

     def refresh(self, wallet: Wallet) -> Wallet:
          self.db.refresh(wallet)
          return wallet


class TransactionRepository:

     def __init__(self, db: Session):
          self.db = db

     def append(self, entry: Transaction) -> Transaction:
          self.db.add(entry)
          self.db.flush()
          return entry

     def for_reference(self, reference_id: str) -> List[Transaction]:
          stmt = select(Transaction).where(Transaction.reference_id == reference_id)
          return list(self.db.execute(stmt).scalars().all())

     def for_wallet(self, wallet_id: str, type_: Optional[TransactionType] = None) -> List[Transaction]:
          stmt = select(Transaction).where(Transaction.wallet_id == wallet_id)
          if type_ is not None:
               stmt = stmt.where(Transaction.type == type_)
          stmt = stmt.order_by(Transaction.created_at.desc())
          return list(self.db.execute(stmt).scalars().all())

     def sum_for_wallet(self, wallet_id: str) -> int:
          stmt = select(func.coalesce(func.sum(Transaction.amount), 0)).where(Transaction.wallet_id == wallet_id)
          return int(self.db.execute(stmt).scalar_one())
