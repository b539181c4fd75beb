# services/order_ledger.py
"""
Purchase state machine.

     PENDING -> COMPLETED
     PENDING -> FAILED

COMPLETED and FAILED are terminal for a gateway order. A new order for the
same buyer/item (``create_or_get_pending_order``) starts a fresh attempt on
the same row with a new order_id; that is the only way back to PENDING and
it is never allowed once the purchase is COMPLETED.
"""
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError

from config import logger
from models import Purchase, PurchaseStatus
from .catalog import BlogCatalog, PurchasableItem
from .errors import (
     AlreadyPurchased,
     IllegalPurchaseTransition,
     ItemNotFound,
     ItemNotPurchasable,
     OrderAlreadyFailed,
)
from .repositories import PurchaseRepository


@dataclass(frozen=True)
class OrderHandle:
     buyer_id: str
     item: PurchasableItem
     amount: int
     currency: str
     existing_purchase_id: Optional[str] = None


def check_purchasable(
     catalog: BlogCatalog,
     purchases: PurchaseRepository,
     buyer_id: str,
     item_id: str,
     currency: str,
) -> OrderHandle:
     """Validate that buyer_id may buy item_id and snapshot its current price."""
     item = catalog.get_purchasable_item(item_id)
     if item is None:
          raise ItemNotFound(f"Item {item_id} not found")
     if not item.is_purchasable:
          raise ItemNotPurchasable("This item is free or has no valid price and cannot be purchased")

     existing = purchases.get_for_buyer_item(buyer_id, item_id)
     if existing is not None and existing.status == PurchaseStatus.COMPLETED:
          raise AlreadyPurchased("You have already purchased this item")

     return OrderHandle(
          buyer_id=buyer_id,
          item=item,
          amount=item.price,
          currency=currency,
          existing_purchase_id=existing.id if existing else None,
     )


def create_or_get_pending_order(purchases: PurchaseRepository, handle: OrderHandle, order_id: str) -> Purchase:
     """
     Record ``order_id`` as the buyer's PENDING purchase of the item.

     Reuses the existing (buyer, item) row when there is one. If a concurrent
     request inserts the row first, the unique constraint rejects our insert
     and we fall back to reusing theirs.
     """
     if handle.existing_purchase_id is None:
          try:
               purchase = purchases.add(
                    Purchase(
                         buyer_id=handle.buyer_id,
                         item_id=handle.item.id,
                         order_id=order_id,
                         amount=handle.amount,
                         currency=handle.currency,
                         status=PurchaseStatus.PENDING,
                    )
               )
               logger.info(f"Created pending purchase {purchase.id} for order {order_id}")
               return purchase
          except IntegrityError:
               # Only the insert has run in this transaction
               purchases.db.rollback()
               logger.info(f"Concurrent order for buyer {handle.buyer_id}, item {handle.item.id}; reusing row")

     existing = purchases.get_for_buyer_item(handle.buyer_id, handle.item.id)
     if existing is None:
          raise IllegalPurchaseTransition("Purchase row disappeared while reopening order")
     if purchases.reopen(existing.id, order_id, handle.amount, handle.currency) != 1:
          raise AlreadyPurchased("You have already purchased this item")
     purchase = purchases.refresh(existing)
     logger.info(f"Reusing purchase {purchase.id} with new order {order_id}")
     return purchase


def mark_completed(purchases: PurchaseRepository, purchase: Purchase, payment_id: str, signature: Optional[str]) -> bool:
     """
     PENDING -> COMPLETED.

     Returns True if this call performed the transition, False if the purchase
     was already COMPLETED (idempotent retry or a concurrent winner).

     Raises:
          OrderAlreadyFailed: the purchase is FAILED
     """
     won = purchases.transition(
          purchase.id,
          PurchaseStatus.PENDING,
          PurchaseStatus.COMPLETED,
          payment_id=payment_id,
          signature=signature,
     )
     purchases.refresh(purchase)
     if won:
          return True
     if purchase.status == PurchaseStatus.COMPLETED:
          return False
     raise OrderAlreadyFailed("This payment attempt failed; create a new order to retry")


def mark_failed(purchases: PurchaseRepository, purchase: Purchase) -> bool:
     """
     PENDING -> FAILED.

     Returns True if this call performed the transition, False if the purchase
     was already FAILED.

     Raises:
          IllegalPurchaseTransition: the purchase is COMPLETED
     """
     won = purchases.transition(purchase.id, PurchaseStatus.PENDING, PurchaseStatus.FAILED)
     purchases.refresh(purchase)
     if won:
          return True
     if purchase.status == PurchaseStatus.FAILED:
          return False
     raise IllegalPurchaseTransition(f"Purchase {purchase.id} is COMPLETED and cannot be marked FAILED")
