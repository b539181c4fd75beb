# services/payments_service.py
"""
Payments Service - coordinates the gateway, the purchase state machine and
the wallet ledger.

Flow:
1. create_order: validate the item, open a gateway order, then record a
   PENDING purchase pointing at it (nothing is written if the gateway fails)
2. verify_payment: check ownership and signature, then in ONE database
   transaction mark the purchase COMPLETED, split the amount and credit the
   seller and platform wallets
3. Re-verifying a COMPLETED purchase returns the existing receipt without
   touching any wallet
"""
import time
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from config import (
     PAYMENT_CURRENCY,
     PLATFORM_WALLET_OWNER_ID,
     RAZORPAY_KEY_ID,
     RAZORPAY_KEY_SECRET,
     get_platform_fee_percent,
     logger,
)
from database import UnitOfWork
from models import Purchase, PurchaseStatus, TransactionType
from . import ledger_service, order_ledger
from .catalog import BlogCatalog
from .errors import (
     ItemNotFound,
     InvalidSignature,
     LedgerError,
     OrderAlreadyFailed,
     OrderNotFound,
     OrderOwnershipMismatch,
     PaymentError,
     PaymentGatewayUnavailable,
     PaymentNotConfigured,
)
from .gateway import RazorpayGateway
from .notification_service import EARNING_CREDITED, NotificationService
from .repositories import PurchaseRepository, TransactionRepository, WalletRepository
from .signature import verify_signature
from .split_calculator import calculate_split


@dataclass(frozen=True)
class Receipt:
     purchase_id: str
     order_id: str
     payment_id: Optional[str]
     buyer_id: str
     item_id: str
     seller_id: Optional[str]
     amount: int
     currency: str
     status: str
     creator_share: int
     platform_share: int

     def to_dict(self) -> dict:
          data = asdict(self)
          return {
               "purchaseId": data["purchase_id"],
               "orderId": data["order_id"],
               "paymentId": data["payment_id"],
               "buyerId": data["buyer_id"],
               "itemId": data["item_id"],
               "sellerId": data["seller_id"],
               "amount": data["amount"],
               "currency": data["currency"],
               "status": data["status"],
               "creatorShare": data["creator_share"],
               "platformShare": data["platform_share"],
          }


class PaymentsService:

     def __init__(
          self,
          uow: UnitOfWork,
          gateway: RazorpayGateway,
          notifier: Optional[NotificationService] = None,
          key_id: str = RAZORPAY_KEY_ID,
          key_secret: str = RAZORPAY_KEY_SECRET,
          currency: str = PAYMENT_CURRENCY,
          platform_wallet_owner_id: str = PLATFORM_WALLET_OWNER_ID,
          fee_percent_provider: Callable[[], Decimal] = get_platform_fee_percent,
     ):
          self.uow = uow
          self.gateway = gateway
          self.notifier = notifier or NotificationService()
          self.key_id = key_id
          self.key_secret = key_secret
          self.currency = currency
          self.platform_wallet_owner_id = platform_wallet_owner_id
          self.fee_percent_provider = fee_percent_provider

     # ------------------------------------------------------------------
     # Orders
     # ------------------------------------------------------------------

     def create_order(self, buyer_id: str, item_id: str) -> dict:
          """
          Open a gateway order for item_id and record it as the buyer's PENDING purchase.

          Returns:
               {"id", "amount", "currency", "key_id"} for the checkout widget
          """
          if not self.gateway.is_configured:
               raise PaymentNotConfigured("Payment gateway not configured")

          with self.uow.read() as db:
               handle = order_ledger.check_purchasable(
                    BlogCatalog(db), PurchaseRepository(db), buyer_id, item_id, self.currency
               )

          gateway_order = self.gateway.create_order(
               amount=handle.amount,
               currency=handle.currency,
               receipt=f"receipt_{buyer_id[:5]}_{int(time.time() * 1000)}",
               notes={"buyerId": buyer_id, "itemId": item_id},
          )
          if gateway_order.amount != handle.amount or gateway_order.currency.upper() != handle.currency.upper():
               logger.error(
                    f"Gateway order {gateway_order.id} is for {gateway_order.amount} {gateway_order.currency}, "
                    f"requested {handle.amount} {handle.currency}; not recording it"
               )
               raise PaymentGatewayUnavailable("Payment gateway returned a mismatched order, please retry")

          with self.uow.transaction() as db:
               purchase = order_ledger.create_or_get_pending_order(PurchaseRepository(db), handle, gateway_order.id)
               purchase_id = purchase.id

          logger.info(f"Order {gateway_order.id} opened for buyer {buyer_id}, item {item_id} (purchase {purchase_id})")
          return {
               "id": gateway_order.id,
               "amount": handle.amount,
               "currency": handle.currency,
               "key_id": self.key_id,
          }

     # ------------------------------------------------------------------
     # Verification
     # ------------------------------------------------------------------

     def verify_payment(self, buyer_id: str, order_id: str, payment_id: str, signature: str) -> Receipt:
          """
          Confirm a checkout callback and credit the seller.

          Raises:
               OrderNotFound, OrderOwnershipMismatch, OrderAlreadyFailed,
               InvalidSignature (the purchase is left FAILED),
               LedgerError (nothing was written; re-submitting is safe)
          """
          if not self.key_secret:
               raise PaymentNotConfigured("Payment configuration missing")

          rejected = False
          receipt, credited = None, False
          try:
               with self.uow.transaction() as db:
                    purchases = PurchaseRepository(db)
                    purchase = purchases.get_by_order_id(order_id, for_update=True)
                    if purchase is None:
                         raise OrderNotFound("Order not found")
                    if purchase.buyer_id != buyer_id:
                         raise OrderOwnershipMismatch("Order does not belong to user")

                    if purchase.status == PurchaseStatus.COMPLETED:
                         logger.info(f"Order {order_id} already completed; returning existing receipt")
                         receipt = self._build_receipt(db, purchase)
                    elif purchase.status == PurchaseStatus.FAILED:
                         raise OrderAlreadyFailed("This payment attempt failed; create a new order to retry")
                    elif not verify_signature(order_id, payment_id, signature, self.key_secret):
                         order_ledger.mark_failed(purchases, purchase)
                         rejected = True
                    else:
                         receipt, credited = self._settle(db, purchase, payment_id, signature)
          except PaymentError:
               raise
          except Exception as e:
               logger.exception(f"Ledger failure while verifying order {order_id}; transaction rolled back")
               raise LedgerError("Payment could not be recorded, please re-submit verification") from e

          if rejected:
               logger.warning(f"Invalid payment signature for order {order_id} (buyer {buyer_id}); purchase marked FAILED")
               raise InvalidSignature("Invalid payment signature")

          if credited:
               self._notify(receipt)
          return receipt

     def confirm_from_webhook(self, order_id: str, payment_id: str) -> Optional[Receipt]:
          """
          Complete a purchase from an authenticated gateway webhook.

          Returns None when the order is unknown.
          """
          try:
               with self.uow.transaction() as db:
                    purchase = PurchaseRepository(db).get_by_order_id(order_id, for_update=True)
                    if purchase is None:
                         return None
                    if purchase.status == PurchaseStatus.COMPLETED:
                         return self._build_receipt(db, purchase)
                    if purchase.status == PurchaseStatus.FAILED:
                         raise OrderAlreadyFailed(
                              f"Payment {payment_id} captured for FAILED order {order_id}; manual reconciliation required"
                         )
                    receipt, credited = self._settle(db, purchase, payment_id, None)
          except PaymentError:
               raise
          except Exception as e:
               logger.exception(f"Ledger failure while confirming order {order_id} from webhook; transaction rolled back")
               raise LedgerError("Payment could not be recorded") from e

          if credited:
               self._notify(receipt)
          return receipt

     def _settle(self, db: Session, purchase: Purchase, payment_id: str, signature: Optional[str]):
          """
          Steps that must commit together: complete the purchase, split the
          amount, credit both wallets. Returns (receipt, credited).
          """
          # Read once so a concurrent config change can't split one sale two ways
          fee_percent = self.fee_percent_provider()

          won = order_ledger.mark_completed(PurchaseRepository(db), purchase, payment_id, signature)
          if not won:
               logger.info(f"Order {purchase.order_id} completed concurrently; returning existing receipt")
               return self._build_receipt(db, purchase), False

          item = BlogCatalog(db).get_purchasable_item(purchase.item_id)
          if item is None:
               raise ItemNotFound(f"Item {purchase.item_id} not found")

          split = calculate_split(purchase.amount, fee_percent)
          description = f"Sale of '{item.title}'" if item.title else f"Sale of item {item.id}"

          seller_wallet = ledger_service.get_or_create_wallet(db, item.seller_id)
          ledger_service.credit_wallet(
               db,
               seller_wallet,
               split.creator_share,
               TransactionType.EARNING,
               purchase,
               details={
                    "itemId": purchase.item_id,
                    "buyerId": purchase.buyer_id,
                    "sellerId": item.seller_id,
                    "description": description,
                    "grossAmount": purchase.amount,
                    "platformFee": split.platform_share,
                    "feePercent": str(split.fee_percent),
               },
               keep_zero=True,
          )

          platform_wallet = ledger_service.get_or_create_wallet(db, self.platform_wallet_owner_id)
          ledger_service.credit_wallet(
               db,
               platform_wallet,
               split.platform_share,
               TransactionType.PLATFORM_FEE,
               purchase,
               details={
                    "itemId": purchase.item_id,
                    "buyerId": purchase.buyer_id,
                    "sellerId": item.seller_id,
                    "description": f"Platform fee: {description}",
                    "grossAmount": purchase.amount,
                    "feePercent": str(split.fee_percent),
               },
          )

          logger.info(
               f"Payment confirmed for buyer {purchase.buyer_id}, item {purchase.item_id}: "
               f"amount={split.amount} creator={split.creator_share} platform={split.platform_share} "
               f"fee={split.fee_percent}%"
          )
          return self._build_receipt(db, purchase), True

     def _build_receipt(self, db: Session, purchase: Purchase) -> Receipt:
          creator_share, platform_share, seller_id = 0, 0, None
          for entry in TransactionRepository(db).for_reference(purchase.id):
               seller_id = seller_id or (entry.details or {}).get("sellerId")
               if entry.type == TransactionType.EARNING:
                    creator_share += entry.amount
               elif entry.type == TransactionType.PLATFORM_FEE:
                    platform_share += entry.amount
          return Receipt(
               purchase_id=purchase.id,
               order_id=purchase.order_id,
               payment_id=purchase.payment_id,
               buyer_id=purchase.buyer_id,
               item_id=purchase.item_id,
               seller_id=seller_id,
               amount=purchase.amount,
               currency=purchase.currency,
               status=purchase.status.value,
               creator_share=creator_share,
               platform_share=platform_share,
          )

     def _notify(self, receipt: Receipt) -> None:
          try:
               self.notifier.publish(EARNING_CREDITED, receipt.to_dict())
          except Exception as e:
               logger.warning(f"Failed to deliver {EARNING_CREDITED} for purchase {receipt.purchase_id}: {e}")

     # ------------------------------------------------------------------
     # Reports
     # ------------------------------------------------------------------

     def get_history(self, buyer_id: str) -> List[dict]:
          """Buyer's COMPLETED purchases, newest first."""
          with self.uow.read() as db:
               purchases = PurchaseRepository(db).list_completed_for_buyer(buyer_id)
               return [
                    {
                         "id": p.id,
                         "amount": p.amount,
                         "currency": p.currency,
                         "status": p.status.value,
                         "createdAt": p.created_at,
                         "item": {
                              "id": p.item.id,
                              "title": p.item.title,
                              "slug": p.item.slug,
                         } if p.item else None,
                    }
                    for p in purchases
               ]

     def get_earnings(self, seller_id: str) -> dict:
          fee_percent = self.fee_percent_provider()
          with self.uow.read() as db:
               wallet = WalletRepository(db).get_by_owner(seller_id)
               entries = (
                    TransactionRepository(db).for_wallet(wallet.id, TransactionType.EARNING)
                    if wallet is not None
                    else []
               )
               earnings = [
                    {
                         "id": t.id,
                         "amount": t.amount,
                         "grossAmount": (t.details or {}).get("grossAmount", t.amount),
                         "platformFee": (t.details or {}).get("platformFee", 0),
                         "itemId": (t.details or {}).get("itemId"),
                         "buyerId": (t.details or {}).get("buyerId"),
                         "description": (t.details or {}).get("description"),
                         "purchaseId": t.reference_id,
                         "createdAt": t.created_at,
                    }
                    for t in entries
               ]
          return {
               "totalEarnings": sum(e["amount"] for e in earnings),
               "platformFees": sum(e["platformFee"] for e in earnings),
               "totalSales": len(earnings),
               "platformFeePercent": float(fee_percent),
               "earnings": earnings,
          }

     def get_wallet(self, owner_id: str) -> dict:
          with self.uow.read() as db:
               wallet = WalletRepository(db).get_by_owner(owner_id)
               if wallet is None:
                    return {"ownerId": owner_id, "balance": 0, "currency": self.currency, "reconciled": True}
               consistent, _ = ledger_service.reconcile_wallet(db, wallet)
               return {
                    "ownerId": owner_id,
                    "balance": wallet.balance,
                    "currency": self.currency,
                    "reconciled": consistent,
               }


def build_payments_service(uow: Optional[UnitOfWork] = None) -> PaymentsService:
     """Wire the service from configuration."""
     gateway = RazorpayGateway()
     if not gateway.is_configured:
          logger.warning("Razorpay keys not configured. Payments will fail.")
     return PaymentsService(
          uow=uow or UnitOfWork(),
          gateway=gateway,
          notifier=NotificationService(),
     )
