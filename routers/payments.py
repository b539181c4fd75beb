# routers/payments.py
"""
Payments API.

POST /payments/order: open a Razorpay order for an exclusive blog.
POST /payments/verify: verify the checkout signature, complete the purchase
and credit the author's wallet.
POST /payments/webhook: Razorpay webhook (payment.captured / order.paid / payment.failed).
GET /payments/history, /payments/earnings, /payments/wallet: read-only reports.

Domain errors (services.errors.PaymentError) are rendered by the handler in main.py.
"""
import json
from functools import lru_cache

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from config import RAZORPAY_WEBHOOK_SECRET, logger
from schemas.payment import (
     CreateOrderRequest,
     VerifyPaymentRequest,
     OrderEnvelope,
     VerifyPaymentResponse,
     PurchaseHistoryEnvelope,
     EarningsEnvelope,
     WalletEnvelope,
)
from services.errors import InvalidWebhookSignature, OrderAlreadyFailed, PaymentNotConfigured
from services.payments_service import PaymentsService, build_payments_service
from services.signature import verify_webhook_signature
from utils.auth import get_current_user_id

router = APIRouter(prefix="/payments", tags=["payments"])

CAPTURE_EVENTS = ("payment.captured", "order.paid")
FAILURE_EVENTS = ("payment.failed",)


@lru_cache(maxsize=1)
def get_payments_service() -> PaymentsService:
     return build_payments_service()


def get_webhook_secret() -> str:
     return RAZORPAY_WEBHOOK_SECRET


@router.post(
     "/order",
     response_model=OrderEnvelope,
     status_code=status.HTTP_200_OK,
     summary="Create payment order",
)
def create_order(
     body: CreateOrderRequest,
     user_id: str = Depends(get_current_user_id),
     service: PaymentsService = Depends(get_payments_service),
):
     """Initiate a purchase for an exclusive blog."""
     return {"data": service.create_order(user_id, body.item_id)}


@router.post(
     "/verify",
     response_model=VerifyPaymentResponse,
     status_code=status.HTTP_200_OK,
     summary="Verify payment",
)
def verify_payment(
     body: VerifyPaymentRequest,
     user_id: str = Depends(get_current_user_id),
     service: PaymentsService = Depends(get_payments_service),
):
     """
     Verify the Razorpay signature and complete the purchase.

     Re-submitting an already verified payment returns the same receipt.
     """
     receipt = service.verify_payment(user_id, body.gateway_order_id, body.payment_id, body.signature)
     return {
          "success": True,
          "message": "Payment verified successfully",
          "receipt": receipt.to_dict(),
     }


@router.get("/history", response_model=PurchaseHistoryEnvelope, summary="Get purchase history")
def get_history(
     user_id: str = Depends(get_current_user_id),
     service: PaymentsService = Depends(get_payments_service),
):
     return {"data": service.get_history(user_id)}


@router.get("/earnings", response_model=EarningsEnvelope, summary="Get creator earnings")
def get_earnings(
     user_id: str = Depends(get_current_user_id),
     service: PaymentsService = Depends(get_payments_service),
):
     return {"data": service.get_earnings(user_id)}


@router.get("/wallet", response_model=WalletEnvelope, summary="Get wallet balance")
def get_wallet(
     user_id: str = Depends(get_current_user_id),
     service: PaymentsService = Depends(get_payments_service),
):
     return {"data": service.get_wallet(user_id)}


@router.post("/webhook", summary="Razorpay webhook")
async def razorpay_webhook(
     request: Request,
     service: PaymentsService = Depends(get_payments_service),
     webhook_secret: str = Depends(get_webhook_secret),
):
     """
     Receives Razorpay payment events.

     Always acknowledges authenticated deliveries so Razorpay stops retrying;
     events that cannot be applied are logged.
     """
     if not webhook_secret:
          raise PaymentNotConfigured("Webhook secret not configured")

     raw = await request.body()
     if not verify_webhook_signature(raw, request.headers.get("X-Razorpay-Signature", ""), webhook_secret):
          raise InvalidWebhookSignature("Invalid webhook signature")

     try:
          payload = json.loads(raw or b"{}")
     except ValueError:
          logger.warning("Ignoring webhook with non-JSON body")
          return {"status": "ignored"}

     event = payload.get("event")
     entities = payload.get("payload") or {}
     payment = (entities.get("payment") or {}).get("entity") or {}
     order = (entities.get("order") or {}).get("entity") or {}
     order_id = payment.get("order_id") or order.get("id")
     payment_id = payment.get("id")

     if not order_id:
          logger.info(f"Ignoring webhook event {event}: no order id")
          return {"status": "ignored"}

     if event in CAPTURE_EVENTS:
          if not payment_id:
               logger.info(f"Ignoring webhook event {event} for {order_id}: no payment id")
               return {"status": "ignored"}
          try:
               receipt = await run_in_threadpool(service.confirm_from_webhook, order_id, payment_id)
          except OrderAlreadyFailed as e:
               logger.error(str(e))
               return {"status": "ignored"}
          if receipt is None:
               logger.info(f"Ignoring webhook event {event}: unknown order {order_id}")
               return {"status": "ignored"}
          return {"status": "ok", "receipt": receipt.to_dict()}

     if event in FAILURE_EVENTS:
          # A failed attempt leaves the order open; the buyer may still pay on it
          logger.info(f"Payment {payment_id} failed for order {order_id}; order stays PENDING")
          return {"status": "ignored"}

     logger.info(f"Ignoring unhandled webhook event {event}")
     return {"status": "ignored"}
