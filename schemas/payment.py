# schemas/payment.py
"""
Pydantic schemas for the payments API.

Amounts are integers in the smallest currency unit (paise for INR).
Request bodies accept both our field names and the Razorpay checkout names.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CreateOrderRequest(BaseModel):
     """Request body for POST /payments/order."""
     item_id: str = Field(
          ...,
          min_length=1,
          max_length=64,
          validation_alias=AliasChoices("itemId", "blogId", "item_id"),
          description="ID of the exclusive blog to purchase",
     )

     model_config = ConfigDict(
          str_strip_whitespace=True,
          json_schema_extra={"example": {"itemId": "clxxxxxxxxxxxxxxxxxx"}},
     )


class VerifyPaymentRequest(BaseModel):
     """Request body for POST /payments/verify."""
     gateway_order_id: str = Field(
          ...,
          min_length=1,
          max_length=64,
          validation_alias=AliasChoices("gatewayOrderId", "razorpay_order_id"),
     )
     payment_id: str = Field(
          ...,
          min_length=1,
          max_length=64,
          validation_alias=AliasChoices("paymentId", "razorpay_payment_id"),
     )
     signature: str = Field(
          ...,
          min_length=1,
          max_length=128,
          validation_alias=AliasChoices("signature", "razorpay_signature"),
     )

     model_config = ConfigDict(
          str_strip_whitespace=True,
          json_schema_extra={
               "example": {
                    "gatewayOrderId": "order_xxxxxxxxxxxxxx",
                    "paymentId": "pay_xxxxxxxxxxxxxx",
                    "signature": "9ef4dffbfd84f1318f6739a3ce19f9d85851857ae648f114332d8401e0949a3d",
               }
          },
     )


class OrderResponse(BaseModel):
     id: str = Field(..., description="Gateway order id")
     amount: int
     currency: str
     key_id: str = Field(..., description="Public gateway key for the checkout widget")


class OrderEnvelope(BaseModel):
     data: OrderResponse

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "data": {
                         "id": "order_xxxxxxxxxxxxxx",
                         "amount": 50000,
                         "currency": "INR",
                         "key_id": "rzp_test_xxxxxxxx",
                    }
               }
          }
     )


class ReceiptResponse(BaseModel):
     purchaseId: str
     orderId: str
     paymentId: Optional[str] = None
     buyerId: str
     itemId: str
     sellerId: Optional[str] = None
     amount: int
     currency: str
     status: str
     creatorShare: int
     platformShare: int


class VerifyPaymentResponse(BaseModel):
     success: bool = True
     message: str = "Payment verified successfully"
     receipt: ReceiptResponse


class PurchasedItem(BaseModel):
     id: str
     title: str
     slug: str


class PurchaseHistoryItem(BaseModel):
     id: str
     amount: int
     currency: str
     status: str
     createdAt: datetime
     item: Optional[PurchasedItem] = None


class PurchaseHistoryEnvelope(BaseModel):
     data: List[PurchaseHistoryItem]


class EarningItem(BaseModel):
     id: str
     amount: int
     grossAmount: int
     platformFee: int
     itemId: Optional[str] = None
     buyerId: Optional[str] = None
     description: Optional[str] = None
     purchaseId: str
     createdAt: datetime


class EarningsResponse(BaseModel):
     totalEarnings: int
     platformFees: int
     totalSales: int
     platformFeePercent: float
     earnings: List[EarningItem]


class EarningsEnvelope(BaseModel):
     data: EarningsResponse


class WalletResponse(BaseModel):
     ownerId: str
     balance: int
     currency: str
     reconciled: bool


class WalletEnvelope(BaseModel):
     data: WalletResponse
