# app/schemas/checkout.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckoutRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    payment_method: str = Field(default="card", max_length=50)
    promo_code: Optional[str] = Field(None, alias="promoCode", max_length=50)


class TransactionCompleteRequest(BaseModel):
    gateway_reference: Optional[str] = Field(None, max_length=255)


class TransactionItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    enrollment_id: Optional[int]
    course_type: str
    course_id: int
    course_title: str
    original_price: Decimal
    paid_amount: Decimal
    is_linked_course_free: bool


class TransactionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    transaction_id: str
    order_number: str
    receipt_number: str
    payment_status: str
    payment_method: Optional[str]
    gateway_reference: Optional[str]
    subtotal: Decimal
    discount_amount: Decimal
    early_bird_savings: Decimal
    promo_code: Optional[str]
    promo_discount: Decimal
    final_amount: Decimal
    currency: str
    created_at: datetime
    completed_at: Optional[datetime]
    items: List[TransactionItemResponse] = Field(default_factory=list)


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]
    total: int
