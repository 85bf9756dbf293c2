# app/schemas/promo_code.py
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class PromoCodeCreate(BaseModel):
    code: str = Field(..., min_length=3, max_length=50)
    discount_percentage: Decimal = Field(..., gt=0, le=100)
    expiry_date: Optional[datetime] = None
    is_active: bool = True
    restriction_type: Literal["none", "email"] = "none"
    allowed_emails: List[EmailStr] = Field(default_factory=list)

    @field_validator("code")
    def normalize_code(cls, v):
        return v.strip().upper()


class PromoCodeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    discount_percentage: Decimal
    is_active: bool
    expiry_date: Optional[datetime]
    restriction_type: str
    allowed_emails: List[str] = Field(default_factory=list)
    created_at: datetime


class PromoCodeApplyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    promo_code: str = Field(..., alias="promoCode", min_length=1, max_length=50)


class PromoCodeApplyResponse(BaseModel):
    code: str
    discount_percentage: Decimal
    total: Decimal
    discount_amount: Decimal
    new_total: Decimal
    complete_registration: bool
