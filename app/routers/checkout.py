# app/routers/checkout.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.checkout import (
    CheckoutRequest,
    TransactionListResponse,
    TransactionResponse,
)
from app.schemas.promo_code import PromoCodeApplyRequest, PromoCodeApplyResponse
from app.services.checkout import CheckoutService

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post(
    "", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED
)
def checkout(
    current_user: Annotated[User, Depends(get_current_user)],
    data: Optional[CheckoutRequest] = None,
    db: Session = Depends(get_db),
):
    payment_method = data.payment_method if data else "card"
    promo_code = data.promo_code if data else None
    return CheckoutService(db).checkout(current_user, payment_method, promo_code)


@router.post("/promo-code", response_model=PromoCodeApplyResponse)
def apply_promo_code(
    data: PromoCodeApplyRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    """Preview the discount a promo code gives on the current cart"""
    return CheckoutService(db).preview_promo_code(current_user, data.promo_code)


@router.get("/transactions", response_model=TransactionListResponse)
def get_transactions(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    transactions = CheckoutService(db).get_user_transactions(current_user)
    return {"transactions": transactions, "total": len(transactions)}
