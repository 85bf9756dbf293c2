# app/services/promo_code.py
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.models.promo_code import PromoCode
from app.models.user import User
from app.schemas.promo_code import PromoCodeCreate
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def promo_discount(total: Decimal, promo: PromoCode) -> Decimal:
    """Percentage discount on ``total``, rounded to cents and capped at the total."""
    discount = (total * Decimal(promo.discount_percentage) / 100).quantize(
        CENT, rounding=ROUND_HALF_UP
    )
    return min(discount, total)


class PromoCodeService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Admin ====================

    @db_exception
    def create_promo_code(self, promo_in: PromoCodeCreate) -> PromoCode:
        if self.db.query(PromoCode).filter(PromoCode.code == promo_in.code).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Promo code '{promo_in.code}' already exists",
            )

        promo = PromoCode(
            code=promo_in.code,
            discount_percentage=promo_in.discount_percentage,
            expiry_date=promo_in.expiry_date,
            is_active=promo_in.is_active,
            restriction_type=promo_in.restriction_type,
            allowed_emails=(
                [str(e).lower() for e in promo_in.allowed_emails]
                if promo_in.restriction_type == "email"
                else []
            ),
        )
        self.db.add(promo)
        self.db.commit()
        self.db.refresh(promo)
        logger.info(f"Created promo code {promo.code} ({promo.discount_percentage}%)")
        return promo

    def get_promo_codes(self) -> List[PromoCode]:
        return (
            self.db.query(PromoCode)
            .order_by(PromoCode.created_at.desc(), PromoCode.id.desc())
            .all()
        )

    @db_exception
    def delete_promo_code(self, promo_id: int) -> None:
        promo = self.db.get(PromoCode, promo_id)
        if not promo:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Promo code not found"
            )
        self.db.delete(promo)
        self.db.commit()
        logger.info(f"Deleted promo code {promo.code}")

    # ==================== Checkout ====================

    def get_valid_promo_code(self, code: str, user: User) -> PromoCode:
        """The active, unexpired promo code for ``code``, usable by ``user``."""
        promo = (
            self.db.query(PromoCode)
            .filter(
                PromoCode.code == code.strip().upper(),
                PromoCode.is_active.is_(True),
            )
            .first()
        )
        if not promo:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired promo code",
            )
        if promo.is_expired(utcnow()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This promo code has expired",
            )
        if not promo.allows_email(user.email):
            logger.warning(f"User {user.id} tried restricted promo code {promo.code}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This promo code is not valid for your email address",
            )
        return promo
