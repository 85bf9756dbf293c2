# app/services/checkout.py
import logging
import secrets
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.models.course_type import CourseType, EnrollmentStatus
from app.models.enrollment import Enrollment
from app.models.payment_transaction import PaymentTransaction, PaymentTransactionItem
from app.models.user import User
from app.services.course import CourseService
from app.services.promo_code import PromoCodeService, promo_discount
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def _reference(prefix: str) -> str:
    return f"{prefix}-{utcnow():%Y%m%d}-{secrets.token_hex(4).upper()}"


class CheckoutService:
    def __init__(self, db: Session):
        self.db = db
        self.course_service = CourseService(db)

    @db_exception
    def checkout(
        self, user: User, payment_method: str = "card", promo_code: Optional[str] = None
    ) -> PaymentTransaction:
        """
        Turn the user's cart into a payment transaction.

        Paid cart rows are repriced at their registration date so early-bird
        prices apply, then ``promo_code`` takes a percentage off the total.
        A pending transaction from an earlier checkout of the same rows is
        cancelled. Free carts (for example only free linked courses)
        complete immediately.
        """
        cart = self._get_cart(user)
        if not cart:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty"
            )

        promo = (
            PromoCodeService(self.db).get_valid_promo_code(promo_code, user)
            if promo_code
            else None
        )

        courses = {}
        early_bird_savings = Decimal("0")
        for enrollment in cart:
            course = self.course_service.get_course(
                CourseType(enrollment.course_type), enrollment.course_id
            )
            courses[enrollment.id] = course
            if course is None or enrollment.is_linked_course:
                continue
            pricing = course.pricing(enrollment.registration_date)
            enrollment.original_price = pricing["regular_price"]
            enrollment.paid_amount = pricing["current_price"]
            early_bird_savings += pricing["early_bird_savings"]

        subtotal = sum((Decimal(e.original_price or 0) for e in cart), Decimal("0"))
        current_total = sum((Decimal(e.paid_amount or 0) for e in cart), Decimal("0"))
        discount = promo_discount(current_total, promo) if promo else Decimal("0")
        final_amount = max(Decimal("0"), current_total - discount)

        superseded = self._cancel_pending_transactions(user, cart)

        transaction = PaymentTransaction(
            transaction_id=_reference("TXN"),
            order_number=_reference("ORD"),
            receipt_number=_reference("RCP"),
            user_id=user.id,
            payment_status="pending",
            payment_method=payment_method,
            subtotal=subtotal,
            discount_amount=subtotal - final_amount,
            early_bird_savings=early_bird_savings,
            promo_code=promo.code if promo else None,
            promo_discount=discount,
            final_amount=final_amount,
            currency=cart[0].currency or settings.default_currency,
        )

        for enrollment in cart:
            course = courses[enrollment.id]
            transaction.items.append(
                PaymentTransactionItem(
                    enrollment_id=enrollment.id,
                    course_type=enrollment.course_type,
                    course_id=enrollment.course_id,
                    course_title=course.title if course else "Unknown course",
                    original_price=enrollment.original_price or 0,
                    paid_amount=enrollment.paid_amount or 0,
                    is_linked_course_free=enrollment.is_linked_course_free,
                )
            )

        self.db.add(transaction)
        self.db.flush()
        for enrollment in cart:
            enrollment.payment_transaction_id = transaction.id

        if final_amount == 0:
            self._mark_completed(transaction, cart)

        self.db.commit()
        self.db.refresh(transaction)
        logger.info(
            f"Checkout {transaction.order_number} for user {user.id}: "
            f"{len(cart)} items, {final_amount} {transaction.currency}"
            + (f", superseding {', '.join(superseded)}" if superseded else "")
        )
        return transaction

    def preview_promo_code(self, user: User, code: str) -> dict:
        """What ``code`` would take off the user's cart, without checking out."""
        cart = self._get_cart(user)
        if not cart:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Cart is empty"
            )
        promo = PromoCodeService(self.db).get_valid_promo_code(code, user)

        total = Decimal("0")
        for enrollment in cart:
            if enrollment.is_linked_course:
                total += Decimal(enrollment.paid_amount or 0)
                continue
            course = self.course_service.get_course(
                CourseType(enrollment.course_type), enrollment.course_id
            )
            if course is not None:
                total += course.pricing(enrollment.registration_date)["current_price"]

        discount = promo_discount(total, promo)
        new_total = max(Decimal("0"), total - discount)
        return {
            "code": promo.code,
            "discount_percentage": promo.discount_percentage,
            "total": total,
            "discount_amount": discount,
            "new_total": new_total,
            "complete_registration": new_total == 0,
        }

    def _get_cart(self, user: User) -> List[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(
                Enrollment.user_id == user.id,
                Enrollment.status == EnrollmentStatus.CART.value,
            )
            .order_by(Enrollment.id.asc())
            .all()
        )

    def _cancel_pending_transactions(
        self, user: User, cart: List[Enrollment]
    ) -> List[str]:
        ids = {e.payment_transaction_id for e in cart if e.payment_transaction_id}
        if not ids:
            return []
        pending = (
            self.db.query(PaymentTransaction)
            .filter(
                PaymentTransaction.id.in_(ids),
                PaymentTransaction.user_id == user.id,
                PaymentTransaction.payment_status == "pending",
            )
            .all()
        )
        for transaction in pending:
            transaction.payment_status = "cancelled"
            logger.info(
                f"Cancelled pending transaction {transaction.order_number}, "
                f"its cart was checked out again"
            )
        return [t.order_number for t in pending]

    def _mark_completed(
        self, transaction: PaymentTransaction, enrollments: List[Enrollment]
    ) -> None:
        now = utcnow()
        transaction.payment_status = "completed"
        transaction.completed_at = now

        for enrollment in enrollments:
            enrollment.status = EnrollmentStatus.PAID.value
            if enrollment.course_type == CourseType.SELF_PACED.value:
                course = self.course_service.get_course(
                    CourseType.SELF_PACED, enrollment.course_id
                )
                access_days = (
                    course.access_days if course else settings.self_paced_access_days
                )
                enrollment.expiry_date = now + timedelta(days=access_days)

    @db_exception
    def complete_transaction(
        self, order_number: str, gateway_reference: str = None
    ) -> PaymentTransaction:
        """Mark a pending transaction as paid and activate its enrollments."""
        transaction = (
            self.db.query(PaymentTransaction)
            .filter(PaymentTransaction.order_number == order_number)
            .first()
        )
        if not transaction:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found"
            )
        if transaction.payment_status != "pending":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Transaction is already {transaction.payment_status}",
            )

        enrollments = [
            item.enrollment
            for item in transaction.items
            if item.enrollment
            and item.enrollment.payment_transaction_id == transaction.id
            and item.enrollment.status == EnrollmentStatus.CART.value
        ]
        transaction.gateway_reference = gateway_reference
        self._mark_completed(transaction, enrollments)

        self.db.commit()
        self.db.refresh(transaction)
        logger.info(f"Transaction {order_number} completed")
        return transaction

    def get_user_transactions(self, user: User) -> List[PaymentTransaction]:
        return (
            self.db.query(PaymentTransaction)
            .filter(PaymentTransaction.user_id == user.id)
            .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.id.desc())
            .all()
        )
