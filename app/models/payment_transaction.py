# app/models/payment_transaction.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.sql import func

from app.core.database import Base


class PaymentTransaction(Base):
    __tablename__ = "payment_transactions"

    id = Column(Integer, primary_key=True, index=True)

    # Transaction identification
    transaction_id = Column(String(64), nullable=False, index=True)
    order_number = Column(String(64), nullable=False, unique=True, index=True)
    receipt_number = Column(String(64), nullable=False)

    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Status & method
    payment_status = Column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, completed, failed, cancelled
    payment_method = Column(String(50), nullable=True)
    gateway_reference = Column(String(255), nullable=True)

    # Financial details
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    early_bird_savings = Column(Numeric(10, 2), nullable=False, default=0)
    promo_code = Column(String(50), nullable=True)
    promo_discount = Column(Numeric(10, 2), nullable=False, default=0)
    final_amount = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<PaymentTransaction(id={self.id}, order='{self.order_number}', status={self.payment_status})>"


class PaymentTransactionItem(Base):
    __tablename__ = "payment_transaction_items"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(
        Integer,
        ForeignKey("payment_transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    enrollment_id = Column(
        Integer,
        ForeignKey("enrollments.id", ondelete="SET NULL"),
        nullable=True,
    )
    course_type = Column(String(50), nullable=False)
    course_id = Column(Integer, nullable=False)
    course_title = Column(String(255), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    is_linked_course_free = Column(Boolean, nullable=False, default=False)
