# app/models/promo_code.py
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func

from app.core.database import Base
from app.utils.timeutils import ensure_utc


class PromoCode(Base):
    __tablename__ = "promo_codes"

    id = Column(Integer, primary_key=True, index=True)

    code = Column(String(50), nullable=False, unique=True, index=True)  # upper case
    discount_percentage = Column(Numeric(5, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    expiry_date = Column(DateTime(timezone=True), nullable=True)

    # Restrictions
    restriction_type = Column(String(20), nullable=False, default="none")  # none, email
    allowed_emails = Column(JSON, nullable=False, default=list)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def is_expired(self, now: datetime) -> bool:
        expiry = ensure_utc(self.expiry_date)
        return expiry is not None and now > expiry

    def allows_email(self, email: str) -> bool:
        if self.restriction_type != "email" or not self.allowed_emails:
            return True
        allowed = {e.lower() for e in self.allowed_emails}
        return (email or "").lower() in allowed

    def __repr__(self):
        return f"<PromoCode(id={self.id}, code='{self.code}', discount={self.discount_percentage}%)>"
