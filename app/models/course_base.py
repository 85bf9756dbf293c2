# app/models/course_base.py
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.sql import func

from app.utils.timeutils import ensure_utc, utcnow


class CourseColumnsMixin:
    """Columns shared by the three course catalogs."""

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    title = Column(String(255), nullable=False, index=True)
    course_code = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    status = Column(String(30), nullable=False, default="draft")

    # Pricing
    price = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")

    # Schedule
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    duration = Column(String(50), nullable=True)  # free text, e.g. "2 days", "16 hours"

    # Assessment
    assessment_required = Column(Boolean, nullable=False, default=False)
    assessment_type = Column(
        String(20), nullable=False, default="none"
    )  # 'none', 'quiz', 'practical', 'both'
    passing_score = Column(Integer, nullable=False, default=70)

    # Certification
    certification_enabled = Column(Boolean, nullable=False, default=True)
    minimum_attendance = Column(Integer, nullable=False, default=80)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def schedule_end(self) -> Optional[datetime]:
        """End of the scheduled run, falling back to the start date."""
        return ensure_utc(self.end_date or self.start_date)

    @property
    def requires_assessment(self) -> bool:
        return bool(self.assessment_required) and self.assessment_type != "none"

    def has_ended(self, now: datetime) -> bool:
        end = self.schedule_end
        return end is not None and end < now

    def pricing(self, registration_date: Optional[datetime] = None) -> dict:
        """Price a registration made at ``registration_date``."""
        regular_price = Decimal(self.price or 0)
        return {
            "regular_price": regular_price,
            "early_bird_price": None,
            "current_price": regular_price,
            "is_early_bird": False,
            "early_bird_savings": Decimal("0"),
        }


class EarlyBirdPricingMixin:
    """Discounted price for registrations made some days before the start."""

    early_bird_price = Column(Numeric(10, 2), nullable=True)
    early_bird_days = Column(Integer, nullable=True)

    @property
    def early_bird_deadline(self) -> Optional[datetime]:
        start = ensure_utc(self.start_date)
        if not self.early_bird_price or not self.early_bird_days or start is None:
            return None
        return start - timedelta(days=self.early_bird_days)

    def pricing(self, registration_date: Optional[datetime] = None) -> dict:
        pricing = super().pricing(registration_date)
        deadline = self.early_bird_deadline
        if deadline is None:
            return pricing

        early_bird_price = Decimal(self.early_bird_price)
        pricing["early_bird_price"] = early_bird_price
        if (ensure_utc(registration_date) or utcnow()) <= deadline:
            pricing["current_price"] = early_bird_price
            pricing["is_early_bird"] = True
            pricing["early_bird_savings"] = pricing["regular_price"] - early_bird_price
        return pricing
