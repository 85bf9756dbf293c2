# app/models/in_person_course.py
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String

from app.core.database import Base
from app.models.course_base import CourseColumnsMixin, EarlyBirdPricingMixin
from app.models.course_type import CourseType, ProgressStatus

HOURS_PER_DAY = 8


class InPersonCourse(EarlyBirdPricingMixin, CourseColumnsMixin, Base):
    __tablename__ = "in_person_courses"

    course_type = CourseType.IN_PERSON

    # Enrollment
    seats_available = Column(Integer, nullable=False, default=0)

    # Venue
    venue_name = Column(String(255), nullable=True)
    venue_city = Column(String(100), nullable=True)
    venue_country = Column(String(100), nullable=True)
    materials_count = Column(Integer, nullable=False, default=0)

    # Linked online course
    linked_online_course_id = Column(
        Integer,
        ForeignKey("online_live_courses.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    linked_is_required = Column(Boolean, nullable=False, default=False)
    linked_relationship = Column(
        String(20), nullable=False, default="prerequisite"
    )  # 'prerequisite', 'supplementary', 'follow-up'
    linked_completion_required = Column(Boolean, nullable=False, default=True)
    linked_is_free = Column(Boolean, nullable=False, default=True)
    linked_custom_price = Column(Numeric(10, 2), nullable=False, default=0)

    @property
    def location(self) -> str:
        if self.venue_city and self.venue_country:
            return f"{self.venue_city}, {self.venue_country}"
        return "Training Center"

    @property
    def has_required_linked_course(self) -> bool:
        return bool(self.linked_online_course_id) and bool(self.linked_is_required)

    def attendance_percentage(self, enrollment) -> float:
        if enrollment.overall_attendance_percentage is not None:
            return float(enrollment.overall_attendance_percentage)

        records = enrollment.attendance_records
        if records:
            total_hours = sum(
                r.hours_attended if r.hours_attended is not None else HOURS_PER_DAY
                for r in records
            )
            expected_hours = len(records) * HOURS_PER_DAY
            return float(min(100, round(total_hours / expected_hours * 100)))

        if enrollment.course_status == ProgressStatus.COMPLETED.value:
            return 100.0
        return 0.0

    def can_issue_certificate(self, linked_enrollment) -> Dict[str, Any]:
        """
        Check the linked online course requirement.

        ``linked_enrollment`` is the user's enrollment in the linked online
        course, or None when the user has none.
        """
        if not self.has_required_linked_course or not self.linked_completion_required:
            return {"eligible": True, "reason": None}

        online_course = self.linked_online_course
        if online_course is None:
            return {
                "eligible": False,
                "reason": "The linked online course is no longer available",
            }

        if linked_enrollment is None:
            return {
                "eligible": False,
                "reason": f"Enrollment in the linked online course '{online_course.title}' is required",
                "linked_online_course_id": online_course.id,
            }

        if not online_course.is_certificate_eligible(linked_enrollment):
            return {
                "eligible": False,
                "reason": f"The linked online course '{online_course.title}' must be completed first",
                "linked_online_course_id": online_course.id,
            }

        return {"eligible": True, "reason": None}

    def linked_price(self) -> Optional[float]:
        if not self.linked_online_course_id:
            return None
        return 0.0 if self.linked_is_free else float(self.linked_custom_price or 0)

    def __repr__(self):
        return f"<InPersonCourse(id={self.id}, code='{self.course_code}', title='{self.title}')>"
