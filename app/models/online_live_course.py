# app/models/online_live_course.py
from sqlalchemy import Boolean, Column, Integer, String

from app.core.database import Base
from app.models.course_base import CourseColumnsMixin, EarlyBirdPricingMixin
from app.models.course_type import CourseType, ProgressStatus


class OnlineLiveCourse(EarlyBirdPricingMixin, CourseColumnsMixin, Base):
    __tablename__ = "online_live_courses"

    course_type = CourseType.ONLINE_LIVE

    # Platform
    platform_name = Column(String(100), nullable=True)  # e.g. "Zoom"
    total_sessions = Column(Integer, nullable=True)

    # Link back to an in-person course (plain id, the FK lives on in_person_courses)
    linked_in_person_course_id = Column(Integer, nullable=True, index=True)
    linked_to_in_person = Column(Boolean, nullable=False, default=False)
    linked_type = Column(String(20), nullable=True)
    suppress_certificate = Column(Boolean, nullable=False, default=False)

    @property
    def is_linked_to_in_person(self) -> bool:
        return bool(self.linked_to_in_person) and bool(self.linked_in_person_course_id)

    @property
    def certificate_suppressed(self) -> bool:
        """Certificate is issued with the linked in-person course instead."""
        return self.is_linked_to_in_person and bool(self.suppress_certificate)

    def attendance_percentage(self, enrollment) -> float:
        if enrollment.overall_attendance_percentage is not None:
            return float(enrollment.overall_attendance_percentage)

        sessions = enrollment.session_attendances
        if not sessions:
            return 0.0
        confirmed = sum(
            1
            for s in sessions
            if s.is_confirmed or (s.attendance_percentage or 0) >= self.minimum_attendance
        )
        total = self.total_sessions or len(sessions)
        return float(min(100, round(confirmed / total * 100)))

    def is_certificate_eligible(self, enrollment) -> bool:
        if not self.certification_enabled:
            return False
        if enrollment.course_status == ProgressStatus.COMPLETED.value:
            return True
        return self.attendance_percentage(enrollment) >= self.minimum_attendance

    def __repr__(self):
        return f"<OnlineLiveCourse(id={self.id}, code='{self.course_code}', title='{self.title}')>"
