# app/models/enrollment.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.core.database import Base


class Enrollment(Base):
    """
    A user's relationship to one course of any catalog.
    Covers wishlist and cart entries as well as paid registrations.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "course_type", "course_id", name="uq_enrollment_user_course"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    # User and Course relationship
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_type = Column(String(50), nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)

    # Enrollment details
    status = Column(
        String(20), nullable=False, default="cart", index=True
    )  # wishlist, cart, paid, registered, completed, cancelled
    registration_date = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    expiry_date = Column(DateTime(timezone=True), nullable=True)  # self-paced access
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    original_price = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    payment_transaction_id = Column(
        Integer,
        ForeignKey("payment_transactions.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Linked course bundling
    is_linked_course = Column(Boolean, nullable=False, default=False)
    is_linked_course_free = Column(Boolean, nullable=False, default=False)
    parent_enrollment_id = Column(
        Integer,
        ForeignKey("enrollments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # status the row had before it was turned into a linked companion
    pre_linked_status = Column(String(20), nullable=True)

    # Progress summary
    course_status = Column(
        String(20), nullable=False, default="not-started"
    )  # not-started, in-progress, completed
    completion_date = Column(DateTime(timezone=True), nullable=True)
    overall_attendance_percentage = Column(Float, nullable=True)
    assessment_completed = Column(Boolean, nullable=False, default=False)
    assessment_score = Column(Float, nullable=True)
    best_assessment_score = Column(Float, nullable=True)
    last_assessment_date = Column(DateTime(timezone=True), nullable=True)

    # Certificate reference
    certificate_id = Column(String(64), nullable=True)

    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<Enrollment(id={self.id}, user_id={self.user_id}, course={self.course_type}:{self.course_id}, status={self.status})>"


class AttendanceRecord(Base):
    """In-person attendance, one row per training day."""

    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(
        Integer,
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default="present")  # present, absent, late
    hours_attended = Column(Float, nullable=True)


class SessionAttendance(Base):
    """Online-live session attendance."""

    __tablename__ = "session_attendances"

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(
        Integer,
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_date = Column(DateTime(timezone=True), nullable=False)
    is_confirmed = Column(Boolean, nullable=False, default=False)
    attendance_percentage = Column(Float, nullable=True)


class VideoProgress(Base):
    """Self-paced video and exam completion."""

    __tablename__ = "video_progress"
    __table_args__ = (
        UniqueConstraint("enrollment_id", "video_id", name="uq_video_progress"),
    )

    id = Column(Integer, primary_key=True, index=True)
    enrollment_id = Column(
        Integer,
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    video_id = Column(
        Integer,
        ForeignKey("self_paced_videos.id", ondelete="CASCADE"),
        nullable=False,
    )
    video_completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    exam_completed = Column(Boolean, nullable=False, default=False)
    exam_score = Column(Float, nullable=True)
    exam_attempts = Column(Integer, nullable=False, default=0)
