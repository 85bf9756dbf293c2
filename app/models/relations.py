# app/models/relations.py

from sqlalchemy.orm import backref, relationship

from .achievement_summary import AchievementSummary
from .certificate import Certificate
from .enrollment import AttendanceRecord, Enrollment, SessionAttendance, VideoProgress
from .in_person_course import InPersonCourse
from .payment_transaction import PaymentTransaction, PaymentTransactionItem
from .self_paced_course import SelfPacedCourse, SelfPacedVideo
from .user import User


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # --- Catalog Relationships ---

    # 1. Self-paced course to its videos (One-to-Many, ordered)
    SelfPacedCourse.videos = relationship(
        "SelfPacedVideo",
        order_by=SelfPacedVideo.sequence,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    # 2. In-person course to its linked online course (Many-to-One)
    InPersonCourse.linked_online_course = relationship(
        "OnlineLiveCourse",
        foreign_keys=[InPersonCourse.linked_online_course_id],
    )

    # --- Enrollment Relationships ---

    # 3. User to Enrollments (One-to-Many)
    User.enrollments = relationship(
        "Enrollment", back_populates="user", cascade="all, delete-orphan"
    )
    Enrollment.user = relationship("User", back_populates="enrollments")

    # 4. Enrollment progress rows (One-to-Many)
    Enrollment.attendance_records = relationship(
        "AttendanceRecord",
        order_by=AttendanceRecord.date,
        cascade="all, delete-orphan",
    )
    Enrollment.session_attendances = relationship(
        "SessionAttendance",
        order_by=SessionAttendance.session_date,
        cascade="all, delete-orphan",
    )
    Enrollment.video_progress = relationship(
        "VideoProgress",
        order_by=VideoProgress.id,
        cascade="all, delete-orphan",
    )

    # 5. Linked companion enrollments (self-referential)
    Enrollment.parent_enrollment = relationship(
        "Enrollment",
        remote_side=[Enrollment.id],
        backref=backref("linked_companions"),
    )

    # --- Certificate Relationships ---

    # 6. User to Certificates (One-to-Many)
    User.certificates = relationship(
        "Certificate",
        back_populates="user",
        order_by=Certificate.issue_date,
        cascade="all, delete-orphan",
    )
    Certificate.user = relationship("User", back_populates="certificates")

    # 7. User to Achievement Summary (One-to-One)
    User.achievement_summary = relationship(
        "AchievementSummary",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    AchievementSummary.user = relationship(
        "User", back_populates="achievement_summary"
    )

    # --- Payment Relationships ---

    # 8. Transaction to Items (One-to-Many)
    PaymentTransaction.items = relationship(
        "PaymentTransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
    )
    PaymentTransactionItem.transaction = relationship(
        "PaymentTransaction", back_populates="items"
    )
    PaymentTransactionItem.enrollment = relationship("Enrollment")

    User.payment_transactions = relationship(
        "PaymentTransaction",
        order_by=PaymentTransaction.created_at.desc(),
        cascade="all, delete-orphan",
    )
