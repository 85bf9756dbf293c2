# app/models/certificate.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from app.core.database import Base


class Certificate(Base):
    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "course_id", "course_type", name="uq_certificate_user_course"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    certificate_id = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(Integer, nullable=False)
    course_type = Column(String(50), nullable=False)

    # Certificate data
    recipient_name = Column(String(150), nullable=False)
    course_title = Column(String(255), nullable=False)
    course_code = Column(String(50), nullable=True)
    primary_instructor_name = Column(String(150), nullable=True)
    primary_issuing_authority = Column(String(255), nullable=True)
    instructors = Column(JSON, nullable=False, default=list)  # snapshot at issue
    certification_bodies = Column(JSON, nullable=False, default=list)
    delivery_method = Column(String(255), nullable=True)

    completion_date = Column(DateTime(timezone=True), nullable=False)
    issue_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=True)

    # Achievement snapshot
    attendance_percentage = Column(Float, nullable=True)
    exam_score = Column(Float, nullable=True)
    total_hours = Column(Integer, nullable=True)
    grade = Column(String(10), nullable=False, default="Pass")
    course_specific_data = Column(JSON, nullable=False, default=dict)

    # Verification
    verification_code = Column(String(32), nullable=False, unique=True, index=True)
    digital_signature = Column(String(128), nullable=False)
    qr_code_url = Column(String(255), nullable=True)
    pdf_url = Column(String(255), nullable=True)
    image_url = Column(String(255), nullable=True)

    # Usage tracking
    download_count = Column(Integer, nullable=False, default=0)
    last_downloaded = Column(DateTime(timezone=True), nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    share_url = Column(String(255), nullable=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Certificate(id={self.id}, certificate_id='{self.certificate_id}', user_id={self.user_id})>"
