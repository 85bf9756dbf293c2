# app/models/certification_body.py
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class CertificationBody(Base):
    __tablename__ = "certification_bodies"

    id = Column(Integer, primary_key=True, index=True)

    company_name = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)
    logo = Column(Text, nullable=True)
    website = Column(String(255), nullable=True)
    contact_info = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    @property
    def name(self) -> str:
        return self.display_name or self.company_name

    def __repr__(self):
        return f"<CertificationBody(id={self.id}, name='{self.name}')>"


class CourseCertificationBody(Base):
    """
    Links a course to its issuing authority and supporting bodies.
    """

    __tablename__ = "course_certification_bodies"

    id = Column(Integer, primary_key=True, index=True)
    course_type = Column(String(50), nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    body_id = Column(
        Integer,
        ForeignKey("certification_bodies.id", ondelete="CASCADE"),
        nullable=False,
    )
    role = Column(
        String(50), nullable=False, default="co-issuer"
    )  # 'issuer', 'co-issuer', 'endorser', 'partner'
    is_primary = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<CourseCertificationBody(course={self.course_type}:{self.course_id}, body_id={self.body_id}, role={self.role})>"
