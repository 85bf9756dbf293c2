# app/models/instructor.py
from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class Instructor(Base):
    __tablename__ = "instructors"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    title = Column(String(150), nullable=True)  # e.g. "Consultant Dermatologist"
    bio = Column(Text, nullable=True)
    profile_image = Column(Text, nullable=True)
    credentials = Column(JSON, nullable=False, default=list)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self):
        return f"<Instructor(id={self.id}, name='{self.full_name}')>"


class CourseInstructor(Base):
    """
    Assigns instructors to a course of any catalog.
    (course_type, course_id) identifies the course row.
    """

    __tablename__ = "course_instructors"

    id = Column(Integer, primary_key=True, index=True)
    course_type = Column(String(50), nullable=False, index=True)
    course_id = Column(Integer, nullable=False, index=True)
    instructor_id = Column(
        Integer, ForeignKey("instructors.id", ondelete="CASCADE"), nullable=False
    )
    role = Column(String(50), nullable=False, default="Lead Instructor")
    is_primary = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<CourseInstructor(course={self.course_type}:{self.course_id}, instructor_id={self.instructor_id})>"
