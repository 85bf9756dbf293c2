# app/schemas/course.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.course_type import CourseType

# ==================== Shared Course Schemas ====================


class InstructorAssignment(BaseModel):
    instructor_id: int
    role: str = Field(default="Lead Instructor", max_length=50)
    is_primary: bool = False


class CertificationBodyAssignment(BaseModel):
    body_id: int
    role: Literal["issuer", "co-issuer", "endorser", "partner"] = "co-issuer"
    is_primary: bool = False


class CourseBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    course_code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    status: str = Field(default="draft", max_length=30)
    price: float = Field(default=0, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    duration: Optional[str] = Field(None, max_length=50)
    assessment_required: bool = False
    assessment_type: Literal["none", "quiz", "practical", "both"] = "none"
    passing_score: int = Field(default=70, ge=0, le=100)
    certification_enabled: bool = True
    minimum_attendance: int = Field(default=80, ge=0, le=100)


class CourseCreateBase(CourseBase):
    instructors: List[InstructorAssignment] = Field(default_factory=list)
    certification_bodies: List[CertificationBodyAssignment] = Field(
        default_factory=list
    )


class InPersonCourseCreate(CourseCreateBase):
    seats_available: int = Field(default=0, ge=0)
    early_bird_price: Optional[float] = Field(None, ge=0)
    early_bird_days: Optional[int] = Field(None, ge=1)
    venue_name: Optional[str] = Field(None, max_length=255)
    venue_city: Optional[str] = Field(None, max_length=100)
    venue_country: Optional[str] = Field(None, max_length=100)
    materials_count: int = Field(default=0, ge=0)


class OnlineLiveCourseCreate(CourseCreateBase):
    platform_name: Optional[str] = Field(None, max_length=100)
    total_sessions: Optional[int] = Field(None, ge=1)
    early_bird_price: Optional[float] = Field(None, ge=0)
    early_bird_days: Optional[int] = Field(None, ge=1)


class SelfPacedVideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    sequence: int = Field(default=0, ge=0)
    duration_minutes: Optional[int] = Field(None, ge=0)
    has_exam: bool = False
    exam_passing_score: int = Field(default=70, ge=0, le=100)


class SelfPacedCourseCreate(CourseCreateBase):
    access_days: int = Field(default=365, ge=1)
    videos: List[SelfPacedVideoCreate] = Field(default_factory=list)


class CourseResponse(CourseBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_type: CourseType
    created_at: datetime
    updated_at: datetime


class InPersonCourseResponse(CourseResponse):
    seats_available: int
    early_bird_price: Optional[float]
    early_bird_days: Optional[int]
    early_bird_deadline: Optional[datetime]
    venue_name: Optional[str]
    venue_city: Optional[str]
    venue_country: Optional[str]
    materials_count: int
    linked_online_course_id: Optional[int]
    linked_is_required: bool


class OnlineLiveCourseResponse(CourseResponse):
    platform_name: Optional[str]
    total_sessions: Optional[int]
    early_bird_price: Optional[float]
    early_bird_days: Optional[int]
    early_bird_deadline: Optional[datetime]
    linked_in_person_course_id: Optional[int]
    linked_to_in_person: bool
    suppress_certificate: bool


class SelfPacedVideoResponse(SelfPacedVideoCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


class SelfPacedCourseResponse(CourseResponse):
    access_days: int
    videos: List[SelfPacedVideoResponse] = Field(default_factory=list)


class CourseListResponse(BaseModel):
    courses: List[CourseResponse]
    total: int
    page: int
    size: int
    total_pages: int


# ==================== Linked Course Schemas ====================


class LinkedCourseRequest(BaseModel):
    online_course_id: int
    relationship: Literal["prerequisite", "supplementary", "follow-up"]
    is_required: bool = False
    completion_required: bool = True
    is_free: bool = True
    custom_price: float = Field(default=0, ge=0)
    suppress_online_certificate: bool = False


class LinkedCourseResponse(BaseModel):
    online_course_id: int
    course_title: str
    relationship: str
    is_required: bool
    completion_required: bool
    is_free: bool
    custom_price: float


class LinkableOnlineCourse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_code: str
    title: str
    status: str
    start_date: Optional[datetime]


# ==================== Reference Data Schemas ====================


class InstructorCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    title: Optional[str] = Field(None, max_length=150)
    bio: Optional[str] = None
    profile_image: Optional[str] = None
    credentials: List[str] = Field(default_factory=list)


class InstructorResponse(InstructorCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


class CertificationBodyCreate(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)
    logo: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)
    contact_info: Optional[dict] = None


class CertificationBodyResponse(CertificationBodyCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    is_active: bool
