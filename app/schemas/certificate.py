# app/schemas/certificate.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CertificateIssueRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: int = Field(..., alias="courseId", gt=0)
    course_type: str = Field(..., alias="courseType", min_length=1)


class InstructorSnapshot(BaseModel):
    name: str
    title: Optional[str] = None
    role: Optional[str] = None
    is_primary: bool = False


class CertificationBodySnapshot(BaseModel):
    name: str
    role: Optional[str] = None
    is_primary: bool = False


class CertificateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    certificate_id: str
    user_id: int
    course_id: int
    course_type: str

    recipient_name: str
    course_title: str
    course_code: Optional[str] = None
    primary_instructor_name: Optional[str] = None
    primary_issuing_authority: Optional[str] = None
    instructors: List[InstructorSnapshot] = Field(default_factory=list)
    certification_bodies: List[CertificationBodySnapshot] = Field(
        default_factory=list
    )
    delivery_method: Optional[str] = None

    completion_date: datetime
    issue_date: datetime
    expiry_date: Optional[datetime] = None

    attendance_percentage: Optional[float] = None
    exam_score: Optional[float] = None
    total_hours: Optional[int] = None
    grade: str
    course_specific_data: Dict[str, Any] = Field(default_factory=dict)

    verification_code: str
    digital_signature: str
    qr_code_url: Optional[str] = None
    pdf_url: Optional[str] = None
    image_url: Optional[str] = None

    download_count: int
    last_downloaded: Optional[datetime] = None
    is_public: bool
    share_url: Optional[str] = None


class CertificateIssueResponse(BaseModel):
    success: bool = True
    message: str
    certificate: CertificateResponse


class EligibilityResponse(BaseModel):
    course_id: int
    course_type: str
    eligible: bool
    reasons: List[str] = Field(default_factory=list)
    attendance_percentage: Optional[float] = None
    assessment_score: Optional[float] = None
    already_issued: bool = False


class AchievementSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_certificates: int
    specializations: List[str] = Field(default_factory=list)
    total_learning_hours: int
    achievement_level: str


class MyCertificatesResponse(BaseModel):
    certificates: List[CertificateResponse]
    total: int
    achievement_summary: Optional[AchievementSummaryResponse] = None


class CertificateVerificationResponse(BaseModel):
    valid: bool
    signature_valid: bool
    certificate_id: str
    recipient_name: str
    course_title: str
    course_type: str
    completion_date: datetime
    issue_date: datetime
    grade: str
    primary_issuing_authority: Optional[str] = None
    delivery_method: Optional[str] = None
