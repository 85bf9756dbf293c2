# app/schemas/progress.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

# ==================== Learner Progress Schemas ====================


class VideoCompleteRequest(BaseModel):
    course_id: int = Field(..., gt=0)
    video_id: int = Field(..., gt=0)


class ExamSubmitRequest(BaseModel):
    course_id: int = Field(..., gt=0)
    video_id: int = Field(..., gt=0)
    score: float = Field(..., ge=0, le=100)


class SelfPacedProgressResponse(BaseModel):
    course_id: int
    course_status: str
    progress_percentage: int
    videos_completed: int
    total_videos: int
    exam_passed: Optional[bool] = None


# ==================== Admin Progress Schemas ====================


class AttendanceRecordRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    course_id: int = Field(..., gt=0)
    date: datetime
    status: Literal["present", "absent", "late"] = "present"
    hours_attended: Optional[float] = Field(None, ge=0, le=24)


class SessionAttendanceRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    course_id: int = Field(..., gt=0)
    session_date: datetime
    is_confirmed: bool = True
    attendance_percentage: Optional[float] = Field(None, ge=0, le=100)


class AssessmentScoreRequest(BaseModel):
    user_id: int = Field(..., gt=0)
    course_id: int = Field(..., gt=0)
    course_type: str = Field(..., min_length=1)
    score: float = Field(..., ge=0, le=100)
    mark_completed: bool = False


class EnrollmentProgressResponse(BaseModel):
    enrollment_id: int
    course_id: int
    course_type: str
    course_status: str
    attendance_records: int
    session_attendances: int
    overall_attendance_percentage: Optional[float] = None
    assessment_score: Optional[float] = None
    best_assessment_score: Optional[float] = None
    completion_date: Optional[datetime] = None
