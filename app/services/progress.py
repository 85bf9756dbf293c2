# app/services/progress.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.models.course_type import ENROLLED_STATUSES, CourseType, ProgressStatus
from app.models.enrollment import (
    AttendanceRecord,
    Enrollment,
    SessionAttendance,
    VideoProgress,
)
from app.models.self_paced_course import SelfPacedCourse
from app.models.user import User
from app.schemas.progress import (
    AssessmentScoreRequest,
    AttendanceRecordRequest,
    ExamSubmitRequest,
    SessionAttendanceRequest,
    VideoCompleteRequest,
)
from app.services.course import CourseService, resolve_course_type
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class ProgressService:
    def __init__(self, db: Session):
        self.db = db
        self.course_service = CourseService(db)

    def _get_enrolled(
        self, user_id: int, course_type: CourseType, course_id: int
    ) -> Enrollment:
        enrollment = (
            self.db.query(Enrollment)
            .filter(
                Enrollment.user_id == user_id,
                Enrollment.course_type == course_type.value,
                Enrollment.course_id == course_id,
                Enrollment.status.in_(ENROLLED_STATUSES),
            )
            .first()
        )
        if not enrollment:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Enrollment not found for this course",
            )
        return enrollment

    def _enrollment_summary(self, enrollment: Enrollment) -> dict:
        return {
            "enrollment_id": enrollment.id,
            "course_id": enrollment.course_id,
            "course_type": enrollment.course_type,
            "course_status": enrollment.course_status,
            "attendance_records": len(enrollment.attendance_records),
            "session_attendances": len(enrollment.session_attendances),
            "overall_attendance_percentage": enrollment.overall_attendance_percentage,
            "assessment_score": enrollment.assessment_score,
            "best_assessment_score": enrollment.best_assessment_score,
            "completion_date": enrollment.completion_date,
        }

    # ==================== Self-paced (learner) ====================

    def _get_video(self, course: SelfPacedCourse, video_id: int):
        video = next((v for v in course.videos if v.id == video_id), None)
        if video is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Video not found"
            )
        return video

    def _video_progress(self, enrollment: Enrollment, video_id: int) -> VideoProgress:
        progress = next(
            (p for p in enrollment.video_progress if p.video_id == video_id), None
        )
        if progress is None:
            progress = VideoProgress(video_id=video_id, exam_attempts=0)
            enrollment.video_progress.append(progress)
        return progress

    def _refresh_self_paced_status(
        self, course: SelfPacedCourse, enrollment: Enrollment
    ) -> None:
        self.db.flush()
        course_status = course.progress_status(enrollment)
        if (
            course_status == ProgressStatus.COMPLETED.value
            and enrollment.course_status != ProgressStatus.COMPLETED.value
        ):
            enrollment.completion_date = utcnow()
        enrollment.course_status = course_status

    def _self_paced_summary(
        self, course: SelfPacedCourse, enrollment: Enrollment, exam_passed=None
    ) -> dict:
        return {
            "course_id": course.id,
            "course_status": enrollment.course_status,
            "progress_percentage": course.progress_percentage(enrollment),
            "videos_completed": sum(
                1 for p in enrollment.video_progress if p.video_completed
            ),
            "total_videos": len(course.videos),
            "exam_passed": exam_passed,
        }

    @db_exception
    def complete_video(self, user: User, data: VideoCompleteRequest) -> dict:
        course = self.course_service.get_course_or_404(
            CourseType.SELF_PACED, data.course_id
        )
        enrollment = self._get_enrolled(user.id, CourseType.SELF_PACED, course.id)
        self._get_video(course, data.video_id)

        progress = self._video_progress(enrollment, data.video_id)
        if not progress.video_completed:
            progress.video_completed = True
            progress.completed_at = utcnow()

        self._refresh_self_paced_status(course, enrollment)
        self.db.commit()
        return self._self_paced_summary(course, enrollment)

    @db_exception
    def submit_exam(self, user: User, data: ExamSubmitRequest) -> dict:
        course = self.course_service.get_course_or_404(
            CourseType.SELF_PACED, data.course_id
        )
        enrollment = self._get_enrolled(user.id, CourseType.SELF_PACED, course.id)
        video = self._get_video(course, data.video_id)
        if not video.has_exam:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This video has no exam",
            )

        progress = self._video_progress(enrollment, video.id)
        progress.exam_attempts = (progress.exam_attempts or 0) + 1
        if progress.exam_score is None or data.score > progress.exam_score:
            progress.exam_score = data.score

        passed = data.score >= video.exam_passing_score
        if passed:
            progress.exam_completed = True

        self._refresh_self_paced_status(course, enrollment)
        self.db.commit()
        logger.info(
            f"User {user.id} scored {data.score} on exam for video {video.id} "
            f"({'passed' if passed else 'failed'})"
        )
        return self._self_paced_summary(course, enrollment, exam_passed=passed)

    # ==================== Scheduled courses (admin) ====================

    @db_exception
    def record_attendance(self, data: AttendanceRecordRequest) -> dict:
        self.course_service.get_course_or_404(CourseType.IN_PERSON, data.course_id)
        enrollment = self._get_enrolled(
            data.user_id, CourseType.IN_PERSON, data.course_id
        )
        enrollment.attendance_records.append(
            AttendanceRecord(
                date=data.date,
                status=data.status,
                hours_attended=data.hours_attended,
            )
        )
        if enrollment.course_status == ProgressStatus.NOT_STARTED.value:
            enrollment.course_status = ProgressStatus.IN_PROGRESS.value

        self.db.commit()
        return self._enrollment_summary(enrollment)

    @db_exception
    def record_session(self, data: SessionAttendanceRequest) -> dict:
        self.course_service.get_course_or_404(CourseType.ONLINE_LIVE, data.course_id)
        enrollment = self._get_enrolled(
            data.user_id, CourseType.ONLINE_LIVE, data.course_id
        )
        enrollment.session_attendances.append(
            SessionAttendance(
                session_date=data.session_date,
                is_confirmed=data.is_confirmed,
                attendance_percentage=data.attendance_percentage,
            )
        )
        if enrollment.course_status == ProgressStatus.NOT_STARTED.value:
            enrollment.course_status = ProgressStatus.IN_PROGRESS.value

        self.db.commit()
        return self._enrollment_summary(enrollment)

    @db_exception
    def record_assessment(self, data: AssessmentScoreRequest) -> dict:
        course_type = resolve_course_type(data.course_type)
        self.course_service.get_course_or_404(course_type, data.course_id)
        enrollment = self._get_enrolled(data.user_id, course_type, data.course_id)

        now = utcnow()
        enrollment.assessment_score = data.score
        enrollment.assessment_completed = True
        enrollment.last_assessment_date = now
        if (
            enrollment.best_assessment_score is None
            or data.score > enrollment.best_assessment_score
        ):
            enrollment.best_assessment_score = data.score

        if data.mark_completed:
            enrollment.course_status = ProgressStatus.COMPLETED.value
            if enrollment.completion_date is None:
                enrollment.completion_date = now

        self.db.commit()
        logger.info(
            f"Recorded assessment {data.score} for user {data.user_id} "
            f"on {course_type.value}:{data.course_id}"
        )
        return self._enrollment_summary(enrollment)
