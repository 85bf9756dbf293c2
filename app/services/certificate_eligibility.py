# app/services/certificate_eligibility.py
"""
Certificate eligibility rules, one evaluator per course type.

Evaluators are read-only: they look at an enrollment and its course and
return an ``EligibilityResult``. Issuing the certificate is done by
``CertificateService``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from app.models.course_type import CourseType, ProgressStatus
from app.models.enrollment import Enrollment
from app.models.in_person_course import InPersonCourse
from app.models.online_live_course import OnlineLiveCourse
from app.models.self_paced_course import SelfPacedCourse


@dataclass
class EligibilityResult:
    eligible: bool
    reasons: List[str] = field(default_factory=list)
    attendance_percentage: Optional[float] = None
    assessment_score: Optional[float] = None
    progress_status: Optional[str] = None


class SelfPacedEvaluator:
    def evaluate(
        self, enrollment: Enrollment, course: SelfPacedCourse, now: datetime
    ) -> EligibilityResult:
        progress_status = course.progress_status(enrollment)

        completed_videos = {
            p.video_id for p in enrollment.video_progress if p.video_completed
        }
        completed_exams = {
            p.video_id for p in enrollment.video_progress if p.exam_completed
        }

        reasons = []
        if not course.videos:
            reasons.append("Course has no videos to complete yet")
        missing_videos = [v for v in course.videos if v.id not in completed_videos]
        if missing_videos:
            reasons.append(
                f"{len(missing_videos)} of {len(course.videos)} videos not yet completed"
            )
        missing_exams = [
            v for v in course.videos if v.has_exam and v.id not in completed_exams
        ]
        if missing_exams:
            reasons.append(f"{len(missing_exams)} video exams not yet passed")

        scores = [
            p.exam_score
            for p in enrollment.video_progress
            if p.exam_completed and p.exam_score is not None
        ]
        average_score = round(sum(scores) / len(scores), 2) if scores else None

        return EligibilityResult(
            eligible=course.is_certificate_eligible(enrollment),
            reasons=reasons,
            attendance_percentage=100.0,
            assessment_score=average_score,
            progress_status=progress_status,
        )


class _ScheduledCourseEvaluator(ABC):
    """Shared end-date, attendance and assessment rules for scheduled courses."""

    @abstractmethod
    def _has_attendance(self, enrollment: Enrollment) -> bool:
        """Whether any attendance was recorded for the enrollment."""

    @abstractmethod
    def _score(self, enrollment: Enrollment) -> Optional[float]:
        """The assessment score compared against the passing score."""

    def _check_schedule_attendance_assessment(
        self, enrollment: Enrollment, course, now: datetime
    ) -> List[str]:
        reasons = []

        if not course.has_ended(now):
            reasons.append("Course has not ended yet")

        completed = enrollment.course_status == ProgressStatus.COMPLETED.value
        if not (self._has_attendance(enrollment) or completed):
            reasons.append("Attendance has not been confirmed")

        if course.requires_assessment:
            score = self._score(enrollment)
            if score is None:
                reasons.append("Assessment has not been completed")
            elif score < course.passing_score:
                reasons.append(
                    f"Assessment score {score:g} is below the passing score of {course.passing_score}"
                )

        return reasons


class OnlineLiveEvaluator(_ScheduledCourseEvaluator):
    def _has_attendance(self, enrollment: Enrollment) -> bool:
        return bool(enrollment.session_attendances)

    def _score(self, enrollment: Enrollment) -> Optional[float]:
        if enrollment.best_assessment_score is not None:
            return enrollment.best_assessment_score
        return enrollment.assessment_score

    def evaluate(
        self, enrollment: Enrollment, course: OnlineLiveCourse, now: datetime
    ) -> EligibilityResult:
        reasons = []
        if course.certificate_suppressed:
            reasons.append(
                "Certificate is issued with the linked in-person course"
            )
        reasons.extend(
            self._check_schedule_attendance_assessment(enrollment, course, now)
        )

        return EligibilityResult(
            eligible=not reasons,
            reasons=reasons,
            attendance_percentage=course.attendance_percentage(enrollment),
            assessment_score=self._score(enrollment),
            progress_status=enrollment.course_status,
        )


class InPersonEvaluator(_ScheduledCourseEvaluator):
    def __init__(self, linked_enrollment: Optional[Enrollment] = None):
        # the user's enrollment in the course's linked online course, if any
        self.linked_enrollment = linked_enrollment

    def _has_attendance(self, enrollment: Enrollment) -> bool:
        return bool(enrollment.attendance_records)

    def _score(self, enrollment: Enrollment) -> Optional[float]:
        return enrollment.assessment_score

    def evaluate(
        self, enrollment: Enrollment, course: InPersonCourse, now: datetime
    ) -> EligibilityResult:
        if course.has_required_linked_course:
            linkage = course.can_issue_certificate(self.linked_enrollment)
            if not linkage["eligible"]:
                return EligibilityResult(
                    eligible=False,
                    reasons=[linkage["reason"]],
                    attendance_percentage=course.attendance_percentage(enrollment),
                    assessment_score=self._score(enrollment),
                    progress_status=enrollment.course_status,
                )

        reasons = self._check_schedule_attendance_assessment(enrollment, course, now)

        return EligibilityResult(
            eligible=not reasons,
            reasons=reasons,
            attendance_percentage=course.attendance_percentage(enrollment),
            assessment_score=self._score(enrollment),
            progress_status=enrollment.course_status,
        )


_EVALUATORS: Dict[CourseType, type] = {
    CourseType.SELF_PACED: SelfPacedEvaluator,
    CourseType.ONLINE_LIVE: OnlineLiveEvaluator,
}


def get_evaluator(
    course_type: CourseType, linked_enrollment: Optional[Enrollment] = None
):
    if course_type == CourseType.IN_PERSON:
        return InPersonEvaluator(linked_enrollment)
    return _EVALUATORS[course_type]()
