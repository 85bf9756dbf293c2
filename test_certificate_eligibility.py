"""
Eligibility rules per course type, checked through CertificateService.
"""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from app.models import SelfPacedCourse, SessionAttendance, VideoProgress
from app.models.enrollment import AttendanceRecord
from app.services.certificate import CertificateService
from app.services.certificate_eligibility import (
    OnlineLiveEvaluator,
    SelfPacedEvaluator,
    _ScheduledCourseEvaluator,
)
from app.utils.timeutils import utcnow


def _finish(db, course):
    now = utcnow()
    course.start_date = now - timedelta(days=3)
    course.end_date = now - timedelta(days=2)
    db.commit()


def _require_quiz(db, course, passing_score=70):
    course.assessment_required = True
    course.assessment_type = "quiz"
    course.passing_score = passing_score
    db.commit()


def _check(db, user, course):
    return CertificateService(db).check_eligibility(
        user, course.id, course.course_type.value
    )


# ==================== Self-paced ====================


def test_self_paced_requires_every_video_and_exam(db, user, self_paced_course, enroll):
    enrollment = enroll(user, self_paced_course)
    exam_video, plain_video = self_paced_course.videos

    result = _check(db, user, self_paced_course)
    assert result["eligible"] is False
    assert "2 of 2 videos not yet completed" in result["reasons"]
    assert "1 video exams not yet passed" in result["reasons"]

    enrollment.video_progress.append(
        VideoProgress(video_id=exam_video.id, video_completed=True)
    )
    enrollment.video_progress.append(
        VideoProgress(video_id=plain_video.id, video_completed=True)
    )
    db.commit()

    result = _check(db, user, self_paced_course)
    assert result["eligible"] is False
    assert result["reasons"] == ["1 video exams not yet passed"]

    progress = next(p for p in enrollment.video_progress if p.video_id == exam_video.id)
    progress.exam_completed = True
    progress.exam_score = 88
    db.commit()

    result = _check(db, user, self_paced_course)
    assert result["eligible"] is True
    assert result["reasons"] == []
    assert result["assessment_score"] == 88


def test_self_paced_evaluator_reports_completed_status(db, user, self_paced_course, enroll):
    enrollment = enroll(user, self_paced_course)
    for video in self_paced_course.videos:
        enrollment.video_progress.append(
            VideoProgress(
                video_id=video.id, video_completed=True, exam_completed=video.has_exam
            )
        )
    db.commit()

    result = SelfPacedEvaluator().evaluate(enrollment, self_paced_course, utcnow())
    assert result.eligible
    assert result.progress_status == "completed"
    assert result.attendance_percentage == 100.0


def test_self_paced_course_without_videos_is_not_eligible(db, user, enroll):
    course = SelfPacedCourse(
        title="Injectables Primer",
        course_code="SP-INJ-00",
        status="published",
        price=49,
    )
    db.add(course)
    db.commit()
    enrollment = enroll(user, course)

    assert course.progress_status(enrollment) == "not-started"
    assert course.is_certificate_eligible(enrollment) is False

    result = _check(db, user, course)
    assert result["eligible"] is False
    assert result["reasons"] == ["Course has no videos to complete yet"]


def test_self_paced_expired_access_is_not_found(db, user, self_paced_course, enroll):
    enroll(user, self_paced_course, expiry_date=utcnow() - timedelta(days=1))

    with pytest.raises(HTTPException) as exc:
        _check(db, user, self_paced_course)
    assert exc.value.status_code == 404


# ==================== Scheduled courses ====================


def test_future_end_date_is_never_eligible(db, user, online_course, enroll):
    enroll(user, online_course, course_status="completed", assessment_score=100)

    result = _check(db, user, online_course)
    assert result["eligible"] is False
    assert "Course has not ended yet" in result["reasons"]


def test_start_date_is_used_when_no_end_date(db, user, online_course, enroll):
    online_course.start_date = utcnow() - timedelta(days=1)
    online_course.end_date = None
    db.commit()
    enroll(user, online_course, course_status="completed")

    assert _check(db, user, online_course)["eligible"] is True


def test_course_without_schedule_has_not_ended(db, user, online_course, enroll):
    online_course.start_date = None
    online_course.end_date = None
    db.commit()
    enroll(user, online_course, course_status="completed")

    result = _check(db, user, online_course)
    assert result["reasons"] == ["Course has not ended yet"]


def test_attendance_must_be_confirmed(db, user, online_course, enroll):
    _finish(db, online_course)
    enrollment = enroll(user, online_course)

    result = _check(db, user, online_course)
    assert result["reasons"] == ["Attendance has not been confirmed"]

    enrollment.session_attendances.append(
        SessionAttendance(session_date=utcnow() - timedelta(days=2), is_confirmed=True)
    )
    db.commit()
    assert _check(db, user, online_course)["eligible"] is True


@pytest.mark.parametrize("score, eligible", [(69, False), (70, True), (95, True)])
def test_passing_score_boundary_is_inclusive(db, user, online_course, enroll, score, eligible):
    _finish(db, online_course)
    _require_quiz(db, online_course)
    enroll(user, online_course, course_status="completed", assessment_score=score)

    result = _check(db, user, online_course)
    assert result["eligible"] is eligible
    if not eligible:
        assert result["reasons"] == [
            "Assessment score 69 is below the passing score of 70"
        ]


def test_online_best_score_wins_over_last_score(db, user, online_course, enroll):
    _finish(db, online_course)
    _require_quiz(db, online_course)
    enroll(
        user,
        online_course,
        course_status="completed",
        assessment_score=60,
        best_assessment_score=82,
    )

    result = _check(db, user, online_course)
    assert result["eligible"] is True
    assert result["assessment_score"] == 82


def test_missing_assessment_is_reported(db, user, in_person_course, enroll):
    _finish(db, in_person_course)
    _require_quiz(db, in_person_course)
    enroll(user, in_person_course, course_status="completed")

    result = _check(db, user, in_person_course)
    assert result["reasons"] == ["Assessment has not been completed"]


def test_in_person_uses_attendance_records(db, user, in_person_course, enroll):
    _finish(db, in_person_course)
    enrollment = enroll(user, in_person_course)
    enrollment.attendance_records.append(
        AttendanceRecord(date=utcnow() - timedelta(days=3), hours_attended=6)
    )
    db.commit()

    result = _check(db, user, in_person_course)
    assert result["eligible"] is True
    assert result["attendance_percentage"] == 75.0


def test_in_person_requires_linked_online_enrollment(
    db, user, linked_in_person_course, online_course, enroll
):
    _finish(db, linked_in_person_course)
    enroll(user, linked_in_person_course, course_status="completed")

    result = _check(db, user, linked_in_person_course)
    assert result["eligible"] is False
    assert result["reasons"] == [
        "Enrollment in the linked online course 'Botox Foundations Live' is required"
    ]


def test_in_person_requires_linked_online_completion(
    db, user, linked_in_person_course, online_course, enroll
):
    _finish(db, linked_in_person_course)
    enroll(user, linked_in_person_course, course_status="completed")
    online_enrollment = enroll(user, online_course)

    result = _check(db, user, linked_in_person_course)
    assert result["reasons"] == [
        "The linked online course 'Botox Foundations Live' must be completed first"
    ]

    online_enrollment.course_status = "completed"
    db.commit()
    assert _check(db, user, linked_in_person_course)["eligible"] is True


def test_suppressed_online_certificate(db, user, linked_in_person_course, online_course, enroll):
    online_course.suppress_certificate = True
    _finish(db, online_course)
    enroll(user, online_course, course_status="completed")

    result = _check(db, user, online_course)
    assert result["eligible"] is False
    assert result["reasons"] == [
        "Certificate is issued with the linked in-person course"
    ]


def test_cart_entry_is_not_an_enrollment(db, user, online_course, enroll):
    enroll(user, online_course, status="cart")

    with pytest.raises(HTTPException) as exc:
        _check(db, user, online_course)
    assert exc.value.status_code == 404


def test_invalid_course_type_is_rejected(db, user):
    with pytest.raises(HTTPException) as exc:
        CertificateService(db).check_eligibility(user, 1, "Webinar")
    assert exc.value.status_code == 400


def test_scheduled_evaluator_base_is_abstract():
    with pytest.raises(TypeError):
        _ScheduledCourseEvaluator()

    assert isinstance(OnlineLiveEvaluator(), _ScheduledCourseEvaluator)
