"""
Learner self-paced progress and admin progress recording.
"""

from datetime import timedelta

from app.models import Enrollment
from app.utils.timeutils import utcnow
from conftest import auth_headers


def test_self_paced_progress_to_completion(client, db, user, self_paced_course, enroll):
    enroll(user, self_paced_course)
    exam_video, plain_video = self_paced_course.videos
    headers = auth_headers(user)

    response = client.post(
        "/progress/self-paced/videos",
        json={"course_id": self_paced_course.id, "video_id": exam_video.id},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["course_status"] == "in-progress"
    assert response.json()["progress_percentage"] == 50

    client.post(
        "/progress/self-paced/videos",
        json={"course_id": self_paced_course.id, "video_id": plain_video.id},
        headers=headers,
    )

    failed = client.post(
        "/progress/self-paced/exams",
        json={"course_id": self_paced_course.id, "video_id": exam_video.id, "score": 50},
        headers=headers,
    )
    assert failed.json()["exam_passed"] is False
    assert failed.json()["course_status"] == "in-progress"

    passed = client.post(
        "/progress/self-paced/exams",
        json={"course_id": self_paced_course.id, "video_id": exam_video.id, "score": 85},
        headers=headers,
    )
    assert passed.json()["exam_passed"] is True
    assert passed.json()["course_status"] == "completed"

    db.expire_all()
    enrollment = db.query(Enrollment).filter_by(user_id=user.id).one()
    assert enrollment.completion_date is not None
    assert enrollment.video_progress[0].exam_attempts == 2


def test_exam_on_video_without_exam(client, user, self_paced_course, enroll):
    enroll(user, self_paced_course)
    plain_video = self_paced_course.videos[1]

    response = client.post(
        "/progress/self-paced/exams",
        json={"course_id": self_paced_course.id, "video_id": plain_video.id, "score": 90},
        headers=auth_headers(user),
    )
    assert response.status_code == 400


def test_progress_requires_enrollment(client, user, self_paced_course):
    response = client.post(
        "/progress/self-paced/videos",
        json={
            "course_id": self_paced_course.id,
            "video_id": self_paced_course.videos[0].id,
        },
        headers=auth_headers(user),
    )
    assert response.status_code == 404


def test_admin_records_attendance_and_assessment(
    client, db, admin, user, in_person_course, enroll
):
    enroll(user, in_person_course)
    headers = auth_headers(admin)

    response = client.post(
        "/admin/progress/attendance",
        json={
            "user_id": user.id,
            "course_id": in_person_course.id,
            "date": (utcnow() - timedelta(days=1)).isoformat(),
            "hours_attended": 8,
        },
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["attendance_records"] == 1
    assert response.json()["course_status"] == "in-progress"

    for score in (82, 64):
        response = client.post(
            "/admin/progress/assessment",
            json={
                "user_id": user.id,
                "course_id": in_person_course.id,
                "course_type": "In-Person",
                "score": score,
                "mark_completed": True,
            },
            headers=headers,
        )
    body = response.json()
    assert body["assessment_score"] == 64
    assert body["best_assessment_score"] == 82
    assert body["course_status"] == "completed"


def test_admin_records_session(client, admin, user, online_course, enroll):
    enroll(user, online_course)

    response = client.post(
        "/admin/progress/sessions",
        json={
            "user_id": user.id,
            "course_id": online_course.id,
            "session_date": utcnow().isoformat(),
        },
        headers=auth_headers(admin),
    )
    assert response.status_code == 200
    assert response.json()["session_attendances"] == 1


def test_admin_progress_requires_admin(client, user, online_course):
    response = client.post(
        "/admin/progress/sessions",
        json={
            "user_id": user.id,
            "course_id": online_course.id,
            "session_date": utcnow().isoformat(),
        },
        headers=auth_headers(user),
    )
    assert response.status_code == 403
