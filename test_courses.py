"""
Public catalog and admin course management, including linked courses.
"""

from datetime import timedelta
from decimal import Decimal

from app.models import CourseCertificationBody, InPersonCourse, OnlineLiveCourse
from conftest import auth_headers


def test_list_courses_by_alias(client, in_person_course, online_course):
    response = client.get("/courses/in-person")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["total_pages"] == 1
    assert body["courses"][0]["course_code"] == "IP-FIL-01"
    assert body["courses"][0]["course_type"] == "InPersonAestheticTraining"


def test_list_courses_search_and_filter(client, online_course):
    assert client.get("/courses/online-live", params={"search": "botox"}).json()[
        "total"
    ] == 1
    assert client.get("/courses/online-live", params={"status": "draft"}).json()[
        "total"
    ] == 0


def test_get_course_detail(client, self_paced_course):
    response = client.get(f"/courses/SelfPacedOnlineTraining/{self_paced_course.id}")

    assert response.status_code == 200
    body = response.json()
    assert body["access_days"] == 180
    assert [v["title"] for v in body["videos"]] == ["Skin anatomy", "Product chemistry"]


def test_unknown_course_type_and_id(client):
    assert client.get("/courses/webinar").status_code == 400
    assert client.get("/courses/self-paced/42").status_code == 404


def test_admin_creates_course_with_staff(client, db, admin):
    headers = auth_headers(admin)
    instructor = client.post(
        "/admin/instructors",
        json={"first_name": "Sara", "last_name": "Nour", "credentials": ["MD"]},
        headers=headers,
    ).json()
    body = client.post(
        "/admin/certification-bodies",
        json={"company_name": "Aesthetic Board", "display_name": "AB"},
        headers=headers,
    ).json()

    response = client.post(
        "/admin/courses/in-person",
        json={
            "title": "Laser Safety",
            "course_code": "IP-LSR-01",
            "status": "open",
            "price": 900,
            "seats_available": 12,
            "instructors": [{"instructor_id": instructor["id"], "is_primary": True}],
            "certification_bodies": [
                {"body_id": body["id"], "role": "issuer", "is_primary": True}
            ],
        },
        headers=headers,
    )

    assert response.status_code == 201
    assert response.json()["seats_available"] == 12
    assert db.query(CourseCertificationBody).count() == 1


def test_admin_course_code_must_be_unique(client, admin, online_course):
    response = client.post(
        "/admin/courses/online-live",
        json={"title": "Copy", "course_code": online_course.course_code},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400


def test_admin_unknown_instructor(client, admin):
    response = client.post(
        "/admin/courses/self-paced",
        json={
            "title": "Injectables 101",
            "course_code": "SP-INJ-01",
            "instructors": [{"instructor_id": 99}],
        },
        headers=auth_headers(admin),
    )
    assert response.status_code == 404


def test_admin_creates_self_paced_with_videos(client, admin):
    response = client.post(
        "/admin/courses/self-paced",
        json={
            "title": "Injectables 101",
            "course_code": "SP-INJ-01",
            "status": "published",
            "videos": [
                {"title": "Intro", "sequence": 1},
                {"title": "Technique", "sequence": 2, "has_exam": True},
            ],
        },
        headers=auth_headers(admin),
    )
    assert response.status_code == 201
    assert len(response.json()["videos"]) == 2


def test_student_cannot_create_course(client, user):
    response = client.post(
        "/admin/courses/online-live",
        json={"title": "Nope", "course_code": "NOPE"},
        headers=auth_headers(user),
    )
    assert response.status_code == 403


def test_link_and_unlink_online_course(client, db, admin, in_person_course, online_course):
    headers = auth_headers(admin)
    url = f"/admin/courses/in-person/{in_person_course.id}/linked-course"

    assert client.get(url, headers=headers).json() is None

    linkable = client.get("/admin/courses/online-live/linkable", headers=headers).json()
    assert [c["id"] for c in linkable] == [online_course.id]

    response = client.put(
        url,
        json={
            "online_course_id": online_course.id,
            "relationship": "prerequisite",
            "is_required": True,
            "suppress_online_certificate": True,
        },
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["course_title"] == "OL-BTX-01 - Botox Foundations Live"
    assert response.json()["is_free"] is True

    db.expire_all()
    online = db.get(OnlineLiveCourse, online_course.id)
    assert online.linked_in_person_course_id == in_person_course.id
    assert online.certificate_suppressed is True

    assert client.delete(url, headers=headers).status_code == 200
    db.expire_all()
    assert db.get(InPersonCourse, in_person_course.id).linked_online_course_id is None
    assert db.get(OnlineLiveCourse, online_course.id).linked_to_in_person is False


def test_link_to_unknown_online_course(client, admin, in_person_course):
    response = client.put(
        f"/admin/courses/in-person/{in_person_course.id}/linked-course",
        json={"online_course_id": 404, "relationship": "supplementary"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 404


def test_early_bird_pricing_window(db, online_course):
    online_course.early_bird_price = 150
    online_course.early_bird_days = 3
    db.commit()
    deadline = online_course.early_bird_deadline

    early = online_course.pricing(deadline - timedelta(hours=1))
    late = online_course.pricing(deadline + timedelta(hours=1))

    assert early["is_early_bird"] is True
    assert early["current_price"] == Decimal("150")
    assert early["early_bird_savings"] == Decimal("50")
    assert late["is_early_bird"] is False
    assert late["current_price"] == Decimal("200")
    assert late["early_bird_price"] == Decimal("150")
    assert late["early_bird_savings"] == 0


def test_pricing_without_early_bird(self_paced_course, in_person_course):
    assert in_person_course.early_bird_deadline is None
    assert in_person_course.pricing()["current_price"] == Decimal("1500")
    assert self_paced_course.pricing()["early_bird_price"] is None
