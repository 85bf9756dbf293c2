"""
Repair sweep for linked-course cart entries.
"""

from decimal import Decimal

from app.models import Enrollment
from app.services.linked_course import LinkedCourseRepairService
from conftest import auth_headers


def _primary_and_companion(db, user, in_person_course, online_course, enroll):
    primary = enroll(user, in_person_course, status="cart")
    companion = enroll(
        user,
        online_course,
        status="cart",
        paid_amount=Decimal("0"),
        is_linked_course=True,
        is_linked_course_free=True,
        parent_enrollment_id=primary.id,
    )
    return primary, companion


def test_orphaned_companion_is_removed(
    db, user, linked_in_person_course, online_course, enroll
):
    primary, companion = _primary_and_companion(
        db, user, linked_in_person_course, online_course, enroll
    )
    primary.status = "cancelled"
    db.commit()
    companion_id = companion.id

    result = LinkedCourseRepairService(db).repair()

    assert result["orphaned_removed"] == 1
    assert db.get(Enrollment, companion_id) is None


def test_companion_without_parent_is_removed(db, user, online_course, enroll):
    orphan = enroll(
        user,
        online_course,
        status="cart",
        is_linked_course=True,
        is_linked_course_free=True,
    )
    orphan_id = orphan.id

    result = LinkedCourseRepairService(db).repair()

    assert result["orphaned_found"] == 1
    assert db.get(Enrollment, orphan_id) is None


def test_healthy_pair_is_untouched(db, user, linked_in_person_course, online_course, enroll):
    _primary_and_companion(db, user, linked_in_person_course, online_course, enroll)

    result = LinkedCourseRepairService(db).repair()

    assert result == {
        "orphaned_removed": 0,
        "orphaned_unlinked": 0,
        "companions_restored": 0,
        "orphaned_found": 0,
        "missing_found": 0,
    }


def test_missing_companion_is_restored(
    db, user, linked_in_person_course, online_course, enroll
):
    primary = enroll(user, linked_in_person_course, status="cart")

    result = LinkedCourseRepairService(db).repair()

    assert result["missing_found"] == 1
    assert result["companions_restored"] == 1
    db.expire_all()
    companion = (
        db.query(Enrollment)
        .filter_by(user_id=user.id, course_type="OnlineLiveTraining")
        .one()
    )
    assert companion.status == "cart"
    assert companion.parent_enrollment_id == primary.id
    assert companion.is_linked_course_free is True


def test_dry_run_changes_nothing(
    db, user, linked_in_person_course, online_course, enroll
):
    primary, companion = _primary_and_companion(
        db, user, linked_in_person_course, online_course, enroll
    )
    primary.status = "cancelled"
    db.commit()

    result = LinkedCourseRepairService(db).repair(dry_run=True)

    assert result["orphaned_found"] == 1
    assert result["orphaned_removed"] == 0
    db.expire_all()
    assert db.query(Enrollment).filter_by(is_linked_course=True).count() == 1


def test_admin_repair_endpoint(client, db, admin, user, online_course, enroll):
    enroll(user, online_course, status="cart", is_linked_course=True)

    response = client.post(
        "/admin/linked-courses/repair",
        params={"dry_run": "true"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["orphaned_found"] == 1
