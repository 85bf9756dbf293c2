"""
Cart and wishlist, including the linked online course that comes bundled
with an in-person course.
"""

from datetime import timedelta
from decimal import Decimal

from app.models import Enrollment
from app.utils.timeutils import utcnow
from conftest import auth_headers


def _add(client, user, course, path="/cart"):
    return client.post(
        path,
        json={"courseId": course.id, "courseType": course.course_type.value},
        headers=auth_headers(user),
    )


def _remove(client, user, course, path="/cart"):
    return client.delete(
        path,
        params={"courseId": course.id, "courseType": course.course_type.value},
        headers=auth_headers(user),
    )


def _cart_rows(db, user):
    db.expire_all()
    return (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user.id, Enrollment.status == "cart")
        .all()
    )


def test_add_self_paced_course(client, db, user, self_paced_course):
    response = _add(client, user, self_paced_course)

    assert response.status_code == 201
    body = response.json()
    assert body["item"]["course_title"] == "Skincare Science Essentials"
    assert body["linked_item"] is None
    assert len(_cart_rows(db, user)) == 1


def test_add_in_person_brings_linked_online_course(
    client, db, user, linked_in_person_course, online_course
):
    response = _add(client, user, linked_in_person_course)

    assert response.status_code == 201
    body = response.json()
    linked = body["linked_item"]
    assert linked["course_id"] == online_course.id
    assert linked["course_type"] == "OnlineLiveTraining"
    assert linked["is_linked_course"] is True
    assert linked["is_linked_course_free"] is True
    assert Decimal(linked["paid_amount"]) == 0
    assert Decimal(linked["original_price"]) == Decimal("200")
    assert linked["parent_enrollment_id"] == body["item"]["enrollment_id"]

    cart = client.get("/cart", headers=auth_headers(user)).json()
    assert cart["count"] == 2
    assert Decimal(cart["subtotal"]) == Decimal("1700")
    assert Decimal(cart["total"]) == Decimal("1500")


def test_linked_course_with_custom_price(client, db, user, linked_in_person_course):
    linked_in_person_course.linked_is_free = False
    linked_in_person_course.linked_custom_price = 50
    db.commit()

    linked = _add(client, user, linked_in_person_course).json()["linked_item"]
    assert linked["is_linked_course_free"] is False
    assert Decimal(linked["paid_amount"]) == Decimal("50")


def test_optional_link_is_not_bundled(client, db, user, linked_in_person_course):
    linked_in_person_course.linked_is_required = False
    db.commit()

    response = _add(client, user, linked_in_person_course)
    assert response.json()["linked_item"] is None
    assert len(_cart_rows(db, user)) == 1


def test_already_owned_online_course_is_left_alone(
    client, db, user, linked_in_person_course, online_course, enroll
):
    owned = enroll(user, online_course, status="paid")

    response = _add(client, user, linked_in_person_course)

    assert response.status_code == 201
    assert response.json()["linked_item"] is None
    db.expire_all()
    assert owned.status == "paid"
    assert owned.is_linked_course is False


def test_removing_in_person_removes_linked_course(
    client, db, user, linked_in_person_course
):
    _add(client, user, linked_in_person_course)

    response = _remove(client, user, linked_in_person_course)

    assert response.status_code == 200
    assert response.json()["removed_linked_items"] == 1
    assert _cart_rows(db, user) == []


def test_removing_in_person_restores_online_course_added_earlier(
    client, db, user, linked_in_person_course, online_course
):
    _add(client, user, online_course)
    _add(client, user, linked_in_person_course)
    linked = [e for e in _cart_rows(db, user) if e.course_id == online_course.id][0]
    assert linked.is_linked_course is True
    assert linked.paid_amount == 0

    response = _remove(client, user, linked_in_person_course)

    assert response.status_code == 200
    assert response.json()["removed_linked_items"] == 0
    assert response.json()["restored_linked_items"] == 1
    rows = _cart_rows(db, user)
    assert len(rows) == 1
    assert rows[0].course_id == online_course.id
    assert rows[0].is_linked_course is False
    assert rows[0].parent_enrollment_id is None
    assert rows[0].paid_amount == Decimal("200")


def test_removing_in_person_returns_wishlisted_online_course(
    client, db, user, linked_in_person_course, online_course
):
    _add(client, user, online_course, path="/wishlist")
    _add(client, user, linked_in_person_course)

    _remove(client, user, linked_in_person_course)

    assert _cart_rows(db, user) == []
    row = db.query(Enrollment).filter_by(user_id=user.id).one()
    assert row.status == "wishlist"
    assert row.is_linked_course is False


def test_free_linked_course_cannot_be_removed_directly(
    client, db, user, linked_in_person_course, online_course
):
    _add(client, user, linked_in_person_course)

    response = _remove(client, user, online_course)

    assert response.status_code == 400
    assert "Remove the in-person course" in response.json()["detail"]
    assert len(_cart_rows(db, user)) == 2


def test_remove_missing_item_is_404(client, user, self_paced_course):
    assert _remove(client, user, self_paced_course).status_code == 404


def test_duplicate_cart_entry_rejected(client, user, self_paced_course):
    _add(client, user, self_paced_course)
    response = _add(client, user, self_paced_course)
    assert response.status_code == 400
    assert response.json()["detail"] == "Course already in cart"


def test_enrolled_course_cannot_be_added(client, user, self_paced_course, enroll):
    enroll(user, self_paced_course, status="paid")
    response = _add(client, user, self_paced_course)
    assert response.status_code == 400
    assert response.json()["detail"] == "Already enrolled in this course"


def test_unknown_course_is_404(client, user):
    response = client.post(
        "/cart",
        json={"courseId": 999, "courseType": "SelfPacedOnlineTraining"},
        headers=auth_headers(user),
    )
    assert response.status_code == 404


def test_invalid_course_type_is_400(client, user):
    response = client.post(
        "/cart",
        json={"courseId": 1, "courseType": "Webinar"},
        headers=auth_headers(user),
    )
    assert response.status_code == 400


def test_unpublished_self_paced_course_unavailable(client, db, user, self_paced_course):
    self_paced_course.status = "draft"
    db.commit()
    response = _add(client, user, self_paced_course)
    assert response.status_code == 400
    assert response.json()["detail"] == "Course is not available"


def test_full_in_person_course_unavailable(
    client, db, user, make_user, in_person_course, enroll
):
    in_person_course.seats_available = 1
    db.commit()
    enroll(make_user(first_name="Nadia", last_name="Karim"), in_person_course)

    response = _add(client, user, in_person_course)
    assert response.status_code == 400
    assert response.json()["detail"] == "No seats available for this course"


def test_started_online_course_unavailable(client, db, user, online_course):
    online_course.start_date = utcnow() - timedelta(hours=1)
    db.commit()
    response = _add(client, user, online_course)
    assert response.status_code == 400
    assert response.json()["detail"] == "Course has already started"


def test_wishlist_then_cart(client, db, user, self_paced_course):
    response = _add(client, user, self_paced_course, path="/wishlist")
    assert response.status_code == 201

    wishlist = client.get("/wishlist", headers=auth_headers(user)).json()
    assert wishlist["count"] == 1

    assert _add(client, user, self_paced_course, path="/wishlist").status_code == 400

    assert _add(client, user, self_paced_course).status_code == 201
    assert client.get("/wishlist", headers=auth_headers(user)).json()["count"] == 0
    assert client.get("/cart", headers=auth_headers(user)).json()["count"] == 1


def test_remove_from_wishlist(client, user, self_paced_course):
    _add(client, user, self_paced_course, path="/wishlist")
    assert _remove(client, user, self_paced_course, path="/wishlist").status_code == 200
    assert _remove(client, user, self_paced_course, path="/wishlist").status_code == 404
