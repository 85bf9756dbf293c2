"""
Checkout of the cart into a payment transaction and its completion.
"""

from datetime import timedelta
from decimal import Decimal

from app.models import Enrollment, PaymentTransaction, PromoCode
from app.utils.timeutils import ensure_utc, utcnow
from conftest import auth_headers


def _add(client, user, course):
    return client.post(
        "/cart",
        json={"courseId": course.id, "courseType": course.course_type.value},
        headers=auth_headers(user),
    )


def test_checkout_excludes_free_linked_course(client, db, user, linked_in_person_course):
    _add(client, user, linked_in_person_course)

    response = client.post("/checkout", headers=auth_headers(user))

    assert response.status_code == 201
    transaction = response.json()
    assert transaction["payment_status"] == "pending"
    assert transaction["order_number"].startswith("ORD-")
    assert Decimal(transaction["subtotal"]) == Decimal("1700")
    assert Decimal(transaction["final_amount"]) == Decimal("1500")
    assert Decimal(transaction["discount_amount"]) == Decimal("200")
    assert len(transaction["items"]) == 2
    free_items = [i for i in transaction["items"] if i["is_linked_course_free"]]
    assert len(free_items) == 1
    assert Decimal(free_items[0]["paid_amount"]) == 0


def test_checkout_empty_cart(client, user):
    response = client.post("/checkout", headers=auth_headers(user))
    assert response.status_code == 400
    assert response.json()["detail"] == "Cart is empty"


def test_free_cart_completes_immediately(client, db, user, self_paced_course):
    self_paced_course.price = 0
    db.commit()
    _add(client, user, self_paced_course)

    response = client.post(
        "/checkout", json={"payment_method": "voucher"}, headers=auth_headers(user)
    )

    assert response.status_code == 201
    assert response.json()["payment_status"] == "completed"
    assert response.json()["payment_method"] == "voucher"
    db.expire_all()
    enrollment = db.query(Enrollment).filter_by(user_id=user.id).one()
    assert enrollment.status == "paid"
    assert enrollment.expiry_date is not None


def test_admin_completes_transaction(client, db, user, admin, self_paced_course):
    _add(client, user, self_paced_course)
    order_number = client.post("/checkout", headers=auth_headers(user)).json()[
        "order_number"
    ]

    response = client.post(
        f"/admin/transactions/{order_number}/complete",
        json={"gateway_reference": "gw_123"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["payment_status"] == "completed"
    assert response.json()["gateway_reference"] == "gw_123"

    db.expire_all()
    enrollment = db.query(Enrollment).filter_by(user_id=user.id).one()
    assert enrollment.status == "paid"
    expected = utcnow() + timedelta(days=self_paced_course.access_days)
    assert abs(ensure_utc(enrollment.expiry_date) - expected) < timedelta(minutes=1)

    again = client.post(
        f"/admin/transactions/{order_number}/complete", headers=auth_headers(admin)
    )
    assert again.status_code == 400


def test_complete_unknown_transaction(client, admin):
    response = client.post(
        "/admin/transactions/ORD-NOPE/complete", headers=auth_headers(admin)
    )
    assert response.status_code == 404


def test_completion_requires_admin(client, user):
    response = client.post(
        "/admin/transactions/ORD-NOPE/complete", headers=auth_headers(user)
    )
    assert response.status_code == 403


def test_list_transactions(client, db, user, self_paced_course):
    _add(client, user, self_paced_course)
    client.post("/checkout", headers=auth_headers(user))

    response = client.get("/checkout/transactions", headers=auth_headers(user))

    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert db.query(PaymentTransaction).count() == 1


def test_second_checkout_cancels_earlier_pending_transaction(
    client, db, user, admin, self_paced_course
):
    _add(client, user, self_paced_course)
    first = client.post("/checkout", headers=auth_headers(user)).json()

    second = client.post("/checkout", headers=auth_headers(user))

    assert second.status_code == 201
    db.expire_all()
    statuses = {
        t.order_number: t.payment_status for t in db.query(PaymentTransaction).all()
    }
    assert statuses == {
        first["order_number"]: "cancelled",
        second.json()["order_number"]: "pending",
    }
    enrollment = db.query(Enrollment).filter_by(user_id=user.id).one()
    current = db.query(PaymentTransaction).filter_by(payment_status="pending").one()
    assert enrollment.payment_transaction_id == current.id

    stale = client.post(
        f"/admin/transactions/{first['order_number']}/complete",
        headers=auth_headers(admin),
    )
    assert stale.status_code == 400
    assert stale.json()["detail"] == "Transaction is already cancelled"
    db.expire_all()
    assert enrollment.status == "cart"


# ==================== Promo codes ====================


def _promo(db, code="GLOW10", percentage=10, **fields):
    promo = PromoCode(code=code, discount_percentage=percentage, **fields)
    db.add(promo)
    db.commit()
    return promo


def test_checkout_applies_promo_code(client, db, user, self_paced_course):
    _promo(db)
    _add(client, user, self_paced_course)

    response = client.post(
        "/checkout", json={"promoCode": "glow10"}, headers=auth_headers(user)
    )

    assert response.status_code == 201
    transaction = response.json()
    assert transaction["promo_code"] == "GLOW10"
    assert Decimal(transaction["subtotal"]) == Decimal("99")
    assert Decimal(transaction["promo_discount"]) == Decimal("9.90")
    assert Decimal(transaction["discount_amount"]) == Decimal("9.90")
    assert Decimal(transaction["final_amount"]) == Decimal("89.10")


def test_full_discount_promo_completes_checkout(client, db, user, self_paced_course):
    _promo(db, code="FREEPASS", percentage=100)
    _add(client, user, self_paced_course)

    response = client.post(
        "/checkout", json={"promoCode": "FREEPASS"}, headers=auth_headers(user)
    )

    assert response.json()["payment_status"] == "completed"
    assert Decimal(response.json()["final_amount"]) == 0


def test_expired_promo_code_rejected(client, db, user, self_paced_course):
    _promo(db, expiry_date=utcnow() - timedelta(days=1))
    _add(client, user, self_paced_course)

    response = client.post(
        "/checkout", json={"promoCode": "GLOW10"}, headers=auth_headers(user)
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "This promo code has expired"
    assert db.query(PaymentTransaction).count() == 0


def test_unknown_or_inactive_promo_code_rejected(client, db, user, self_paced_course):
    _promo(db, is_active=False)
    _add(client, user, self_paced_course)

    for code in ("GLOW10", "NOPE"):
        response = client.post(
            "/checkout", json={"promoCode": code}, headers=auth_headers(user)
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired promo code"


def test_email_restricted_promo_code(client, db, user, self_paced_course):
    _promo(
        db,
        code="VIP20",
        percentage=20,
        restriction_type="email",
        allowed_emails=["someone.else@example.com"],
    )
    _add(client, user, self_paced_course)

    response = client.post(
        "/checkout", json={"promoCode": "VIP20"}, headers=auth_headers(user)
    )

    assert response.status_code == 400
    assert "not valid for your email" in response.json()["detail"]


def test_preview_promo_code(client, db, user, self_paced_course):
    _promo(db, code="HALF", percentage=50)
    _add(client, user, self_paced_course)

    response = client.post(
        "/checkout/promo-code", json={"promoCode": "half"}, headers=auth_headers(user)
    )

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == "HALF"
    assert Decimal(body["total"]) == Decimal("99")
    assert Decimal(body["discount_amount"]) == Decimal("49.50")
    assert Decimal(body["new_total"]) == Decimal("49.50")
    assert body["complete_registration"] is False
    assert db.query(PaymentTransaction).count() == 0


def test_admin_manages_promo_codes(client, db, admin):
    created = client.post(
        "/admin/promo-codes",
        json={
            "code": "spring25",
            "discount_percentage": 25,
            "restriction_type": "email",
            "allowed_emails": ["Layla@Example.com"],
        },
        headers=auth_headers(admin),
    )
    assert created.status_code == 201
    assert created.json()["code"] == "SPRING25"
    assert created.json()["allowed_emails"] == ["layla@example.com"]

    duplicate = client.post(
        "/admin/promo-codes",
        json={"code": "SPRING25", "discount_percentage": 10},
        headers=auth_headers(admin),
    )
    assert duplicate.status_code == 400

    listed = client.get("/admin/promo-codes", headers=auth_headers(admin))
    assert [p["code"] for p in listed.json()] == ["SPRING25"]

    promo_id = created.json()["id"]
    deleted = client.delete(
        f"/admin/promo-codes/{promo_id}", headers=auth_headers(admin)
    )
    assert deleted.status_code == 204
    assert db.query(PromoCode).count() == 0
    missing = client.delete(
        f"/admin/promo-codes/{promo_id}", headers=auth_headers(admin)
    )
    assert missing.status_code == 404


def test_promo_code_discount_out_of_range(client, admin):
    response = client.post(
        "/admin/promo-codes",
        json={"code": "TOOMUCH", "discount_percentage": 150},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_promo_codes_require_admin(client, user):
    response = client.get("/admin/promo-codes", headers=auth_headers(user))
    assert response.status_code == 403


# ==================== Early-bird pricing ====================


def test_checkout_uses_early_bird_price(client, db, user, in_person_course):
    in_person_course.early_bird_price = 1200
    in_person_course.early_bird_days = 5
    db.commit()
    _promo(db)

    added = _add(client, user, in_person_course)
    assert Decimal(added.json()["item"]["paid_amount"]) == Decimal("1200")

    response = client.post(
        "/checkout", json={"promoCode": "GLOW10"}, headers=auth_headers(user)
    )

    transaction = response.json()
    assert Decimal(transaction["subtotal"]) == Decimal("1500")
    assert Decimal(transaction["early_bird_savings"]) == Decimal("300")
    assert Decimal(transaction["promo_discount"]) == Decimal("120")
    assert Decimal(transaction["final_amount"]) == Decimal("1080")
    assert Decimal(transaction["discount_amount"]) == Decimal("420")


def test_early_bird_window_closed_at_checkout(client, db, user, in_person_course):
    in_person_course.early_bird_price = 1200
    in_person_course.early_bird_days = 5
    db.commit()
    _add(client, user, in_person_course)
    enrollment = db.query(Enrollment).filter_by(user_id=user.id).one()
    enrollment.registration_date = in_person_course.start_date - timedelta(days=2)
    db.commit()

    transaction = client.post("/checkout", headers=auth_headers(user)).json()

    assert Decimal(transaction["final_amount"]) == Decimal("1500")
    assert Decimal(transaction["early_bird_savings"]) == 0
