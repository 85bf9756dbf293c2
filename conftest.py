"""
Shared pytest fixtures: an in-memory database, a TestClient and
factories for users, courses and enrollments.
"""

import os
import tempfile
from datetime import timedelta

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REDIS_URL"] = "memory://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["CERTIFICATE_SECRET"] = "test-certificate-secret"
os.environ["LOG_FILE"] = os.path.join(tempfile.gettempdir(), "training-platform-tests.log")

import pytest
from fastapi.testclient import TestClient

from app.core.database import Base, SessionLocal, engine
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models import (
    Enrollment,
    InPersonCourse,
    OnlineLiveCourse,
    SelfPacedCourse,
    SelfPacedVideo,
    User,
)
from app.utils.timeutils import utcnow
from main import app


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {jwt_manager.create_access_token(user)}"}


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="student", first_name="Layla", last_name="Hassan"):
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            hashed_password=PasswordHelper.hash_password("password123"),
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(role="admin", first_name="Platform", last_name="Admin")


@pytest.fixture
def online_course(db):
    course = OnlineLiveCourse(
        title="Botox Foundations Live",
        course_code="OL-BTX-01",
        status="open",
        price=200,
        currency="USD",
        start_date=utcnow() + timedelta(days=10),
        end_date=utcnow() + timedelta(days=11),
        duration="8 hours",
        platform_name="Zoom",
        total_sessions=2,
        passing_score=70,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def in_person_course(db):
    course = InPersonCourse(
        title="Advanced Dermal Filler Masterclass",
        course_code="IP-FIL-01",
        status="open",
        price=1500,
        currency="USD",
        start_date=utcnow() + timedelta(days=20),
        end_date=utcnow() + timedelta(days=21),
        duration="2 days",
        seats_available=10,
        venue_city="Dubai",
        venue_country="UAE",
        materials_count=3,
        passing_score=70,
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def linked_in_person_course(db, in_person_course, online_course):
    """In-person course that requires its online course, included for free."""
    in_person_course.linked_online_course_id = online_course.id
    in_person_course.linked_is_required = True
    in_person_course.linked_is_free = True
    in_person_course.linked_relationship = "prerequisite"
    online_course.linked_in_person_course_id = in_person_course.id
    online_course.linked_to_in_person = True
    online_course.linked_type = "prerequisite"
    db.commit()
    db.refresh(in_person_course)
    return in_person_course


@pytest.fixture
def self_paced_course(db):
    course = SelfPacedCourse(
        title="Skincare Science Essentials",
        course_code="SP-SKN-01",
        status="published",
        price=99,
        currency="USD",
        access_days=180,
    )
    course.videos = [
        SelfPacedVideo(title="Skin anatomy", sequence=1, has_exam=True),
        SelfPacedVideo(title="Product chemistry", sequence=2, has_exam=False),
    ]
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def enroll(db):
    def _enroll(user, course, status="paid", **fields):
        values = dict(
            user_id=user.id,
            course_type=course.course_type.value,
            course_id=course.id,
            status=status,
            original_price=course.price,
            paid_amount=course.price,
            currency=course.currency,
        )
        values.update(fields)
        enrollment = Enrollment(**values)
        db.add(enrollment)
        db.commit()
        db.refresh(enrollment)
        return enrollment

    return _enroll
