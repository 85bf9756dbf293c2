# app/services/certificate.py
import hashlib
import hmac
import json
import logging
import re
import secrets
import string
import time
from datetime import datetime
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import DBException
from app.models.achievement_summary import AchievementSummary
from app.models.certificate import Certificate
from app.models.course_type import CourseType, EnrollmentStatus, ProgressStatus
from app.models.enrollment import Enrollment
from app.models.user import User
from app.services.certificate_eligibility import EligibilityResult, get_evaluator
from app.services.course import AnyCourse, CourseService, resolve_course_type
from app.utils.timeutils import ensure_utc, utcnow

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_lowercase
HOURS_PER_DAY = 8
DEFAULT_TOTAL_HOURS = {
    CourseType.IN_PERSON: 16,
    CourseType.ONLINE_LIVE: 8,
    CourseType.SELF_PACED: 12,
}

GRADE_THRESHOLDS = [
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
]

ACHIEVEMENT_LEVELS = [
    (15, "Master"),
    (10, "Expert"),
    (7, "Advanced"),
    (3, "Intermediate"),
]

SPECIALIZATION_KEYWORDS = [
    ("botox", "Botox Administration"),
    ("filler", "Dermal Fillers"),
    ("laser", "Laser Therapy"),
    ("skincare", "Advanced Skincare"),
    ("aesthetic", "Aesthetic Medicine"),
    ("injectable", "Injectable Treatments"),
]
GENERAL_SPECIALIZATION = "General Aesthetics"


# ==================== Pure helpers ====================


def calculate_grade(score: Optional[float]) -> str:
    """Letter grade for a percentage score. Courses have no failing grade."""
    if score is None:
        return "Pass"
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "Pass"


def calculate_achievement_level(total_certificates: int) -> str:
    for threshold, level in ACHIEVEMENT_LEVELS:
        if total_certificates >= threshold:
            return level
    return "Beginner"


def classify_specialization(course_title: str) -> str:
    title = (course_title or "").lower()
    for keyword, specialization in SPECIALIZATION_KEYWORDS:
        if keyword in title:
            return specialization
    return GENERAL_SPECIALIZATION


def calculate_total_hours(course: AnyCourse) -> int:
    """
    Learning hours from the free-text duration ("16 hours", "2 days"),
    then from the scheduled date span, then a per-type default.
    """
    duration = (course.duration or "").lower()
    hours = re.search(r"(\d+)\s*h", duration)
    if hours:
        return int(hours.group(1))
    days = re.search(r"(\d+)\s*d", duration)
    if days:
        return int(days.group(1)) * HOURS_PER_DAY

    start = ensure_utc(course.start_date)
    end = ensure_utc(course.end_date)
    if start and end:
        return ((end.date() - start.date()).days + 1) * HOURS_PER_DAY

    return DEFAULT_TOTAL_HOURS[course.course_type]


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def generate_certificate_id() -> str:
    timestamp_ms = int(time.time() * 1000)
    return f"CERT-{to_base36(timestamp_ms)}-{random_base36(8)}".upper()


def generate_verification_code() -> str:
    return random_base36(16).upper()


def sign_certificate(
    recipient_name: str,
    course_title: str,
    completion_date: datetime,
    verification_code: str,
) -> str:
    """HMAC-SHA256 over the canonical certificate fields."""
    payload = json.dumps(
        {
            "recipientName": recipient_name,
            "courseTitle": course_title,
            "completionDate": ensure_utc(completion_date).isoformat(),
            "verificationCode": verification_code,
        }
    )
    return hmac.new(
        settings.certificate_secret.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def verify_certificate_signature(certificate: Certificate) -> bool:
    expected = sign_certificate(
        certificate.recipient_name,
        certificate.course_title,
        certificate.completion_date,
        certificate.verification_code,
    )
    return hmac.compare_digest(expected, certificate.digital_signature)


def delivery_method_for(course: AnyCourse) -> str:
    if course.course_type == CourseType.IN_PERSON:
        return f"In-Person Training at {course.location}"
    if course.course_type == CourseType.ONLINE_LIVE:
        return f"Live Online Training via {course.platform_name or 'Online Platform'}"
    return "Self-Paced Online Learning"


def verify_url_for(verification_code: str) -> str:
    return f"{settings.app_url.rstrip('/')}/certificates/verify/{verification_code}"


# ==================== Service ====================


class CertificateService:
    def __init__(self, db: Session):
        self.db = db
        self.course_service = CourseService(db)

    # -------- lookups --------

    def _find_enrollment(
        self, user_id: int, course_type: CourseType, course_id: int
    ) -> Optional[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(
                Enrollment.user_id == user_id,
                Enrollment.course_type == course_type.value,
                Enrollment.course_id == course_id,
            )
            .first()
        )

    def _get_active_enrollment(
        self, user_id: int, course_type: CourseType, course_id: int, now: datetime
    ) -> Enrollment:
        """The user's enrollment, provided it has been paid for or registered."""
        enrollment = self._find_enrollment(user_id, course_type, course_id)

        if course_type == CourseType.SELF_PACED:
            allowed = (EnrollmentStatus.PAID.value, EnrollmentStatus.REGISTERED.value)
            active = (
                enrollment is not None
                and enrollment.status in allowed
                and (
                    enrollment.expiry_date is None
                    or ensure_utc(enrollment.expiry_date) > now
                )
            )
        else:
            allowed = (
                EnrollmentStatus.PAID.value,
                EnrollmentStatus.REGISTERED.value,
                EnrollmentStatus.COMPLETED.value,
            )
            active = enrollment is not None and enrollment.status in allowed

        if not active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Enrollment not found or not active for this course",
            )
        return enrollment

    def get_existing_certificate(
        self, user_id: int, course_type: CourseType, course_id: int
    ) -> Optional[Certificate]:
        return (
            self.db.query(Certificate)
            .filter(
                Certificate.user_id == user_id,
                Certificate.course_type == course_type.value,
                Certificate.course_id == course_id,
            )
            .first()
        )

    def _evaluate(
        self, user: User, course: AnyCourse, enrollment: Enrollment, now: datetime
    ) -> EligibilityResult:
        linked_enrollment = None
        if course.course_type == CourseType.IN_PERSON and course.linked_online_course_id:
            linked_enrollment = self._find_enrollment(
                user.id, CourseType.ONLINE_LIVE, course.linked_online_course_id
            )
        evaluator = get_evaluator(course.course_type, linked_enrollment)
        return evaluator.evaluate(enrollment, course, now)

    # -------- eligibility preview --------

    def check_eligibility(
        self, user: User, course_id: int, course_type_value: str
    ) -> dict:
        course_type = resolve_course_type(course_type_value)
        course = self.course_service.get_course_or_404(course_type, course_id)
        now = utcnow()
        enrollment = self._get_active_enrollment(user.id, course_type, course_id, now)

        result = self._evaluate(user, course, enrollment, now)
        existing = self.get_existing_certificate(user.id, course_type, course_id)

        return {
            "course_id": course_id,
            "course_type": course_type.value,
            "eligible": result.eligible,
            "reasons": result.reasons,
            "attendance_percentage": result.attendance_percentage,
            "assessment_score": result.assessment_score,
            "already_issued": existing is not None,
        }

    # -------- issuance --------

    def issue_certificate(
        self, user: User, course_id: int, course_type_value: str
    ) -> Tuple[Certificate, bool]:
        """
        Issue the certificate for a course, once.

        Returns ``(certificate, created)``; an already issued certificate is
        returned unchanged with ``created`` False.
        """
        course_type = resolve_course_type(course_type_value)
        course = self.course_service.get_course_or_404(course_type, course_id)
        now = utcnow()
        enrollment = self._get_active_enrollment(user.id, course_type, course_id, now)

        existing = self.get_existing_certificate(user.id, course_type, course_id)
        if existing:
            return existing, False

        result = self._evaluate(user, course, enrollment, now)
        if not result.eligible:
            logger.warning(
                f"Certificate refused for user {user.id} on {course_type.value}:{course_id}: {result.reasons}"
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={
                    "message": "Not eligible for a certificate yet",
                    "reasons": result.reasons,
                },
            )

        certificate = self._build_certificate(user, course, enrollment, result, now)

        try:
            self.db.add(certificate)
            self._apply_to_enrollment(enrollment, certificate, result, now)
            self.db.flush()
            self._refresh_achievement_summary(user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            # a concurrent request issued it first
            existing = self.get_existing_certificate(user.id, course_type, course_id)
            if existing:
                return existing, False
            logger.error("Certificate insert violated a constraint", exc_info=True)
            raise DBException("Failed to issue certificate", 500)
        except SQLAlchemyError:
            self.db.rollback()
            logger.error(
                f"Failed to issue certificate for user {user.id}", exc_info=True
            )
            raise DBException("Failed to issue certificate", 500)

        self.db.refresh(certificate)
        logger.info(
            f"Issued certificate {certificate.certificate_id} to user {user.id} "
            f"for {course_type.value}:{course_id}"
        )
        return certificate, True

    def _unique_identifiers(self) -> Tuple[str, str]:
        certificate_id = generate_certificate_id()
        while self.db.query(Certificate.id).filter(
            Certificate.certificate_id == certificate_id
        ).first():
            certificate_id = generate_certificate_id()

        verification_code = generate_verification_code()
        while self.db.query(Certificate.id).filter(
            Certificate.verification_code == verification_code
        ).first():
            verification_code = generate_verification_code()

        return certificate_id, verification_code

    def _instructor_snapshot(self, course: AnyCourse) -> List[dict]:
        return [
            {
                "name": instructor.full_name,
                "title": instructor.title,
                "role": assignment.role,
                "is_primary": assignment.is_primary,
            }
            for assignment, instructor in self.course_service.get_course_instructors(
                course
            )
        ]

    def _certification_body_snapshot(self, course: AnyCourse) -> List[dict]:
        return [
            {
                "name": body.name,
                "role": assignment.role,
                "is_primary": assignment.is_primary,
            }
            for assignment, body in self.course_service.get_course_certification_bodies(
                course
            )
            if body.is_active
        ]

    def _course_specific_data(
        self, course: AnyCourse, enrollment: Enrollment, result: EligibilityResult
    ) -> dict:
        if course.course_type == CourseType.IN_PERSON:
            return {
                "location": course.location,
                "attendanceDays": len(enrollment.attendance_records),
                "materialsCount": course.materials_count,
            }
        if course.course_type == CourseType.ONLINE_LIVE:
            return {
                "platform": course.platform_name,
                "sessionsAttended": len(enrollment.session_attendances),
                "totalSessions": course.total_sessions,
            }
        return {
            "videosCompleted": sum(
                1 for p in enrollment.video_progress if p.video_completed
            ),
            "totalVideos": len(course.videos),
            "averageExamScore": result.assessment_score,
        }

    def _build_certificate(
        self,
        user: User,
        course: AnyCourse,
        enrollment: Enrollment,
        result: EligibilityResult,
        now: datetime,
    ) -> Certificate:
        certificate_id, verification_code = self._unique_identifiers()
        completion_date = ensure_utc(enrollment.completion_date) or now

        instructors = self._instructor_snapshot(course)
        bodies = self._certification_body_snapshot(course)
        primary_instructor = next(
            (i["name"] for i in instructors if i["is_primary"]),
            instructors[0]["name"] if instructors else settings.certificate_default_instructor,
        )
        primary_authority = next(
            (b["name"] for b in bodies if b["is_primary"]),
            bodies[0]["name"] if bodies else settings.certificate_institution_name,
        )

        if course.course_type == CourseType.SELF_PACED:
            attendance = 100.0
        else:
            attendance = course.attendance_percentage(enrollment)
        score = result.assessment_score

        share_url = verify_url_for(verification_code)

        return Certificate(
            certificate_id=certificate_id,
            user_id=user.id,
            course_id=course.id,
            course_type=course.course_type.value,
            recipient_name=user.full_name,
            course_title=course.title,
            course_code=course.course_code,
            primary_instructor_name=primary_instructor,
            primary_issuing_authority=primary_authority,
            instructors=instructors,
            certification_bodies=bodies,
            delivery_method=delivery_method_for(course),
            completion_date=completion_date,
            issue_date=now,
            expiry_date=None,
            attendance_percentage=attendance,
            exam_score=score,
            total_hours=calculate_total_hours(course),
            grade=calculate_grade(score),
            course_specific_data=self._course_specific_data(course, enrollment, result),
            verification_code=verification_code,
            digital_signature=sign_certificate(
                user.full_name, course.title, completion_date, verification_code
            ),
            qr_code_url=f"/qr/certificate/{verification_code}",
            pdf_url=f"/certificates/{user.id}/{certificate_id}.pdf",
            image_url=f"/certificates/{user.id}/{certificate_id}.png",
            download_count=0,
            is_public=True,
            share_url=share_url,
        )

    def _apply_to_enrollment(
        self,
        enrollment: Enrollment,
        certificate: Certificate,
        result: EligibilityResult,
        now: datetime,
    ) -> None:
        enrollment.certificate_id = certificate.certificate_id
        if enrollment.completion_date is None:
            enrollment.completion_date = certificate.completion_date
        if result.progress_status == ProgressStatus.COMPLETED.value:
            enrollment.course_status = ProgressStatus.COMPLETED.value

        if result.assessment_score is not None:
            enrollment.assessment_completed = True
            if enrollment.assessment_score is None:
                enrollment.assessment_score = result.assessment_score
            if (
                enrollment.best_assessment_score is None
                or result.assessment_score > enrollment.best_assessment_score
            ):
                enrollment.best_assessment_score = result.assessment_score
            if enrollment.last_assessment_date is None:
                enrollment.last_assessment_date = now

    def _refresh_achievement_summary(self, user: User) -> AchievementSummary:
        certificates = (
            self.db.query(Certificate).filter(Certificate.user_id == user.id).all()
        )

        specializations = []
        for certificate in certificates:
            specialization = classify_specialization(certificate.course_title)
            if specialization not in specializations:
                specializations.append(specialization)

        summary = (
            self.db.query(AchievementSummary)
            .filter(AchievementSummary.user_id == user.id)
            .first()
        )
        if summary is None:
            summary = AchievementSummary(user_id=user.id)
            self.db.add(summary)

        summary.total_certificates = len(certificates)
        summary.specializations = specializations
        summary.total_learning_hours = sum(c.total_hours or 0 for c in certificates)
        summary.achievement_level = calculate_achievement_level(len(certificates))
        return summary

    # -------- reads --------

    def get_user_certificates(self, user: User) -> dict:
        certificates = (
            self.db.query(Certificate)
            .filter(Certificate.user_id == user.id)
            .order_by(Certificate.issue_date.desc())
            .all()
        )
        summary = (
            self.db.query(AchievementSummary)
            .filter(AchievementSummary.user_id == user.id)
            .first()
        )
        return {
            "certificates": certificates,
            "total": len(certificates),
            "achievement_summary": summary,
        }

    def get_user_certificate(self, user: User, certificate_id: str) -> Certificate:
        certificate = (
            self.db.query(Certificate)
            .filter(
                Certificate.certificate_id == certificate_id,
                Certificate.user_id == user.id,
            )
            .first()
        )
        if not certificate:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Certificate not found"
            )
        return certificate

    def record_download(self, user: User, certificate_id: str) -> Certificate:
        """Fetch a user's certificate and count the view/download."""
        certificate = self.get_user_certificate(user, certificate_id)
        certificate.download_count = (certificate.download_count or 0) + 1
        certificate.last_downloaded = utcnow()
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error(
                f"Failed to record download of {certificate_id}", exc_info=True
            )
            raise DBException("Database error occurred", 500)
        self.db.refresh(certificate)
        return certificate

    def verify_certificate(self, verification_code: str) -> dict:
        certificate = (
            self.db.query(Certificate)
            .filter(Certificate.verification_code == verification_code.strip().upper())
            .first()
        )
        if not certificate or not certificate.is_public:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Certificate not found or verification code is invalid",
            )

        signature_valid = verify_certificate_signature(certificate)
        if not signature_valid:
            logger.warning(
                f"Signature mismatch on certificate {certificate.certificate_id}"
            )

        return {
            "valid": signature_valid,
            "signature_valid": signature_valid,
            "certificate_id": certificate.certificate_id,
            "recipient_name": certificate.recipient_name,
            "course_title": certificate.course_title,
            "course_type": certificate.course_type,
            "completion_date": certificate.completion_date,
            "issue_date": certificate.issue_date,
            "grade": certificate.grade,
            "primary_issuing_authority": certificate.primary_issuing_authority,
            "delivery_method": certificate.delivery_method,
        }
