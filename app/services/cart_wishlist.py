# app/services/cart_wishlist.py
import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import DBException
from app.models.course_type import ENROLLED_STATUSES, CourseType, EnrollmentStatus
from app.models.enrollment import Enrollment
from app.models.in_person_course import InPersonCourse
from app.models.user import User
from app.services.course import AnyCourse, CourseService, resolve_course_type
from app.utils.timeutils import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class CartWishlistService:
    def __init__(self, db: Session):
        self.db = db
        self.course_service = CourseService(db)

    # ==================== Helpers ====================

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

    def _seats_taken(self, course: InPersonCourse) -> int:
        return (
            self.db.query(Enrollment)
            .filter(
                Enrollment.course_type == CourseType.IN_PERSON.value,
                Enrollment.course_id == course.id,
                Enrollment.status.in_(
                    [EnrollmentStatus.PAID.value, EnrollmentStatus.REGISTERED.value]
                ),
            )
            .count()
        )

    def _check_availability(self, course: AnyCourse) -> None:
        """Raise 400 when the course cannot be purchased right now"""
        reason = None

        if course.course_type == CourseType.IN_PERSON:
            if course.status != "open":
                reason = "Course is not open for registration"
            elif self._seats_taken(course) >= (course.seats_available or 0):
                reason = "No seats available for this course"
        elif course.course_type == CourseType.ONLINE_LIVE:
            start = ensure_utc(course.start_date)
            if course.status == "cancelled":
                reason = "Course has been cancelled"
            elif start is not None and start <= utcnow():
                reason = "Course has already started"
        elif course.status != "published":
            reason = "Course is not available"

        if reason:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.error(f"Failed to {action}", exc_info=True)
            raise DBException(f"Failed to {action}", 500)

    def serialize_item(self, enrollment: Enrollment) -> dict:
        course_type = CourseType.parse(enrollment.course_type)
        course = (
            self.course_service.get_course(course_type, enrollment.course_id)
            if course_type
            else None
        )
        return {
            "enrollment_id": enrollment.id,
            "course_id": enrollment.course_id,
            "course_type": enrollment.course_type,
            "course_title": course.title if course else None,
            "course_code": course.course_code if course else None,
            "status": enrollment.status,
            "original_price": enrollment.original_price,
            "paid_amount": enrollment.paid_amount,
            "currency": enrollment.currency,
            "registration_date": enrollment.registration_date,
            "is_linked_course": enrollment.is_linked_course,
            "is_linked_course_free": enrollment.is_linked_course_free,
            "parent_enrollment_id": enrollment.parent_enrollment_id,
        }

    def _list(self, user: User, enrollment_status: EnrollmentStatus) -> List[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(
                Enrollment.user_id == user.id,
                Enrollment.status == enrollment_status.value,
            )
            .order_by(Enrollment.registration_date.asc(), Enrollment.id.asc())
            .all()
        )

    # ==================== Cart ====================

    def add_to_cart(self, user: User, course_type_value: str, course_id: int) -> dict:
        """
        Put a course in the user's cart. An in-person course with a required
        linked online course brings the online course along in the same commit.
        """
        course_type = resolve_course_type(course_type_value)
        course = self.course_service.get_course_or_404(course_type, course_id)
        self._check_availability(course)

        now = utcnow()
        enrollment = self._find_enrollment(user.id, course_type, course_id)
        if enrollment is not None:
            if enrollment.status in ENROLLED_STATUSES:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Already enrolled in this course",
                )
            if enrollment.status == EnrollmentStatus.CART.value:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Course already in cart",
                )
        else:
            enrollment = Enrollment(
                user_id=user.id,
                course_type=course_type.value,
                course_id=course.id,
            )
            self.db.add(enrollment)

        pricing = course.pricing(now)
        enrollment.status = EnrollmentStatus.CART.value
        enrollment.registration_date = now
        enrollment.original_price = pricing["regular_price"]
        enrollment.paid_amount = pricing["current_price"]
        enrollment.currency = course.currency
        enrollment.is_linked_course = False
        enrollment.is_linked_course_free = False
        enrollment.parent_enrollment_id = None
        enrollment.pre_linked_status = None
        self.db.flush()

        companion = None
        if course_type == CourseType.IN_PERSON and course.has_required_linked_course:
            companion = self.attach_linked_companion(user, course, enrollment, now)

        self._commit("add course to cart")
        logger.info(
            f"User {user.id} added {course_type.value}:{course_id} to cart"
            + (f" with linked online course {companion.course_id}" if companion else "")
        )

        return {
            "success": True,
            "message": "Course added to cart",
            "item": self.serialize_item(enrollment),
            "linked_item": self.serialize_item(companion) if companion else None,
        }

    def attach_linked_companion(
        self, user: User, course: InPersonCourse, primary: Enrollment, now
    ) -> Optional[Enrollment]:
        online = course.linked_online_course
        if online is None:
            logger.warning(
                f"In-person course {course.id} links to missing online course "
                f"{course.linked_online_course_id}"
            )
            return None

        companion = self._find_enrollment(user.id, CourseType.ONLINE_LIVE, online.id)
        if companion is not None and companion.status in ENROLLED_STATUSES:
            # already bought separately, leave it alone
            return None

        if companion is None:
            companion = Enrollment(
                user_id=user.id,
                course_type=CourseType.ONLINE_LIVE.value,
                course_id=online.id,
            )
            self.db.add(companion)
        elif not companion.is_linked_course and companion.status in (
            EnrollmentStatus.CART.value,
            EnrollmentStatus.WISHLIST.value,
        ):
            # the learner picked this course before, give it back on unlink
            companion.pre_linked_status = companion.status

        if companion.pre_linked_status is None:
            companion.registration_date = now
        companion.status = EnrollmentStatus.CART.value
        companion.original_price = online.price
        companion.paid_amount = Decimal(str(course.linked_price() or 0))
        companion.currency = online.currency
        companion.is_linked_course = True
        companion.is_linked_course_free = bool(course.linked_is_free)
        companion.parent_enrollment_id = primary.id
        self.db.flush()
        return companion

    def remove_from_cart(
        self, user: User, course_type_value: str, course_id: int
    ) -> dict:
        course_type = resolve_course_type(course_type_value)
        enrollment = self._find_enrollment(user.id, course_type, course_id)
        if enrollment is None or enrollment.status != EnrollmentStatus.CART.value:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Course not in cart"
            )

        if enrollment.is_linked_course and enrollment.is_linked_course_free:
            logger.warning(
                f"User {user.id} tried to remove linked course {course_type.value}:{course_id} directly"
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    "This course is included free with an in-person course. "
                    "Remove the in-person course from your cart instead."
                ),
            )

        companions = (
            self.db.query(Enrollment)
            .filter(
                Enrollment.parent_enrollment_id == enrollment.id,
                Enrollment.is_linked_course.is_(True),
                Enrollment.status == EnrollmentStatus.CART.value,
            )
            .all()
        )
        restored = [c for c in companions if self.release_linked_companion(c)]
        self.db.delete(enrollment)

        self._commit("remove course from cart")
        logger.info(
            f"User {user.id} removed {course_type.value}:{course_id} from cart "
            f"({len(companions) - len(restored)} linked removed, {len(restored)} restored)"
        )

        return {
            "success": True,
            "message": "Course removed from cart",
            "removed_linked_items": len(companions) - len(restored),
            "restored_linked_items": len(restored),
        }

    def release_linked_companion(self, companion: Enrollment) -> bool:
        """
        Undo the linking of a companion whose primary entry is going away.

        A row the learner had added before it was linked goes back to its
        earlier status at the regular price and True is returned; a row
        created only as a companion is deleted.
        """
        if companion.pre_linked_status not in (
            EnrollmentStatus.CART.value,
            EnrollmentStatus.WISHLIST.value,
        ):
            self.db.delete(companion)
            return False

        online = self.course_service.get_course(
            CourseType.ONLINE_LIVE, companion.course_id
        )
        pricing = online.pricing(companion.registration_date) if online else None
        companion.status = companion.pre_linked_status
        if pricing:
            companion.original_price = pricing["regular_price"]
            companion.paid_amount = pricing["current_price"]
        else:
            companion.paid_amount = companion.original_price
        companion.is_linked_course = False
        companion.is_linked_course_free = False
        companion.parent_enrollment_id = None
        companion.pre_linked_status = None
        return True

    def get_cart(self, user: User) -> dict:
        enrollments = self._list(user, EnrollmentStatus.CART)
        items = [self.serialize_item(e) for e in enrollments]
        subtotal = sum((Decimal(e.original_price or 0) for e in enrollments), Decimal("0"))
        total = sum((Decimal(e.paid_amount or 0) for e in enrollments), Decimal("0"))
        currency = enrollments[0].currency if enrollments else None

        return {
            "items": items,
            "count": len(items),
            "subtotal": subtotal,
            "total": total,
            "currency": currency or settings.default_currency,
        }

    # ==================== Wishlist ====================

    def add_to_wishlist(
        self, user: User, course_type_value: str, course_id: int
    ) -> dict:
        course_type = resolve_course_type(course_type_value)
        course = self.course_service.get_course_or_404(course_type, course_id)
        self._check_availability(course)

        enrollment = self._find_enrollment(user.id, course_type, course_id)
        if enrollment is not None:
            if enrollment.status in ENROLLED_STATUSES:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Already enrolled in this course",
                )
            if enrollment.status == EnrollmentStatus.WISHLIST.value:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Course already in wishlist",
                )
            if enrollment.status == EnrollmentStatus.CART.value:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Course already in cart",
                )
        else:
            enrollment = Enrollment(
                user_id=user.id,
                course_type=course_type.value,
                course_id=course.id,
            )
            self.db.add(enrollment)

        now = utcnow()
        pricing = course.pricing(now)
        enrollment.status = EnrollmentStatus.WISHLIST.value
        enrollment.registration_date = now
        enrollment.original_price = pricing["regular_price"]
        enrollment.paid_amount = pricing["current_price"]
        enrollment.currency = course.currency

        self._commit("add course to wishlist")
        logger.info(f"User {user.id} added {course_type.value}:{course_id} to wishlist")

        return {
            "success": True,
            "message": "Course added to wishlist",
            "item": self.serialize_item(enrollment),
        }

    def remove_from_wishlist(
        self, user: User, course_type_value: str, course_id: int
    ) -> dict:
        course_type = resolve_course_type(course_type_value)
        enrollment = self._find_enrollment(user.id, course_type, course_id)
        if enrollment is None or enrollment.status != EnrollmentStatus.WISHLIST.value:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Course not in wishlist"
            )

        self.db.delete(enrollment)
        self._commit("remove course from wishlist")
        return {"success": True, "message": "Course removed from wishlist"}

    def get_wishlist(self, user: User) -> dict:
        enrollments = self._list(user, EnrollmentStatus.WISHLIST)
        items = [self.serialize_item(e) for e in enrollments]
        return {"items": items, "count": len(items)}
