# app/services/linked_course.py
import logging

from sqlalchemy.orm import Session

from app.core.decorator import db_exception
from app.models.course_type import CourseType, EnrollmentStatus
from app.models.enrollment import Enrollment
from app.models.in_person_course import InPersonCourse
from app.services.cart_wishlist import CartWishlistService
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

# primary enrollment statuses that still justify a cart companion
LIVE_PRIMARY_STATUSES = (
    EnrollmentStatus.CART.value,
    EnrollmentStatus.PAID.value,
    EnrollmentStatus.REGISTERED.value,
    EnrollmentStatus.COMPLETED.value,
)


class LinkedCourseRepairService:
    """
    Reconcile cart entries with the in-person to online course links.

    Removes companion cart entries whose primary in-person entry is gone,
    and restores the companion for in-person cart entries that lost it.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_orphaned_companions(self):
        companions = (
            self.db.query(Enrollment)
            .filter(
                Enrollment.is_linked_course.is_(True),
                Enrollment.status == EnrollmentStatus.CART.value,
            )
            .all()
        )
        return [
            c
            for c in companions
            if c.parent_enrollment is None
            or c.parent_enrollment.status not in LIVE_PRIMARY_STATUSES
        ]

    def find_missing_companions(self):
        """In-person cart entries with a required link but no companion row."""
        rows = (
            self.db.query(Enrollment, InPersonCourse)
            .join(InPersonCourse, InPersonCourse.id == Enrollment.course_id)
            .filter(
                Enrollment.course_type == CourseType.IN_PERSON.value,
                Enrollment.status == EnrollmentStatus.CART.value,
                InPersonCourse.linked_online_course_id.isnot(None),
                InPersonCourse.linked_is_required.is_(True),
            )
            .all()
        )
        missing = []
        for enrollment, course in rows:
            companion = (
                self.db.query(Enrollment)
                .filter(
                    Enrollment.user_id == enrollment.user_id,
                    Enrollment.course_type == CourseType.ONLINE_LIVE.value,
                    Enrollment.course_id == course.linked_online_course_id,
                )
                .first()
            )
            if companion is None or companion.status in (
                EnrollmentStatus.WISHLIST.value,
                EnrollmentStatus.CANCELLED.value,
            ):
                missing.append((enrollment, course))
        return missing

    @db_exception
    def repair(self, dry_run: bool = False) -> dict:
        orphaned = self.find_orphaned_companions()
        missing = self.find_missing_companions()

        if dry_run:
            return {
                "orphaned_removed": 0,
                "orphaned_unlinked": 0,
                "companions_restored": 0,
                "orphaned_found": len(orphaned),
                "missing_found": len(missing),
            }

        cart_service = CartWishlistService(self.db)
        unlinked = 0
        for companion in orphaned:
            logger.info(
                f"Releasing orphaned linked cart entry {companion.id} "
                f"(user {companion.user_id}, online course {companion.course_id})"
            )
            if cart_service.release_linked_companion(companion):
                unlinked += 1
        self.db.flush()

        now = utcnow()
        restored = 0
        for enrollment, course in missing:
            if cart_service.attach_linked_companion(
                enrollment.user, course, enrollment, now
            ):
                restored += 1

        self.db.commit()
        logger.info(
            f"Linked course repair: removed {len(orphaned) - unlinked} orphaned, "
            f"unlinked {unlinked}, restored {restored}"
        )
        return {
            "orphaned_removed": len(orphaned) - unlinked,
            "orphaned_unlinked": unlinked,
            "companions_restored": restored,
            "orphaned_found": len(orphaned),
            "missing_found": len(missing),
        }
