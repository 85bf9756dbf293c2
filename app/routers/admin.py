# app/routers/admin.py
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_admin
from app.models.user import User
from app.schemas.checkout import TransactionCompleteRequest, TransactionResponse
from app.schemas.course import (
    CertificationBodyCreate,
    CertificationBodyResponse,
    InPersonCourseCreate,
    InPersonCourseResponse,
    InstructorCreate,
    InstructorResponse,
    LinkableOnlineCourse,
    LinkedCourseRequest,
    LinkedCourseResponse,
    OnlineLiveCourseCreate,
    OnlineLiveCourseResponse,
    SelfPacedCourseCreate,
    SelfPacedCourseResponse,
)
from app.schemas.progress import (
    AssessmentScoreRequest,
    AttendanceRecordRequest,
    EnrollmentProgressResponse,
    SessionAttendanceRequest,
)
from app.schemas.promo_code import PromoCodeCreate, PromoCodeResponse
from app.services.checkout import CheckoutService
from app.services.course import CourseService
from app.services.linked_course import LinkedCourseRepairService
from app.services.progress import ProgressService
from app.services.promo_code import PromoCodeService

router = APIRouter(prefix="/admin", tags=["Admin"])

AdminUser = Annotated[User, Depends(get_current_admin)]


# ==================== Reference Data ====================


@router.post(
    "/instructors",
    response_model=InstructorResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_instructor(
    instructor_in: InstructorCreate, admin: AdminUser, db: Session = Depends(get_db)
):
    return CourseService(db).create_instructor(instructor_in)


@router.post(
    "/certification-bodies",
    response_model=CertificationBodyResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_certification_body(
    body_in: CertificationBodyCreate, admin: AdminUser, db: Session = Depends(get_db)
):
    return CourseService(db).create_certification_body(body_in)


# ==================== Courses ====================


@router.post(
    "/courses/in-person",
    response_model=InPersonCourseResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_in_person_course(
    course_in: InPersonCourseCreate, admin: AdminUser, db: Session = Depends(get_db)
):
    return CourseService(db).create_in_person_course(course_in)


@router.post(
    "/courses/online-live",
    response_model=OnlineLiveCourseResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_online_live_course(
    course_in: OnlineLiveCourseCreate, admin: AdminUser, db: Session = Depends(get_db)
):
    return CourseService(db).create_online_live_course(course_in)


@router.post(
    "/courses/self-paced",
    response_model=SelfPacedCourseResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_self_paced_course(
    course_in: SelfPacedCourseCreate, admin: AdminUser, db: Session = Depends(get_db)
):
    return CourseService(db).create_self_paced_course(course_in)


@router.get("/courses/online-live/linkable", response_model=List[LinkableOnlineCourse])
def get_linkable_online_courses(admin: AdminUser, db: Session = Depends(get_db)):
    """Online courses that can be linked to an in-person course"""
    return CourseService(db).get_linkable_online_courses()


@router.get(
    "/courses/in-person/{course_id}/linked-course",
    response_model=Optional[LinkedCourseResponse],
)
def get_linked_course(course_id: int, admin: AdminUser, db: Session = Depends(get_db)):
    return CourseService(db).get_linked_course(course_id)


@router.put(
    "/courses/in-person/{course_id}/linked-course",
    response_model=LinkedCourseResponse,
)
def set_linked_course(
    course_id: int,
    link_in: LinkedCourseRequest,
    admin: AdminUser,
    db: Session = Depends(get_db),
):
    return CourseService(db).set_linked_course(course_id, link_in)


@router.delete("/courses/in-person/{course_id}/linked-course")
def remove_linked_course(
    course_id: int, admin: AdminUser, db: Session = Depends(get_db)
):
    CourseService(db).remove_linked_course(course_id)
    return {"success": True, "message": "Linked course removed"}


@router.post("/linked-courses/repair")
def repair_linked_courses(
    admin: AdminUser,
    dry_run: bool = Query(False, description="Only report what would change"),
    db: Session = Depends(get_db),
):
    return LinkedCourseRepairService(db).repair(dry_run=dry_run)


# ==================== Transactions ====================


@router.post(
    "/transactions/{order_number}/complete", response_model=TransactionResponse
)
def complete_transaction(
    order_number: str,
    admin: AdminUser,
    data: Optional[TransactionCompleteRequest] = None,
    db: Session = Depends(get_db),
):
    """Mark a pending transaction as paid (stands in for the gateway callback)"""
    reference = data.gateway_reference if data else None
    return CheckoutService(db).complete_transaction(order_number, reference)


# ==================== Promo Codes ====================


@router.post(
    "/promo-codes",
    response_model=PromoCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_promo_code(
    data: PromoCodeCreate, admin: AdminUser, db: Session = Depends(get_db)
):
    return PromoCodeService(db).create_promo_code(data)


@router.get("/promo-codes", response_model=List[PromoCodeResponse])
def get_promo_codes(admin: AdminUser, db: Session = Depends(get_db)):
    return PromoCodeService(db).get_promo_codes()


@router.delete("/promo-codes/{promo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_promo_code(promo_id: int, admin: AdminUser, db: Session = Depends(get_db)):
    PromoCodeService(db).delete_promo_code(promo_id)


# ==================== Progress ====================


@router.post("/progress/attendance", response_model=EnrollmentProgressResponse)
def record_attendance(
    data: AttendanceRecordRequest, admin: AdminUser, db: Session = Depends(get_db)
):
    return ProgressService(db).record_attendance(data)


@router.post("/progress/sessions", response_model=EnrollmentProgressResponse)
def record_session(
    data: SessionAttendanceRequest, admin: AdminUser, db: Session = Depends(get_db)
):
    return ProgressService(db).record_session(data)


@router.post("/progress/assessment", response_model=EnrollmentProgressResponse)
def record_assessment(
    data: AssessmentScoreRequest, admin: AdminUser, db: Session = Depends(get_db)
):
    return ProgressService(db).record_assessment(data)
