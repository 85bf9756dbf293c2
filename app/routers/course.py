# app/routers/course.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.models.course_type import CourseType
from app.schemas.course import (
    CourseListResponse,
    InPersonCourseResponse,
    OnlineLiveCourseResponse,
    SelfPacedCourseResponse,
)
from app.services.course import CourseService, resolve_course_type

router = APIRouter(
    prefix="/courses",
    tags=["Courses"],
    responses={404: {"description": "Not found"}},
)

DETAIL_SCHEMAS = {
    CourseType.IN_PERSON: InPersonCourseResponse,
    CourseType.ONLINE_LIVE: OnlineLiveCourseResponse,
    CourseType.SELF_PACED: SelfPacedCourseResponse,
}


@router.get("/{course_type}", response_model=CourseListResponse)
def get_courses(
    course_type: str,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    status: Optional[str] = Query(None, description="Filter by course status"),
    search: Optional[str] = Query(None, description="Search title or course code"),
    db: Session = Depends(get_db),
):
    """
    List courses of one catalog. Accepts the canonical type name or a short
    alias such as ``in-person``.
    """
    service = CourseService(db)
    courses, pagination = service.get_courses(
        resolve_course_type(course_type),
        page=page,
        size=size,
        course_status=status,
        search=search,
    )
    return {"courses": courses, **pagination}


@router.get("/{course_type}/{course_id}")
def get_course(course_type: str, course_id: int, db: Session = Depends(get_db)):
    parsed_type = resolve_course_type(course_type)
    course = CourseService(db).get_course_or_404(parsed_type, course_id)
    return DETAIL_SCHEMAS[parsed_type].model_validate(course)
