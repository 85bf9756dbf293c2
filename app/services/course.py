# app/services/course.py
import logging
import math
from typing import Dict, List, Optional, Tuple, Type, Union

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models.certification_body import CertificationBody, CourseCertificationBody
from app.models.course_type import CourseType
from app.models.in_person_course import InPersonCourse
from app.models.instructor import CourseInstructor, Instructor
from app.models.online_live_course import OnlineLiveCourse
from app.models.self_paced_course import SelfPacedCourse, SelfPacedVideo
from app.schemas.course import (
    CertificationBodyCreate,
    CourseCreateBase,
    InPersonCourseCreate,
    InstructorCreate,
    LinkedCourseRequest,
    OnlineLiveCourseCreate,
    SelfPacedCourseCreate,
)

logger = logging.getLogger(__name__)

AnyCourse = Union[InPersonCourse, OnlineLiveCourse, SelfPacedCourse]

COURSE_MODELS: Dict[CourseType, Type] = {
    CourseType.IN_PERSON: InPersonCourse,
    CourseType.ONLINE_LIVE: OnlineLiveCourse,
    CourseType.SELF_PACED: SelfPacedCourse,
}


def resolve_course_type(value: Optional[str]) -> CourseType:
    """Parse a course type from request input, raising 400 when unknown."""
    course_type = CourseType.parse(value)
    if course_type is None:
        valid = ", ".join(t.value for t in CourseType)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid course type. Must be one of: {valid}",
        )
    return course_type


class CourseService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== Lookups ====================

    def get_course(self, course_type: CourseType, course_id: int) -> Optional[AnyCourse]:
        model = COURSE_MODELS[course_type]
        return self.db.query(model).filter(model.id == course_id).first()

    def get_course_or_404(self, course_type: CourseType, course_id: int) -> AnyCourse:
        course = self.get_course(course_type, course_id)
        if not course:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Course not found"
            )
        return course

    def get_courses(
        self,
        course_type: CourseType,
        page: int = 1,
        size: int = 20,
        course_status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[AnyCourse], dict]:
        """Get list of courses of one catalog with pagination and filters"""
        model = COURSE_MODELS[course_type]
        query = self.db.query(model)

        if course_status:
            query = query.filter(model.status == course_status)

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                (model.title.ilike(search_pattern))
                | (model.course_code.ilike(search_pattern))
            )

        total = query.count()

        offset = (page - 1) * size
        courses = (
            query.order_by(model.start_date.asc(), model.id.asc())
            .offset(offset)
            .limit(size)
            .all()
        )

        total_pages = math.ceil(total / size) if size > 0 else 0
        pagination = {
            "total": total,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }

        return courses, pagination

    def get_course_instructors(
        self, course: AnyCourse
    ) -> List[Tuple[CourseInstructor, Instructor]]:
        """Instructor assignments for a course, primary first."""
        return (
            self.db.query(CourseInstructor, Instructor)
            .join(Instructor, Instructor.id == CourseInstructor.instructor_id)
            .filter(
                CourseInstructor.course_type == course.course_type.value,
                CourseInstructor.course_id == course.id,
            )
            .order_by(CourseInstructor.is_primary.desc(), CourseInstructor.id.asc())
            .all()
        )

    def get_course_certification_bodies(
        self, course: AnyCourse
    ) -> List[Tuple[CourseCertificationBody, CertificationBody]]:
        return (
            self.db.query(CourseCertificationBody, CertificationBody)
            .join(
                CertificationBody,
                CertificationBody.id == CourseCertificationBody.body_id,
            )
            .filter(
                CourseCertificationBody.course_type == course.course_type.value,
                CourseCertificationBody.course_id == course.id,
            )
            .order_by(
                CourseCertificationBody.is_primary.desc(),
                CourseCertificationBody.id.asc(),
            )
            .all()
        )

    # ==================== Course Authoring (admin) ====================

    def create_in_person_course(self, course_in: InPersonCourseCreate) -> InPersonCourse:
        course = InPersonCourse(
            **course_in.model_dump(exclude={"instructors", "certification_bodies"})
        )
        return self._save_new_course(course, course_in)

    def create_online_live_course(
        self, course_in: OnlineLiveCourseCreate
    ) -> OnlineLiveCourse:
        course = OnlineLiveCourse(
            **course_in.model_dump(exclude={"instructors", "certification_bodies"})
        )
        return self._save_new_course(course, course_in)

    def create_self_paced_course(
        self, course_in: SelfPacedCourseCreate
    ) -> SelfPacedCourse:
        course = SelfPacedCourse(
            **course_in.model_dump(
                exclude={"instructors", "certification_bodies", "videos"}
            )
        )
        course.videos = [SelfPacedVideo(**v.model_dump()) for v in course_in.videos]
        return self._save_new_course(course, course_in)

    def _save_new_course(self, course: AnyCourse, course_in: CourseCreateBase) -> AnyCourse:
        self._ensure_unique_code(course)
        self.db.add(course)
        self.db.flush()

        for assignment in course_in.instructors:
            if not self.db.get(Instructor, assignment.instructor_id):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Instructor {assignment.instructor_id} not found",
                )
            self.db.add(
                CourseInstructor(
                    course_type=course.course_type.value,
                    course_id=course.id,
                    **assignment.model_dump(),
                )
            )

        for assignment in course_in.certification_bodies:
            if not self.db.get(CertificationBody, assignment.body_id):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Certification body {assignment.body_id} not found",
                )
            self.db.add(
                CourseCertificationBody(
                    course_type=course.course_type.value,
                    course_id=course.id,
                    **assignment.model_dump(),
                )
            )

        self.db.commit()
        self.db.refresh(course)
        logger.info(f"Created {course.course_type.value} course {course.course_code}")
        return course

    def _ensure_unique_code(self, course: AnyCourse) -> None:
        model = type(course)
        if self.db.query(model).filter(model.course_code == course.course_code).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Course code '{course.course_code}' already exists",
            )

    def create_instructor(self, instructor_in: InstructorCreate) -> Instructor:
        instructor = Instructor(**instructor_in.model_dump())
        self.db.add(instructor)
        self.db.commit()
        self.db.refresh(instructor)
        return instructor

    def create_certification_body(
        self, body_in: CertificationBodyCreate
    ) -> CertificationBody:
        body = CertificationBody(**body_in.model_dump())
        self.db.add(body)
        self.db.commit()
        self.db.refresh(body)
        return body

    # ==================== Linked Courses (admin) ====================

    def get_linkable_online_courses(self) -> List[OnlineLiveCourse]:
        return (
            self.db.query(OnlineLiveCourse)
            .filter(OnlineLiveCourse.status.in_(["open", "in-progress"]))
            .order_by(OnlineLiveCourse.title.asc())
            .all()
        )

    def get_linked_course(self, course_id: int) -> Optional[dict]:
        course = self.get_course_or_404(CourseType.IN_PERSON, course_id)
        if not course.linked_online_course_id:
            return None
        online = course.linked_online_course
        return {
            "online_course_id": course.linked_online_course_id,
            "course_title": (
                f"{online.course_code} - {online.title}" if online else "Course not found"
            ),
            "relationship": course.linked_relationship,
            "is_required": course.linked_is_required,
            "completion_required": course.linked_completion_required,
            "is_free": course.linked_is_free,
            "custom_price": float(course.linked_custom_price or 0),
        }

    def set_linked_course(self, course_id: int, link_in: LinkedCourseRequest) -> dict:
        course = self.get_course_or_404(CourseType.IN_PERSON, course_id)
        online = self.get_course(CourseType.ONLINE_LIVE, link_in.online_course_id)
        if not online:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Online course not found",
            )

        course.linked_online_course_id = online.id
        course.linked_relationship = link_in.relationship
        course.linked_is_required = link_in.is_required
        course.linked_completion_required = link_in.completion_required
        course.linked_is_free = link_in.is_free
        course.linked_custom_price = 0 if link_in.is_free else link_in.custom_price

        online.linked_in_person_course_id = course.id
        online.linked_to_in_person = True
        online.linked_type = link_in.relationship
        online.suppress_certificate = link_in.suppress_online_certificate

        self.db.commit()
        logger.info(f"Linked in-person course {course.id} to online course {online.id}")
        return self.get_linked_course(course_id)

    def remove_linked_course(self, course_id: int) -> None:
        course = self.get_course_or_404(CourseType.IN_PERSON, course_id)
        online = course.linked_online_course
        if online is not None and online.linked_in_person_course_id == course.id:
            online.linked_in_person_course_id = None
            online.linked_to_in_person = False
            online.linked_type = None
            online.suppress_certificate = False

        course.linked_online_course_id = None
        course.linked_is_required = False
        self.db.commit()
        logger.info(f"Removed linked course from in-person course {course.id}")
