"""
Models package initialization
Import all models and setup relationships
"""

from .achievement_summary import AchievementSummary
from .certificate import Certificate
from .certification_body import CertificationBody, CourseCertificationBody
from .course_type import CourseType, EnrollmentStatus, ProgressStatus
from .enrollment import AttendanceRecord, Enrollment, SessionAttendance, VideoProgress
from .in_person_course import InPersonCourse
from .instructor import CourseInstructor, Instructor
from .online_live_course import OnlineLiveCourse
from .payment_transaction import PaymentTransaction, PaymentTransactionItem
from .promo_code import PromoCode

# Import and setup relationships
from .relations import setup_relationships
from .self_paced_course import SelfPacedCourse, SelfPacedVideo
from .user import User

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "AchievementSummary",
    "AttendanceRecord",
    "Certificate",
    "CertificationBody",
    "CourseCertificationBody",
    "CourseInstructor",
    "CourseType",
    "Enrollment",
    "EnrollmentStatus",
    "InPersonCourse",
    "Instructor",
    "OnlineLiveCourse",
    "PaymentTransaction",
    "PaymentTransactionItem",
    "PromoCode",
    "ProgressStatus",
    "SelfPacedCourse",
    "SelfPacedVideo",
    "SessionAttendance",
    "User",
    "VideoProgress",
]
