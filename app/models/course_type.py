# app/models/course_type.py
import enum
from typing import Optional


class CourseType(str, enum.Enum):
    IN_PERSON = "InPersonAestheticTraining"
    ONLINE_LIVE = "OnlineLiveTraining"
    SELF_PACED = "SelfPacedOnlineTraining"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["CourseType"]:
        """Resolve a canonical name or one of the short display aliases."""
        if value is None:
            return None
        if isinstance(value, cls):
            return value
        return _ALIASES.get(value.strip())


_ALIASES = {
    "InPersonAestheticTraining": CourseType.IN_PERSON,
    "In-Person": CourseType.IN_PERSON,
    "in-person": CourseType.IN_PERSON,
    "OnlineLiveTraining": CourseType.ONLINE_LIVE,
    "Online Live": CourseType.ONLINE_LIVE,
    "online-live": CourseType.ONLINE_LIVE,
    "SelfPacedOnlineTraining": CourseType.SELF_PACED,
    "Self-Paced": CourseType.SELF_PACED,
    "self-paced": CourseType.SELF_PACED,
}


class EnrollmentStatus(str, enum.Enum):
    WISHLIST = "wishlist"
    CART = "cart"
    PAID = "paid"
    REGISTERED = "registered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ENROLLED_STATUSES = (
    EnrollmentStatus.PAID.value,
    EnrollmentStatus.REGISTERED.value,
    EnrollmentStatus.COMPLETED.value,
)


class ProgressStatus(str, enum.Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
