# app/schemas/enrollment.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ==================== Cart & Wishlist Schemas ====================


class CourseItemRequest(BaseModel):
    """Schema for adding a course to the cart or wishlist"""

    model_config = ConfigDict(populate_by_name=True)

    course_id: int = Field(..., alias="courseId", gt=0, description="Course ID")
    course_type: str = Field(
        ...,
        alias="courseType",
        min_length=1,
        description="Course type, canonical name or short alias",
    )


class EnrollmentItemResponse(BaseModel):
    """A cart or wishlist entry with the course it points to"""

    enrollment_id: int
    course_id: int
    course_type: str
    course_title: Optional[str] = None
    course_code: Optional[str] = None
    status: str
    original_price: Decimal
    paid_amount: Decimal
    currency: str
    registration_date: datetime
    is_linked_course: bool = False
    is_linked_course_free: bool = False
    parent_enrollment_id: Optional[int] = None


class CartResponse(BaseModel):
    items: List[EnrollmentItemResponse]
    count: int
    subtotal: Decimal
    total: Decimal
    currency: str


class WishlistResponse(BaseModel):
    items: List[EnrollmentItemResponse]
    count: int


class CartMutationResponse(BaseModel):
    success: bool = True
    message: str
    item: Optional[EnrollmentItemResponse] = None
    linked_item: Optional[EnrollmentItemResponse] = None
    removed_linked_items: int = 0
    restored_linked_items: int = 0
