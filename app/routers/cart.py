# app/routers/cart.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.enrollment import (
    CartMutationResponse,
    CartResponse,
    CourseItemRequest,
    WishlistResponse,
)
from app.services.cart_wishlist import CartWishlistService

router = APIRouter(tags=["Cart & Wishlist"])

CurrentUser = Annotated[User, Depends(get_current_user)]


# ==================== Cart ====================


@router.get("/cart", response_model=CartResponse)
def get_cart(current_user: CurrentUser, db: Session = Depends(get_db)):
    return CartWishlistService(db).get_cart(current_user)


@router.post(
    "/cart", response_model=CartMutationResponse, status_code=status.HTTP_201_CREATED
)
def add_to_cart(
    item: CourseItemRequest, current_user: CurrentUser, db: Session = Depends(get_db)
):
    """
    Add a course to the cart. In-person courses with a required linked
    online course also add the online course.
    """
    return CartWishlistService(db).add_to_cart(
        current_user, item.course_type, item.course_id
    )


@router.delete("/cart", response_model=CartMutationResponse)
def remove_from_cart(
    current_user: CurrentUser,
    course_type: str = Query(..., alias="courseType"),
    course_id: int = Query(..., alias="courseId"),
    db: Session = Depends(get_db),
):
    return CartWishlistService(db).remove_from_cart(
        current_user, course_type, course_id
    )


# ==================== Wishlist ====================


@router.get("/wishlist", response_model=WishlistResponse)
def get_wishlist(current_user: CurrentUser, db: Session = Depends(get_db)):
    return CartWishlistService(db).get_wishlist(current_user)


@router.post(
    "/wishlist",
    response_model=CartMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_to_wishlist(
    item: CourseItemRequest, current_user: CurrentUser, db: Session = Depends(get_db)
):
    return CartWishlistService(db).add_to_wishlist(
        current_user, item.course_type, item.course_id
    )


@router.delete("/wishlist", response_model=CartMutationResponse)
def remove_from_wishlist(
    current_user: CurrentUser,
    course_type: str = Query(..., alias="courseType"),
    course_id: int = Query(..., alias="courseId"),
    db: Session = Depends(get_db),
):
    return CartWishlistService(db).remove_from_wishlist(
        current_user, course_type, course_id
    )
