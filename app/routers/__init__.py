from .admin import router as admin_router
from .auth import router as auth_router
from .cart import router as cart_router
from .certificate import router as certificate_router
from .checkout import router as checkout_router
from .course import router as course_router
from .progress import router as progress_router

routes = [
    admin_router,
    auth_router,
    course_router,
    cart_router,
    checkout_router,
    progress_router,
    certificate_router,
]
