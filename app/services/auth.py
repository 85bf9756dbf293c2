# app/services/auth.py
import logging
from datetime import timedelta

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.hasher import PasswordHelper
from app.core.security import jwt_manager
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    UserRegistrationRequest,
    UserResponse,
)
from app.utils.timeutils import utcnow

# Setup logging
logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.password_helper = PasswordHelper()

    def _expires_in(self, user: User, remember_me: bool = False) -> int:
        if remember_me:
            return int(timedelta(days=30).total_seconds())
        days = (
            settings.jwt_admin_expiration
            if user.role == "admin"
            else settings.jwt_user_expiration
        )
        return int(timedelta(days=days).total_seconds())

    def register_user(self, request: UserRegistrationRequest, db: Session) -> AuthResponse:
        """Register a learner account and log it in"""
        email = request.email.lower()
        if db.query(User).filter(User.email == email).first():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        user = User(
            email=email,
            hashed_password=self.password_helper.hash_password(request.password),
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            phone_number=request.phone_number,
            country=request.country,
            role=settings.authorization_default_role,
            last_login=utcnow(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        access_token = jwt_manager.create_access_token(user)
        logger.info(f"User registered: {user.id}")

        return AuthResponse(
            success=True,
            access_token=access_token,
            expires_in=self._expires_in(user),
            user=self._user_to_response(user),
            message="Registration successful",
        )

    def login(self, request: LoginRequest, db: Session) -> AuthResponse:
        user = db.query(User).filter(User.email == request.email.lower()).first()

        if not user or not self.password_helper.check_password(
            request.password, user.hashed_password
        ):
            logger.warning(f"Failed login attempt for {request.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account not found or deactivated",
            )

        access_token = jwt_manager.create_access_token(
            user, remember_me=request.remember_me
        )

        if self.password_helper.needs_rehash(user.hashed_password):
            user.hashed_password = self.password_helper.hash_password(request.password)
            logger.info(f"Password hash upgraded for user: {user.id}")

        # Update last login
        user.last_login = utcnow()
        db.commit()

        logger.info(f"User login successful: {user.id}")

        return AuthResponse(
            success=True,
            access_token=access_token,
            expires_in=self._expires_in(user, request.remember_me),
            user=self._user_to_response(user),
            message="Login successful",
        )

    def _user_to_response(self, user: User) -> UserResponse:
        """Convert User model to UserResponse"""
        return UserResponse.model_validate(user)


auth_service = AuthService()
