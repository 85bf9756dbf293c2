# core/security.py
import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from jose import JWTError, jwt

from app.core.config import settings
from app.models.user import User
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


class JWTManager:
    """JWT token management for authentication"""

    def __init__(self):
        self.secret_key = settings.jwt_secret
        self.algorithm = settings.jwt_algorithm
        self.user_token_expire = timedelta(days=settings.jwt_user_expiration)
        self.admin_token_expire = timedelta(days=settings.jwt_admin_expiration)
        self.issuer = settings.jwt_issuer

    def create_access_token(
        self,
        user: User,
        remember_me: bool = False,
        custom_expiration: Optional[timedelta] = None,
    ) -> str:
        """
        Create JWT access token for user

        Args:
            user: User model instance
            remember_me: Extend token lifetime if True
            custom_expiration: Override default expiration

        Returns:
            JWT access token string
        """
        current_time = utcnow()
        if custom_expiration:
            expire = current_time + custom_expiration
        elif remember_me:
            expire = current_time + timedelta(days=30)
        elif user.role == "admin":
            expire = current_time + self.admin_token_expire
        else:
            expire = current_time + self.user_token_expire

        payload = {
            "sub": str(user.id),
            "user_id": user.id,
            "role": user.role,
            "email": user.email,
            "exp": int(expire.timestamp()),
            "iat": int(current_time.timestamp()),
            "iss": self.issuer,
            "type": "access",
        }

        try:
            token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        except JWTError as e:
            logger.error(f"Failed to create access token: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create access token",
            )

        logger.info(f"Access token created for user: {user.id}")
        return token

    def verify_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """
        Verify and decode JWT token
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": True},
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid or expired token",
                headers={"WWW-Authenticate": "Bearer"},
            )

        # Verify token type (check 'type' field, not 'role')
        if payload.get("type") != token_type:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid token type. Expected {token_type}",
            )

        return payload


jwt_manager = JWTManager()
