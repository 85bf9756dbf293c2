import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# Registration schemas
class UserRegistrationRequest(BaseModel):
    """Create a learner account with email and password"""

    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., min_length=8, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    phone_number: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)

    @field_validator("phone_number")
    @classmethod
    def validate_phone(cls, v):
        if v and not re.match(r"^\+?[0-9\s\-]{7,20}$", v):
            raise ValueError("Invalid phone number format")
        return v


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., description="Password")
    remember_me: bool = Field(default=False, description="Remember login")


# Response schemas
class UserResponse(BaseModel):
    """User response data"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str
    full_name: str
    phone_number: Optional[str]
    country: Optional[str]
    role: str
    is_active: bool

    # Timestamps
    created_at: datetime
    last_login: Optional[datetime]


class AuthResponse(BaseModel):
    """Standard authentication response"""

    success: bool
    access_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user: Optional[UserResponse] = None
    message: str
