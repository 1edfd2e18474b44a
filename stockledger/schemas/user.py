from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from stockledger.models.user import UserRole


class UserCreate(BaseModel):
    """Schema for creating a user."""
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=100, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: Optional[str] = Field(None, max_length=100)
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    """Schema for updating a user. All fields are optional."""
    username: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = Field(None, min_length=3, max_length=100, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: Optional[str] = Field(None, max_length=100)
    password: Optional[str] = Field(None, min_length=6, max_length=72)
    role: Optional[UserRole] = None


class UserResponse(BaseModel):
    """User as returned by the API; never includes the password hash."""
    id: Optional[int] = None
    username: str
    email: str
    full_name: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    user: UserResponse
    is_demo: bool = False
    message: str = "Login successful"
