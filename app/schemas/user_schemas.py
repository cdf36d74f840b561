from datetime import datetime
from typing import Optional

from pydantic import EmailStr

from app.models.user import UserRole
from .common import CamelModel

class UserBase(CamelModel):
    name: Optional[str] = None
    email: EmailStr

class UserCreate(UserBase):
    google_id: Optional[str] = None

class UserRead(UserBase):
    id: int
    role: UserRole
    is_test_user: bool = False
    created_at: Optional[datetime] = None

class UserSummary(CamelModel):
    name: Optional[str] = None
    email: str

class RoleUpdateResponse(CamelModel):
    success: bool
    message: str
    role: UserRole
