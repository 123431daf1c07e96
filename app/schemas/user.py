from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.core.constants import USER_TYPES

class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    user_type: str
    parent_id: Optional[int] = None
    is_superuser: bool = False

    @field_validator("user_type")
    @classmethod
    def check_user_type(cls, value: str) -> str:
        if value not in USER_TYPES:
            raise ValueError(f"user_type must be one of {', '.join(USER_TYPES)}")
        return value

class UserCreate(UserBase):
    password: Optional[str] = None # Hierarchy members created by an admin may not log in
    is_active: bool = True

class UserUpdate(BaseModel): # Only include fields that can be updated
    email: Optional[EmailStr] = None
    is_active: Optional[bool] = None
    is_superuser: Optional[bool] = None
    password: Optional[str] = None
    parent_id: Optional[int] = None # Reassign within the hierarchy

class User(UserBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class UserWithChildren(User):
    children: List[User] = []
