from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from ..core.roles import Role


class UserBase(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None


class StudentCreate(UserBase):
    password: str = Field(..., min_length=6)
    registration_number: str = Field(..., min_length=1)
    course: str = Field(..., min_length=1)
    department: Optional[str] = None
    year: Optional[str] = None


class TeacherCreate(UserBase):
    password: str = Field(..., min_length=6)
    department: Optional[str] = None


class StaffCreate(UserBase):
    """Admin-created account for any non-student role"""
    password: str = Field(..., min_length=6)
    role: Role
    department: Optional[str] = None


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)

    @field_validator("full_name", "password")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        # Omit the field to keep the current value
        if value is None:
            raise ValueError("may not be null")
        return value


class User(UserBase):
    id: int
    role: Role
    is_active: bool
    is_verified: bool
    registration_number: Optional[str] = None
    course: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AccountVerification(BaseModel):
    approved: bool = True
