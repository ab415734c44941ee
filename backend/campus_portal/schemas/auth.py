from pydantic import BaseModel, EmailStr
from typing import Optional

from .user import User


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    success: bool
    message: str
    user: Optional[User] = None
    token: Optional[str] = None


class CheckAuthResponse(BaseModel):
    success: bool
    message: str = "Authenticated user!"
    user: Optional[User] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
