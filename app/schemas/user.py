from pydantic import BaseModel, EmailStr
from typing import Any, Dict, List, Optional


class TokenRequest(BaseModel):
    email: EmailStr


class TokenResponse(BaseModel):
    token: str


class UserCreate(BaseModel):
    email: EmailStr
    username: Optional[str] = None
    photo: Optional[str] = None


class RegisterResponse(BaseModel):
    success: bool = True
    created: bool


class UserListResponse(BaseModel):
    users: List[Dict[str, Any]]
    usersCount: int


class AdminStatus(BaseModel):
    admin: bool
