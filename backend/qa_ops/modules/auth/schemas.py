from __future__ import annotations

from pydantic import BaseModel, EmailStr

from qa_ops.core.constants import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class CurrentUserResponse(BaseModel):
    id: str
    email: str
    full_name: str | None
    role: UserRole
