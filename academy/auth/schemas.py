from pydantic import BaseModel, EmailStr

from academy.core.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserInfo(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: UserRole


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo


class CurrentUser(BaseModel):
    """Authenticated principal resolved from the access token."""

    id: int
    role: UserRole
