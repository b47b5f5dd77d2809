from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from reimbursement.schemas.user import Password, UserBrief


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: Password
    department: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenPair(BaseModel):
    token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(TokenPair):
    user: UserBrief


class SuccessResponse(BaseModel):
    success: bool = True
