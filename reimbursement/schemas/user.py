from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from reimbursement.core.constants import MAX_PASSWORD_BYTES
from reimbursement.core.roles import UserRole


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=8), AfterValidator(_check_password_bytes)]


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: Password
    department: Optional[str] = None
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    department: Optional[str] = None
    role: Optional[UserRole] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    department: Optional[str] = None


class UserBrief(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole
    department: Optional[str] = None

    class Config:
        from_attributes = True


class UserOut(UserBrief):
    created_at: datetime
    updated_at: datetime
