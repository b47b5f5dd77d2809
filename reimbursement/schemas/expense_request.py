# reimbursement/schemas/expense_request.py

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator

from reimbursement.core.constants import DEFAULT_PAGE_SIZE, EXPENSE_CATEGORIES, MAX_PAGE_SIZE
from reimbursement.models.expense_request import RequestStatus
from reimbursement.schemas.user import UserBrief


def _check_category(value: str) -> str:
    if value not in EXPENSE_CATEGORIES:
        raise ValueError(f"category must be one of: {', '.join(EXPENSE_CATEGORIES)}")
    return value


Category = Annotated[str, AfterValidator(_check_category)]
Amount = Annotated[Decimal, Field(ge=1, max_digits=12, decimal_places=2)]


class ExpenseCreate(BaseModel):
    title: str = Field(min_length=1)
    amount: Amount
    description: Optional[str] = None
    category: Optional[Category] = None
    receipt_url: Optional[str] = None


class ExpenseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Amount] = None
    description: Optional[str] = None
    category: Optional[Category] = None
    receipt_url: Optional[str] = None


class StatusUpdate(BaseModel):
    status: RequestStatus
    comment: Optional[str] = None

    @field_validator("status")
    @classmethod
    def must_be_decision(cls, v: RequestStatus) -> RequestStatus:
        if v == RequestStatus.PENDING:
            raise ValueError("status must be APPROVED or REJECTED")
        return v


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be blank")
        return v


class ExpenseQuery(BaseModel):
    status: Literal["ALL", "PENDING", "APPROVED", "REJECTED"] = "ALL"
    category: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_range(self):
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("from_date must not be after to_date")
        return self


class AllExpensesQuery(ExpenseQuery):
    user_id: Optional[UUID] = None


class ExpenseOut(BaseModel):
    id: UUID
    title: str
    amount: float
    description: Optional[str]
    category: Optional[str]
    receipt_url: Optional[str]
    status: RequestStatus
    user_id: UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExpenseWithUser(ExpenseOut):
    user: Optional[UserBrief] = None


class ApprovalOut(BaseModel):
    id: UUID
    status: RequestStatus
    comment: Optional[str]
    expense_id: UUID
    approver_id: UUID
    created_at: datetime
    approver: Optional[UserBrief] = None

    class Config:
        from_attributes = True


class CommentOut(BaseModel):
    id: UUID
    content: str
    expense_id: UUID
    user_id: UUID
    created_at: datetime
    updated_at: datetime
    user: Optional[UserBrief] = None

    class Config:
        from_attributes = True


class ExpenseDetail(ExpenseWithUser):
    approvals: List[ApprovalOut] = []
    comments: List[CommentOut] = []


class ExpensePage(BaseModel):
    expenses: List[ExpenseWithUser]
    total: int


class StatusUpdateResult(BaseModel):
    expense: ExpenseOut
    approval: ApprovalOut
