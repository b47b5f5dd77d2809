# reimbursement/models/expense_request.py

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from reimbursement.db.base import Base


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ExpenseRequest(Base):
    __tablename__ = "expense_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    receipt_url = Column(String, nullable=True)

    status = Column(
        Enum(RequestStatus),
        default=RequestStatus.PENDING,
        nullable=False,
    )

    user_id = Column(
        Uuid,
        ForeignKey("users.id"),
        index=True,
        nullable=False,
    )

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="expenses")

    # children are removed explicitly before the expense, see utils.cleanup
    approvals = relationship(
        "Approval",
        back_populates="expense",
        order_by="Approval.created_at",
        passive_deletes=True,
    )
    comments = relationship(
        "Comment",
        back_populates="expense",
        order_by="Comment.created_at",
        passive_deletes=True,
    )
