import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from reimbursement.db.base import Base
from reimbursement.models.expense_request import RequestStatus


class Approval(Base):
    """Audit record of one approve/reject decision. Never updated."""

    __tablename__ = "approvals"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    status = Column(Enum(RequestStatus), nullable=False)
    comment = Column(Text, nullable=True)

    expense_id = Column(
        Uuid,
        ForeignKey("expense_requests.id"),
        index=True,
        nullable=False,
    )
    approver_id = Column(
        Uuid,
        ForeignKey("users.id"),
        index=True,
        nullable=False,
    )

    created_at = Column(DateTime, default=datetime.utcnow)

    expense = relationship("ExpenseRequest", back_populates="approvals")
    approver = relationship("User")
