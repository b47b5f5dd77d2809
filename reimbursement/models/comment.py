import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship

from reimbursement.db.base import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    content = Column(Text, nullable=False)

    expense_id = Column(
        Uuid,
        ForeignKey("expense_requests.id"),
        index=True,
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

    expense = relationship("ExpenseRequest", back_populates="comments")
    user = relationship("User")
