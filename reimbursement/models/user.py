import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, String, Uuid
from sqlalchemy.orm import relationship

from reimbursement.core.roles import UserRole
from reimbursement.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    salt = Column(String, nullable=False)
    department = Column(String, nullable=True)
    role = Column(Enum(UserRole), default=UserRole.USER, nullable=False)

    # single active session
    refresh_token = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    expenses = relationship(
        "ExpenseRequest",
        back_populates="user",
        passive_deletes=True,
    )
