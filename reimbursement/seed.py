"""Fill the database with demo users and expense requests.

Usage:
  reimbursement-seed            # wipes existing data first
  reimbursement-seed --no-wipe  # only adds rows

NOTE: This is intended for local/dev.
"""

import argparse
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from reimbursement.core.config import settings
from reimbursement.core.logging import configure_logging
from reimbursement.core.roles import UserRole
from reimbursement.core.security import hash_password
from reimbursement.db.base import Base
from reimbursement.db.session import SessionLocal, engine
from reimbursement.models import Approval, Comment, ExpenseRequest, RequestStatus, User

logger = logging.getLogger(__name__)

DEMO_USERS = [
    ("Taro Admin", "admin@example.com", "admin123", UserRole.ADMIN, "Corporate Planning"),
    ("Hanako Approver", "approver@example.com", "approver123", UserRole.APPROVER, "Accounting"),
    ("Jiro User", "user1@example.com", "user1234", UserRole.USER, "Sales"),
    ("Saburo User", "user2@example.com", "user1234", UserRole.USER, "Engineering"),
]


def wipe(db: Session) -> None:
    db.query(Comment).delete()
    db.query(Approval).delete()
    db.query(ExpenseRequest).delete()
    db.query(User).delete()
    db.commit()
    logger.info("cleared existing data")


def create_users(db: Session) -> dict:
    users = {}
    for name, email, password, role, department in DEMO_USERS:
        password_hash, salt = hash_password(password)
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            salt=salt,
            role=role,
            department=department,
        )
        db.add(user)
        users[email] = user
    db.commit()

    for user in users.values():
        logger.info("created %s user %s", user.role.value, user.email)
    return users


def create_expenses(db: Session, users: dict) -> None:
    approver = users["approver@example.com"]
    user1 = users["user1@example.com"]
    user2 = users["user2@example.com"]

    rows = [
        (user1, "Tokyo business trip train fare", "12500", "Travel", RequestStatus.APPROVED,
         "Bullet train to head office", "Approved. Please keep the receipts."),
        (user1, "Client entertainment", "35000", "Entertainment", RequestStatus.PENDING,
         "Dinner after the meeting with company A", None),
        (user1, "Office supplies", "8000", "Supplies", RequestStatus.REJECTED,
         "Desk lamp", "Please order through the procurement system."),
        (user2, "Osaka trip hotel", "15000", "Accommodation", RequestStatus.PENDING,
         "Hotel for the Osaka branch visit", None),
        (user2, "Team lunch", "6000", "Meals", RequestStatus.APPROVED,
         "Lunch with the new team members", None),
    ]

    for owner, title, amount, category, status, description, note in rows:
        expense = ExpenseRequest(
            title=title,
            amount=Decimal(amount),
            description=description,
            category=category,
            status=status,
            user_id=owner.id,
        )
        db.add(expense)
        db.flush()

        if status != RequestStatus.PENDING:
            db.add(
                Approval(
                    status=status,
                    comment=note,
                    expense_id=expense.id,
                    approver_id=approver.id,
                )
            )
        if note:
            db.add(Comment(content=note, expense_id=expense.id, user_id=approver.id))

        logger.info("created expense %r (%s)", title, status.value)

    db.commit()


def main() -> None:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--no-wipe", action="store_true", help="keep existing rows")
    args = ap.parse_args()

    configure_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if not args.no_wipe:
            wipe(db)
        users = create_users(db)
        create_expenses(db, users)
    finally:
        db.close()

    logger.info("seed data created")


if __name__ == "__main__":
    main()
