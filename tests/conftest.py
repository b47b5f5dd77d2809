"""
Pytest fixtures for the API test suite.

Provides:
- A fresh in-memory SQLite database per test (shared through StaticPool,
  foreign keys enforced)
- A FastAPI TestClient with get_db pointed at that database
- User / expense / comment factories and bearer-header helpers
"""

import logging
import os
import tempfile

# Must be set before the application modules read their settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="reimbursement-uploads-")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reimbursement.core.logging import configure_logging, reset_logging
from reimbursement.core.roles import UserRole
from reimbursement.core.security import generate_token, hash_password
from reimbursement.db.base import Base
from reimbursement.db.session import get_db
from reimbursement.main import app
from reimbursement.models import Approval, Comment, ExpenseRequest, RequestStatus, User


DEFAULT_PASSWORD = "password123"


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Factories
# =============================================================================


def _persist(session_factory, obj):
    with session_factory() as s:
        s.add(obj)
        s.commit()
        s.refresh(obj)
        s.expunge(obj)
    return obj


@pytest.fixture
def make_user(session_factory):
    def _make(
        role=UserRole.USER,
        email=None,
        password=DEFAULT_PASSWORD,
        name="Test User",
        department=None,
    ):
        password_hash, salt = hash_password(password)
        return _persist(
            session_factory,
            User(
                name=name,
                email=email or f"{uuid4().hex[:10]}@example.com",
                password_hash=password_hash,
                salt=salt,
                department=department,
                role=role,
            ),
        )

    return _make


@pytest.fixture
def make_expense(session_factory):
    def _make(owner, status=RequestStatus.PENDING, **fields):
        data = {
            "title": "Taxi to client",
            "amount": Decimal("5000"),
            "description": "Taxi from the station",
            "category": "Travel",
        }
        data.update(fields)
        return _persist(
            session_factory,
            ExpenseRequest(status=status, user_id=owner.id, **data),
        )

    return _make


@pytest.fixture
def make_comment(session_factory):
    def _make(expense, author, content="Looks fine"):
        return _persist(
            session_factory,
            Comment(content=content, expense_id=expense.id, user_id=author.id),
        )

    return _make


@pytest.fixture
def make_approval(session_factory):
    def _make(expense, approver, status=RequestStatus.APPROVED, comment=None):
        return _persist(
            session_factory,
            Approval(
                status=status,
                comment=comment,
                expense_id=expense.id,
                approver_id=approver.id,
            ),
        )

    return _make


@pytest.fixture
def user(make_user):
    return make_user(UserRole.USER, name="Jiro User")


@pytest.fixture
def other_user(make_user):
    return make_user(UserRole.USER, name="Saburo User")


@pytest.fixture
def approver(make_user):
    return make_user(UserRole.APPROVER, name="Hanako Approver")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, name="Taro Admin")


# =============================================================================
# Helpers
# =============================================================================


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {generate_token(user.id, user.role)}"}


@pytest.fixture
def headers():
    return auth_headers
