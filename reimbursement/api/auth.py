import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from reimbursement.core.permissions import Principal, get_current_principal
from reimbursement.core.roles import UserRole
from reimbursement.core.security import (
    generate_refresh_token,
    generate_token,
    hash_password,
    unauthorized,
    verify_password,
    verify_refresh_token,
)
from reimbursement.db.session import get_db
from reimbursement.models.user import User
from reimbursement.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    SuccessResponse,
    TokenPair,
)
from reimbursement.schemas.user import UserBrief

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def issue_tokens(db: Session, user: User) -> TokenPair:
    """Mint a fresh token pair and make its refresh token the only valid one."""
    token = generate_token(user.id, user.role)
    refresh_token = generate_refresh_token(user.id)

    user.refresh_token = refresh_token
    db.commit()

    return TokenPair(token=token, refresh_token=refresh_token)


# -------------------------
# REGISTER
# -------------------------
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    email = payload.email.lower()

    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    password_hash, salt = hash_password(payload.password)
    user = User(
        name=payload.name,
        email=email,
        password_hash=password_hash,
        salt=salt,
        department=payload.department,
        role=UserRole.USER,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    tokens = issue_tokens(db, user)
    logger.info("registered user id=%s", user.id)

    return AuthResponse(user=UserBrief.model_validate(user), **tokens.model_dump())


# -------------------------
# LOGIN
# -------------------------
@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == payload.email.lower()).first()

    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("failed login for email=%s", payload.email)
        raise unauthorized("Invalid email or password")

    # overwrites the stored refresh token, ending any other session
    tokens = issue_tokens(db, user)
    logger.info("user id=%s logged in", user.id)

    return AuthResponse(user=UserBrief.model_validate(user), **tokens.model_dump())


# -------------------------
# REFRESH
# -------------------------
@router.post("/refresh-token", response_model=TokenPair)
def refresh_token(payload: RefreshRequest, db: Session = Depends(get_db)):
    claims = verify_refresh_token(payload.refresh_token)

    user = db.query(User).filter(User.id == _parse_uuid(claims["user_id"])).first()
    if not user or user.refresh_token != payload.refresh_token:
        logger.info("refresh token rejected for sub=%s", claims["user_id"])
        raise unauthorized("Invalid refresh token")

    return issue_tokens(db, user)


# -------------------------
# LOGOUT
# -------------------------
@router.post("/logout", response_model=SuccessResponse)
def logout(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    user = db.query(User).filter(User.id == principal.id).first()
    if user:
        user.refresh_token = None
        db.commit()

    return SuccessResponse()


@router.get("/me", response_model=UserBrief)
def me(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    user = db.query(User).filter(User.id == principal.id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def _parse_uuid(value: str):
    try:
        return UUID(value)
    except ValueError:
        raise unauthorized("Invalid refresh token")
