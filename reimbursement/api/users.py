import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from reimbursement.core.permissions import Principal, get_current_principal, require_admin
from reimbursement.core.security import hash_password
from reimbursement.db.session import get_db
from reimbursement.models.user import User
from reimbursement.schemas.auth import SuccessResponse
from reimbursement.schemas.user import (
    ProfileUpdate,
    UserBrief,
    UserCreate,
    UserOut,
    UserUpdate,
)
from reimbursement.utils.cleanup import delete_user_tree

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


def get_user_or_404(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter_by(id=user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def ensure_email_available(db: Session, email: str, owner_id: Optional[UUID] = None) -> None:
    existing = db.query(User).filter(User.email == email).first()
    if existing and existing.id != owner_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )


def apply_user_changes(user: User, changes: dict) -> None:
    """Copy validated changes onto a user, re-hashing a new password."""
    password = changes.pop("password", None)
    if password:
        user.password_hash, user.salt = hash_password(password)

    if changes.get("email"):
        changes["email"] = changes["email"].lower()

    for k, v in changes.items():
        # name/email/role are required columns; None means "leave as is"
        if v is None and k != "department":
            continue
        setattr(user, k, v)


# --------------------------------------------------
# SELF SERVICE
# --------------------------------------------------
@router.put("/me", response_model=UserBrief)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    user = get_user_or_404(db, principal.id)

    if payload.email:
        ensure_email_available(db, payload.email.lower(), owner_id=user.id)

    apply_user_changes(user, payload.model_dump(exclude_unset=True))

    db.commit()
    db.refresh(user)
    return user


# --------------------------------------------------
# ADMIN
# --------------------------------------------------
@router.get("", response_model=list[UserOut])
def get_all(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return db.query(User).order_by(User.created_at.desc()).all()


@router.get("/{user_id}", response_model=UserOut)
def get_by_id(
    user_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return get_user_or_404(db, user_id)


@router.post("", response_model=UserBrief, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    email = payload.email.lower()
    ensure_email_available(db, email)

    password_hash, salt = hash_password(payload.password)
    user = User(
        name=payload.name,
        email=email,
        password_hash=password_hash,
        salt=salt,
        department=payload.department,
        role=payload.role,
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("admin id=%s created user id=%s role=%s", principal.id, user.id, user.role.value)
    return user


@router.put("/{user_id}", response_model=UserBrief)
def update_user(
    user_id: UUID,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    user = get_user_or_404(db, user_id)

    if payload.email and payload.email.lower() != user.email:
        ensure_email_available(db, payload.email.lower(), owner_id=user.id)

    apply_user_changes(user, payload.model_dump(exclude_unset=True))

    db.commit()
    db.refresh(user)

    logger.info("admin id=%s updated user id=%s", principal.id, user.id)
    return user


@router.delete("/{user_id}", response_model=SuccessResponse)
def delete_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    user = get_user_or_404(db, user_id)

    if user.id == principal.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    try:
        delete_user_tree(db, user.id)
        db.delete(user)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("admin id=%s deleted user id=%s", principal.id, user_id)
    return SuccessResponse()
