# reimbursement/core/permissions.py

from dataclasses import dataclass
from typing import Callable, Iterable, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from reimbursement.core.roles import APPROVER_ROLES, UserRole
from reimbursement.core.security import unauthorized, verify_token
from reimbursement.db.session import get_db
from reimbursement.models.user import User

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Identity resolved from the bearer token."""

    id: UUID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_approver(self) -> bool:
        return self.role in APPROVER_ROLES


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise unauthorized("Authentication required")

    claims = verify_token(credentials.credentials)

    try:
        return Principal(id=UUID(claims["user_id"]), role=UserRole(claims["role"]))
    except ValueError:
        raise unauthorized("Invalid token")


def get_active_principal(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Principal:
    """Like get_current_principal, but the account must still exist.

    Used where the caller's id ends up in a foreign key.
    """
    if db.get(User, principal.id) is None:
        raise unauthorized("User no longer exists")
    return principal


def require_roles(
    roles: Iterable[UserRole],
    detail: str = "Not enough permissions",
    authenticate: Callable[..., Principal] = get_current_principal,
):
    allowed = tuple(roles)

    def checker(principal: Principal = Depends(authenticate)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return principal

    return checker


require_admin = require_roles([UserRole.ADMIN], "Administrator role required")
require_approver = require_roles(APPROVER_ROLES, "Approver or administrator role required")
require_active_approver = require_roles(
    APPROVER_ROLES,
    "Approver or administrator role required",
    authenticate=get_active_principal,
)
