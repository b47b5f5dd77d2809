# reimbursement/core/security.py

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Tuple

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError, jwt

from reimbursement.core.config import settings

logger = logging.getLogger(__name__)

SECRET_KEY = settings.JWT_SECRET
ALGORITHM = settings.JWT_ALGORITHM

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# -------------------------
# PASSWORDS
# -------------------------
def hash_password(password: str) -> Tuple[str, str]:
    """Hash a password with a freshly generated bcrypt salt.

    Returns ``(hash, salt)``. The salt is embedded in the bcrypt hash as
    well; it is returned separately so it can be stored next to it.
    """
    if not password:
        raise ValueError("password_blank")

    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8"), salt.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed hash
        return False


# -------------------------
# TOKENS
# -------------------------
def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def _decode(token: str, expected_type: str) -> Dict[str, Any]:
    if not token:
        raise JWTError("token_blank")

    payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    if payload.get("type") != expected_type:
        raise JWTError("wrong_token_type")
    if not payload.get("sub"):
        raise JWTError("token_missing_sub")
    return payload


def generate_token(user_id, role) -> str:
    role = getattr(role, "value", role)
    return _encode(
        {"sub": str(user_id), "role": role, "type": ACCESS_TOKEN_TYPE},
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def generate_refresh_token(user_id) -> str:
    return _encode(
        {
            "sub": str(user_id),
            "type": REFRESH_TOKEN_TYPE,
            # two logins within the same second still get distinct tokens
            "jti": uuid.uuid4().hex,
        },
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def verify_token(token: str) -> Dict[str, str]:
    try:
        payload = _decode(token, ACCESS_TOKEN_TYPE)
    except JWTError as e:
        logger.debug("access token rejected: %s", e)
        raise unauthorized("Invalid token")

    return {"user_id": payload["sub"], "role": payload.get("role")}


def verify_refresh_token(token: str) -> Dict[str, str]:
    try:
        payload = _decode(token, REFRESH_TOKEN_TYPE)
    except JWTError as e:
        logger.debug("refresh token rejected: %s", e)
        raise unauthorized("Invalid refresh token")

    return {"user_id": payload["sub"]}
