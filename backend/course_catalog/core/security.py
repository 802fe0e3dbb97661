import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from course_catalog.core.config import (
    JWT_SECRET_KEY,
    JWT_ALGORITHM,
    ACCESS_TOKEN_EXPIRES_SECONDS,
    RESET_TOKEN_EXPIRES_SECONDS,
)

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
# auto_error=False so a missing header is a 401 and a bad token a 403.
bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_TYPE = "access"
RESET_TOKEN_TYPE = "reset"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_pass: str, hashed_pass: str) -> bool:
    return pwd_context.verify(plain_pass, hashed_pass)


def create_jwt_token(data: dict, expires_delta: int = ACCESS_TOKEN_EXPIRES_SECONDS,
                     token_type: str = ACCESS_TOKEN_TYPE) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"type": token_type, "iat": now, "exp": now + timedelta(seconds=expires_delta)})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def create_access_token(user_id: str, role: str, email: str) -> str:
    return create_jwt_token({"user_id": user_id, "role": role, "email": email})


def create_reset_token(user_id: str) -> str:
    return create_jwt_token(
        {"user_id": user_id, "jti": uuid.uuid4().hex},
        expires_delta=RESET_TOKEN_EXPIRES_SECONDS,
        token_type=RESET_TOKEN_TYPE,
    )


def decode_jwt_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> Optional[dict]:
    """
    Verify signature and expiry and check the token was issued for `token_type`.
    Returns the payload, or None for any token that must be rejected.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.debug("[decode_jwt_token] Token signature has expired.")
        return None
    except jwt.InvalidTokenError:
        logger.debug("[decode_jwt_token] Token decode error. Invalid signature.")
        return None

    if payload.get("type") != token_type or not payload.get("user_id"):
        logger.debug("[decode_jwt_token] Token type %r is not %r.", payload.get("type"), token_type)
        return None
    return payload


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return {
        "user_id": payload["user_id"],
        "role": payload.get("role"),
        "email": payload.get("email"),
    }


def require_role(role: str):
    def role_checker(user: dict = Depends(get_current_user)) -> dict:
        user_role = user.get("role")
        logger.debug(f"[require_role] Required: {role}, user has role: {user_role}")
        if user_role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return role_checker


require_admin = require_role("admin")
