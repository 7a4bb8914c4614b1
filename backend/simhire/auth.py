from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from fastapi import Depends, Request
from jose import JWTError, jwt

from simhire.config import get_settings
from simhire.errors import forbidden, unauthorized

settings = get_settings()

ALGORITHM = "HS256"

Role = Literal["candidate", "company"]


@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: Role


def create_access_token(user_id: str, role: Role) -> str:
    expire = datetime.now(timezone.utc) + timedelta(days=settings.token_expire_days)
    to_encode = {"exp": expire, "userId": user_id, "role": role}
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def verify_access_token(token: str) -> Optional[CurrentUser]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    user_id = payload.get("userId")
    role = payload.get("role")
    if not user_id or role not in ("candidate", "company"):
        return None
    return CurrentUser(id=user_id, role=role)


async def get_current_user(request: Request) -> CurrentUser:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        raise unauthorized("No token provided. Please login.")
    user = verify_access_token(header[len("Bearer "):])
    if user is None:
        raise unauthorized("Invalid or expired token. Please login again.")
    return user


async def require_candidate(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != "candidate":
        raise forbidden("Access denied. Candidate role required.")
    return user


async def require_company(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != "company":
        raise forbidden("Access denied. Company role required.")
    return user


async def get_optional_user(request: Request) -> Optional[CurrentUser]:
    """Identify the caller when a valid token is sent; anonymous otherwise."""
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return verify_access_token(header[len("Bearer "):])
