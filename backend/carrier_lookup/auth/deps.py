"""Demo accounts and the FastAPI dependencies that guard write endpoints.

There is no user table: two fixed accounts (an administrator and a
read-only user) are configured through settings.

Dependencies:
  get_current_user  → decode the bearer JWT, return the matching DemoUser
  require_admin     → restrict to the admin role
"""

import enum
import secrets
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from carrier_lookup.auth.jwt import decode_token
from carrier_lookup.config import settings
from carrier_lookup.middleware.exceptions import PermissionDeniedError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(frozen=True)
class DemoUser:
    id: str
    username: str
    name: str
    email: str
    role: UserRole


def demo_users() -> dict[str, tuple[DemoUser, str]]:
    """username -> (user, password)."""
    return {
        settings.admin_username: (
            DemoUser("1", settings.admin_username, "Admin User",
                     "admin@carrierlookup.com", UserRole.ADMIN),
            settings.admin_password,
        ),
        settings.user_username: (
            DemoUser("2", settings.user_username, "Test User",
                     "user@carrierlookup.com", UserRole.USER),
            settings.user_password,
        ),
    }


def authenticate(username: str, password: str) -> DemoUser | None:
    entry = demo_users().get(username)
    if entry is None:
        return None
    user, expected = entry
    if not secrets.compare_digest(password.encode(), expected.encode()):
        return None
    return user


def _user_by_id(user_id: str) -> DemoUser | None:
    for user, _password in demo_users().values():
        if user.id == user_id:
            return user
    return None


async def get_current_user(token: str = Depends(oauth2_scheme)) -> DemoUser:
    payload = decode_token(token)
    user_id: str | None = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = _user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(user: DemoUser = Depends(get_current_user)) -> DemoUser:
    """Restrict endpoint to administrators."""
    if user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Admin access required")
    return user
