"""
JWT authentication dependencies.

Tokens are issued by the user service and signed with the shared SECRET_KEY.
A request without a valid token is treated as anonymous; only the guarded
routes reject it.
"""

import jwt
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from api.errors import ForbiddenError, UnauthorizedError
from config.settings import JWT_ALGORITHM, SECRET_KEY
from logging_config.logger import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    username: str
    isAdmin: bool = False


def create_token(username: str, is_admin: bool = False) -> str:
    """Sign a token carrying the username and admin flag."""
    payload = {"username": username, "isAdmin": is_admin}
    return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Optional[CurrentUser]:
    """Return the user in a token, or None if the token does not verify."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected token: {e}")
        return None

    if "username" not in payload:
        return None
    return CurrentUser(username=payload["username"], isAdmin=bool(payload.get("isAdmin", False)))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentUser]:
    """Resolve the bearer token, if any."""
    if credentials is None:
        return None
    return decode_token(credentials.credentials)


async def ensure_logged_in(
    user: Optional[CurrentUser] = Depends(get_current_user),
) -> CurrentUser:
    """Require a valid token."""
    if user is None:
        raise UnauthorizedError()
    return user


async def ensure_admin(user: CurrentUser = Depends(ensure_logged_in)) -> CurrentUser:
    """Require a valid token belonging to an admin."""
    if not user.isAdmin:
        logger.warning(f"Non-admin user {user.username} attempted an admin action")
        raise ForbiddenError()
    return user
