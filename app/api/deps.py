"""
app/api/deps.py

Purpose: Request dependencies

- Database handle from the application state
- Bearer token / cookie authentication
- Admin and paid-tier authorization gates
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    PaymentRequiredError,
)
from app.core.logging import get_logger
from app.core.security import decode_access_token
from app.db.mongo import MealDatabase
from app.models.user import Badge, Role
from app.services.user_service import get_user_by_email
from utils.constants import MSG_FORBIDDEN, MSG_PAYMENT_REQUIRED, MSG_UNAUTHORIZED

logger = get_logger(__name__)

TOKEN_COOKIE = "token"


@dataclass
class CurrentUser:
    email: str


def get_database(request: Request) -> MealDatabase:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database not initialized. The application lifespan did not run.")
    return database


def extract_token(request: Request) -> Optional[str]:
    """
    Bearer token from the Authorization header, else the "token" cookie.
    """
    header = request.headers.get("Authorization")
    if header:
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return request.cookies.get(TOKEN_COOKIE)


async def get_current_user(request: Request) -> CurrentUser:
    token = extract_token(request)
    if not token:
        raise AuthenticationError(MSG_UNAUTHORIZED)
    return CurrentUser(email=decode_access_token(token))


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
) -> CurrentUser:
    user = await get_user_by_email(database, current_user.email)
    if user is None:
        logger.warning("Admin check for unknown user", extra={"email": current_user.email})
        raise AuthorizationError(MSG_FORBIDDEN)
    if user.get("role") != Role.ADMIN.value:
        raise AuthorizationError(MSG_FORBIDDEN)
    return current_user


async def require_paid_tier(
    current_user: CurrentUser = Depends(get_current_user),
    database: MealDatabase = Depends(get_database),
) -> CurrentUser:
    user = await get_user_by_email(database, current_user.email)
    if user is None:
        logger.warning("Tier check for unknown user", extra={"email": current_user.email})
        raise AuthorizationError(MSG_FORBIDDEN)
    if user.get("badge", Badge.BRONZE.value) == Badge.BRONZE.value:
        raise PaymentRequiredError(MSG_PAYMENT_REQUIRED)
    return current_user
