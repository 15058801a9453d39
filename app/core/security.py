"""
app/core/security.py

Purpose: Access token issuance and verification

- HS256 tokens signed with ACCESS_TOKEN_SECRET (PyJWT)
- Token carries the caller's email in the "email" claim
- No refresh, no revocation list
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt.exceptions import InvalidTokenError, ExpiredSignatureError

from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.logging import get_logger

logger = get_logger(__name__)

ALGORITHM = "HS256"


def create_access_token(email: str, expires_minutes: Optional[int] = None) -> str:
    """
    Signs a token asserting the given email.

    Args:
        email: Identity to assert
        expires_minutes: Lifetime override; falls back to ACCESS_TOKEN_EXPIRE_MINUTES,
            and no "exp" claim is added when both are unset

    Returns:
        Encoded JWT
    """
    payload = {"email": email, "iat": datetime.now(timezone.utc)}

    lifetime = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    if lifetime is not None:
        payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=lifetime)

    return jwt.encode(payload, settings.ACCESS_TOKEN_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """
    Verifies the signature and returns the asserted email.

    Raises:
        AuthenticationError: If the token is expired, malformed or unsigned by us
    """
    try:
        payload = jwt.decode(token, settings.ACCESS_TOKEN_SECRET, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except InvalidTokenError as e:
        logger.info(f"Rejected access token: {e}")
        raise AuthenticationError("Unauthorized access")

    email = payload.get("email")
    if not email or not isinstance(email, str):
        raise AuthenticationError("Unauthorized access")
    return email
