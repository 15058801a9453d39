"""
app/models/user.py

Purpose: User document model

- Email is the unique key
- Role gates admin routes, badge gates paid-tier routes
- Created on first sign-in, never deleted
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class Role(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class Badge(str, Enum):
    """
    Subscription tiers, cheapest first. Bronze is the free tier.
    """
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"

    @property
    def is_paid(self) -> bool:
        return self is not Badge.BRONZE


def new_user_document(email: str, username: Optional[str] = None, photo: Optional[str] = None) -> Dict[str, Any]:
    """
    Builds the document inserted on first sign-in.

    Role and badge always start at member/Bronze whatever the client sent.
    """
    return {
        "email": email,
        "username": username,
        "photo": photo,
        "role": Role.MEMBER.value,
        "badge": Badge.BRONZE.value,
        "createdAt": datetime.now(timezone.utc),
    }
