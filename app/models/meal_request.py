"""
app/models/meal_request.py

Purpose: Meal request model and its lifecycle

- Requested -> Delivered (terminal)
- Requested -> cancelled (document deleted, terminal)
- mealId is a weak reference to a catalog meal, validated on read
"""

from enum import Enum
from typing import Dict, List, Optional


class RequestStatus(str, Enum):
    REQUESTED = "Requested"
    DELIVERED = "Delivered"


REQUEST_TRANSITIONS: Dict[RequestStatus, List[RequestStatus]] = {
    RequestStatus.REQUESTED: [RequestStatus.DELIVERED],
    RequestStatus.DELIVERED: [],
}


def is_valid_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in REQUEST_TRANSITIONS.get(current, [])


def parse_status(value: Optional[str]) -> RequestStatus:
    """
    Reads a stored status. Missing or unrecognised values (written by older
    clients that chose their own status) count as Requested.
    """
    try:
        return RequestStatus(value)
    except ValueError:
        return RequestStatus.REQUESTED
