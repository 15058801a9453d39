"""
utils/validation_utils.py

Purpose: Input validation

- ObjectId parsing for path parameters
- Regex-safe search terms
"""

import re
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId


def parse_object_id(value: str) -> Optional[ObjectId]:
    """
    Parses a hex ObjectId string.

    Args:
        value: 24-char hex string from a path parameter or body

    Returns:
        ObjectId, or None if the string is not a valid id
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def escape_search_term(term: str) -> str:
    """
    Escapes user text for use inside a $regex so that it matches literally.
    """
    return re.escape(term.strip())
