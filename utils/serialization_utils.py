"""
utils/serialization_utils.py

Purpose: Mongo document to JSON conversion
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId


def serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Converts ObjectIds and datetimes so the document can go out as JSON.
    """
    if doc is None:
        return None
    return serialize_value(doc)


def serialize_docs(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_doc(doc) for doc in docs]
