"""
Response helpers: the JSON envelope and Mongo document serialization.
"""
from typing import Any, Optional

from bson import ObjectId


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse a storage id; malformed ids yield None and read as not found."""
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Expose `_id` as a string `id` and stringify nested ObjectIds."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if key == "_id":
            out["id"] = str(value)
        elif isinstance(value, ObjectId):
            out[key] = str(value)
        else:
            out[key] = value
    return out


def success(message: str, data: Any = None) -> dict:
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def failure(message: str, error: Optional[str] = None) -> dict:
    body = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body
