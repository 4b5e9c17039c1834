"""
Query building and pagination shared by the organization and audit listings.
"""
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException


@dataclass
class Pagination:
    page: int = 1
    limit: int = 20

    def __post_init__(self):
        if self.page < 1 or self.limit < 1:
            raise HTTPException(status_code=400, detail="page and limit must be positive integers")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def meta(self, total: int) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "total_pages": math.ceil(total / self.limit),
        }


def contains(text: str) -> dict:
    """Case-insensitive substring match; the input is matched literally."""
    return {"$regex": re.escape(text), "$options": "i"}


def parse_date_bound(value: Optional[str], field: str, end: bool = False) -> Optional[datetime]:
    """
    Parse an ISO date or datetime into a naive UTC bound.
    A date-only upper bound covers the whole day.
    """
    if value is None or value == "":
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {field}. Expected an ISO-8601 date such as 2025-12-31",
        )
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    if end and len(value) == 10:
        parsed = parsed + timedelta(days=1) - timedelta(milliseconds=1)
    return parsed


def date_range(date_from: Optional[datetime], date_to: Optional[datetime]) -> Optional[dict]:
    window = {}
    if date_from:
        window["$gte"] = date_from
    if date_to:
        window["$lte"] = date_to
    return window or None


def build_organization_query(
    org_type: str,
    status: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    search: Optional[str] = None,
) -> dict:
    query = {"type": org_type}
    if status:
        query["status"] = status
    if city:
        query["city"] = contains(city)
    if state:
        query["state"] = contains(state)
    created = date_range(date_from, date_to)
    if created:
        query["created_at"] = created
    if search:
        text_match = contains(search)
        query["$or"] = [
            {"name": text_match},
            {"email": text_match},
            {"organization_code": text_match},
            {"city": text_match},
            {"phone": text_match},
        ]
    return query


def build_audit_query(
    entity_type: Optional[str] = None,
    action: Optional[str] = None,
    performed_by: Optional[str] = None,
    performed_by_role: Optional[str] = None,
    status: Optional[str] = None,
    entity_code: Optional[str] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
) -> dict:
    query = {}
    if entity_type:
        query["entity_type"] = entity_type
    if action:
        query["action"] = action
    if performed_by:
        query["performed_by"] = performed_by
    if performed_by_role:
        query["performed_by_role"] = performed_by_role
    if status:
        query["status"] = status
    if entity_code:
        query["entity_code"] = entity_code
    window = date_range(date_from, date_to)
    if window:
        query["timestamp"] = window
    return query


async def paginate(collection, query: dict, pagination: Pagination, sort_field: str) -> tuple:
    """Run a newest-first paginated find; returns (documents, pagination meta)."""
    total = await collection.count_documents(query)
    cursor = (
        collection.find(query)
        .sort([(sort_field, -1), ("_id", -1)])
        .skip(pagination.skip)
        .limit(pagination.limit)
    )
    documents = await cursor.to_list(length=pagination.limit)
    return documents, pagination.meta(total)
