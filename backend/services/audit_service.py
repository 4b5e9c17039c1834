"""
Audit Logging Service
Records administrative actions and answers the audit-trail queries.
"""
import logging
from typing import Optional
from datetime import datetime

from fastapi import HTTPException, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from models import AuditLog, AuditLogFilter, AuditStats, AuditAction, AuditEntityType, enum_values
from .query import Pagination, build_audit_query, date_range, paginate
from .responses import serialize_doc, to_object_id

logger = logging.getLogger(__name__)

SENSITIVE_FIELDS = {
    "password", "password_hash", "token", "secret", "api_key",
    "mfa_secret", "backup_codes", "otp", "otp_code"
}


def validate_entity_type(entity_type: str) -> str:
    valid = enum_values(AuditEntityType)
    if entity_type not in valid:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid entity type. Must be one of: {', '.join(valid)}"
        )
    return entity_type


def validate_action(action: str) -> str:
    valid = enum_values(AuditAction)
    if action not in valid:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid action. Must be one of: {', '.join(valid)}"
        )
    return action


class AuditService:
    """Append-only audit trail over the audit_logs collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.audit_logs

    async def record(
        self,
        entity_type: AuditEntityType,
        action: AuditAction,
        user: Optional[dict] = None,
        entity_id: Optional[str] = None,
        entity_code: Optional[str] = None,
        entity_name: Optional[str] = None,
        status: Optional[str] = None,
        description: Optional[str] = None,
        details: Optional[dict] = None,
        request: Optional[Request] = None
    ) -> str:
        """
        Append an audit log entry.

        Args:
            entity_type: Kind of entity affected
            action: The action performed
            user: Current user dict (from get_current_user)
            entity_id: Storage id of the affected entity
            entity_code: Human code of the affected entity (e.g., "BB-MUM-001")
            entity_name: Display name of the affected entity
            status: Entity status after the action
            description: Human-readable description
            details: Additional context, sensitive keys are redacted
            request: FastAPI request object for IP/user-agent

        Returns:
            ID of created audit log
        """
        ip_address = None
        user_agent = None
        if request:
            ip_address = request.client.host if request.client else None
            user_agent = request.headers.get("user-agent", "")[:500]

        performed_by = None
        performed_by_role = None
        if user:
            performed_by = user.get("email") or user.get("id")
            performed_by_role = user.get("role")

        entry = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            entity_code=entity_code,
            entity_name=entity_name,
            action=action,
            status=status,
            description=description,
            details=self._clean_sensitive_data(details),
            performed_by=performed_by,
            performed_by_role=performed_by_role,
            ip_address=ip_address,
            user_agent=user_agent
        )

        result = await self.collection.insert_one(entry.model_dump())
        logger.info(
            "Audit %s %s %s by %s",
            entry.action, entry.entity_type, entity_code or entity_id, performed_by
        )
        return str(result.inserted_id)

    @staticmethod
    def _clean_sensitive_data(data: Optional[dict]) -> Optional[dict]:
        """Remove sensitive fields from audit data."""
        if not data:
            return None

        cleaned = {}
        for key, value in data.items():
            if key.lower() in SENSITIVE_FIELDS:
                cleaned[key] = "[REDACTED]"
            elif isinstance(value, dict):
                cleaned[key] = AuditService._clean_sensitive_data(value)
            else:
                cleaned[key] = value

        return cleaned

    async def find_all(self, filters: AuditLogFilter, pagination: Pagination) -> dict:
        query = build_audit_query(
            entity_type=filters.entity_type.value if filters.entity_type else None,
            action=filters.action.value if filters.action else None,
            performed_by=filters.performed_by,
            performed_by_role=filters.performed_by_role,
            status=filters.status,
            entity_code=filters.entity_code,
            date_from=filters.date_from,
            date_to=filters.date_to
        )
        logs, meta = await paginate(self.collection, query, pagination, "timestamp")
        return {"logs": [serialize_doc(log) for log in logs], "pagination": meta}

    async def find_by_id(self, log_id: str) -> Optional[dict]:
        oid = to_object_id(log_id)
        if oid is None:
            return None
        return serialize_doc(await self.collection.find_one({"_id": oid}))

    async def find_by_entity_type(self, entity_type: str, pagination: Pagination) -> dict:
        validate_entity_type(entity_type)
        return await self.find_all(AuditLogFilter(entity_type=entity_type), pagination)

    async def find_by_action(self, action: str, pagination: Pagination) -> dict:
        validate_action(action)
        return await self.find_all(AuditLogFilter(action=action), pagination)

    async def find_by_entity_code(self, entity_code: str, pagination: Pagination) -> dict:
        return await self.find_all(AuditLogFilter(entity_code=entity_code), pagination)

    async def _count_by(self, field: str, match: dict) -> dict:
        pipeline = [
            {"$match": match},
            {"$group": {"_id": f"${field}", "count": {"$sum": 1}}}
        ]
        rows = await self.collection.aggregate(pipeline).to_list(length=None)
        return {row["_id"]: row["count"] for row in rows if row["_id"]}

    async def get_stats(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> AuditStats:
        match = {}
        window = date_range(date_from, date_to)
        if window:
            match["timestamp"] = window

        return AuditStats(
            total_logs=await self.collection.count_documents(match),
            by_action=await self._count_by("action", match),
            by_entity_type=await self._count_by("entity_type", match),
            by_role=await self._count_by("performed_by_role", match),
            date_range={"from": date_from, "to": date_to}
        )

    async def get_recent_activity(self, limit: int = 20) -> list:
        cursor = self.collection.find({}).sort([("timestamp", -1), ("_id", -1)]).limit(limit)
        return [serialize_doc(log) for log in await cursor.to_list(length=limit)]
