"""
Audit Log Models
Append-only record of administrative actions against network entities.
"""
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from .common import utcnow
from .enums import AuditAction, AuditEntityType


class AuditLog(BaseModel):
    """Audit log entry for one administrative action."""
    model_config = ConfigDict(use_enum_values=True)

    # Entity affected
    entity_type: AuditEntityType
    entity_id: Optional[str] = None
    entity_code: Optional[str] = None  # e.g., "BB-MUM-001"
    entity_name: Optional[str] = None

    # Action details
    action: AuditAction
    status: Optional[str] = None  # entity status after the action
    description: Optional[str] = None
    details: Optional[dict] = None

    # Actor
    performed_by: Optional[str] = None
    performed_by_role: Optional[str] = None

    # Request info
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    timestamp: datetime = Field(default_factory=utcnow)


class AuditLogFilter(BaseModel):
    """Filter parameters for querying audit logs."""
    entity_type: Optional[AuditEntityType] = None
    action: Optional[AuditAction] = None
    performed_by: Optional[str] = None
    performed_by_role: Optional[str] = None
    status: Optional[str] = None
    entity_code: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None


class AuditStats(BaseModel):
    total_logs: int
    by_action: dict
    by_entity_type: dict
    by_role: dict
    date_range: dict
