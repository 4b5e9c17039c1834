"""
Audit Log Router
Read-only access to the administrative audit trail.
"""
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from config import Settings, get_settings
from models import AuditLogFilter
from services import (
    AuditService, Pagination, parse_date_bound, success,
    validate_action, validate_entity_type
)
from middleware import ReadAccess
from .deps import get_audit_service

router = APIRouter(prefix="/logs", tags=["Audit Logs"])


def page_of(page: int, limit: Optional[int], settings: Settings) -> Pagination:
    return Pagination(page, limit or settings.DEFAULT_LOG_PAGE_LIMIT)


@router.get("")
async def get_audit_logs(
    entity_type: Optional[str] = None,
    action: Optional[str] = None,
    performed_by: Optional[str] = None,
    performed_by_role: Optional[str] = None,
    status: Optional[str] = None,
    entity_code: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    audit: AuditService = Depends(get_audit_service),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    """List audit logs, newest first, with optional filters"""
    filters = AuditLogFilter(
        entity_type=validate_entity_type(entity_type) if entity_type else None,
        action=validate_action(action) if action else None,
        performed_by=performed_by,
        performed_by_role=performed_by_role,
        status=status,
        entity_code=entity_code,
        date_from=parse_date_bound(date_from, "date_from"),
        date_to=parse_date_bound(date_to, "date_to", end=True)
    )
    result = await audit.find_all(filters, page_of(page, limit, settings))
    return success("Audit logs retrieved successfully", result)


@router.get("/stats")
async def get_audit_stats(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    audit: AuditService = Depends(get_audit_service),
    current_user: dict = Depends(ReadAccess)
):
    """Counts by action, entity type and role within an optional window"""
    stats = await audit.get_stats(
        parse_date_bound(date_from, "date_from"),
        parse_date_bound(date_to, "date_to", end=True)
    )
    return success("Audit statistics retrieved successfully", stats.model_dump())


@router.get("/recent")
async def get_recent_activity(
    limit: Optional[int] = Query(None, ge=1),
    audit: AuditService = Depends(get_audit_service),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    logs = await audit.get_recent_activity(limit or settings.RECENT_ACTIVITY_LIMIT)
    return success("Recent activity retrieved successfully", {"logs": logs, "count": len(logs)})


@router.get("/by-entity-type/{entity_type}")
async def get_logs_by_entity_type(
    entity_type: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    audit: AuditService = Depends(get_audit_service),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    result = await audit.find_by_entity_type(entity_type, page_of(page, limit, settings))
    return success(f"Audit logs for {entity_type} retrieved successfully", result)


@router.get("/by-action/{action}")
async def get_logs_by_action(
    action: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    audit: AuditService = Depends(get_audit_service),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    result = await audit.find_by_action(action, page_of(page, limit, settings))
    return success(f"Audit logs for action {action} retrieved successfully", result)


@router.get("/by-entity-code/{entity_code}")
async def get_logs_by_entity_code(
    entity_code: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    audit: AuditService = Depends(get_audit_service),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    """Full change history for one entity"""
    result = await audit.find_by_entity_code(entity_code, page_of(page, limit, settings))
    return success(f"Audit logs for entity {entity_code} retrieved successfully", result)


@router.get("/{log_id}")
async def get_audit_log(
    log_id: str,
    audit: AuditService = Depends(get_audit_service),
    current_user: dict = Depends(ReadAccess)
):
    log = await audit.find_by_id(log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Audit log not found")
    return success("Audit log retrieved successfully", log)
