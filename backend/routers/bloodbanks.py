from fastapi import APIRouter, HTTPException, Depends, Query, Request
from typing import Optional

from config import Settings, get_settings
from models import (
    AuditAction, AuditEntityType, BloodBankCreate, BloodBankUpdate,
    OrganizationStatus, StatusReason, StockUpdate, enum_values
)
from services import (
    AuditService, HospitalRequestService, OrganizationRepository, Pagination,
    StatusTransitionGate, parse_date_bound, serialize_doc, success
)
from middleware import ReadAccess, WriteAccess
from .deps import get_audit_service, get_blood_bank_repository, get_request_service, get_status_gate

router = APIRouter(prefix="/bloodbanks", tags=["Blood Banks"])

NOT_FOUND = "Blood bank not found"


def parse_status(status: str) -> OrganizationStatus:
    try:
        return OrganizationStatus(status.upper())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(enum_values(OrganizationStatus))}"
        )


def listing(docs: list, meta: dict) -> dict:
    return {"blood_banks": [serialize_doc(doc) for doc in docs], "pagination": meta}


# ==================== Read ====================

@router.get("")
async def get_blood_banks(
    status: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    """List blood banks, newest first, with optional filters"""
    filters = {
        "status": parse_status(status).value if status else None,
        "city": city,
        "state": state,
        "date_from": parse_date_bound(date_from, "date_from"),
        "date_to": parse_date_bound(date_to, "date_to", end=True),
        "search": search
    }
    pagination = Pagination(page, limit or settings.DEFAULT_PAGE_LIMIT)
    docs, meta = await repository.find_all(filters, pagination)
    return success("Blood banks retrieved successfully", listing(docs, meta))


@router.get("/id/{blood_bank_id}")
async def get_blood_bank_by_id(
    blood_bank_id: str,
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    current_user: dict = Depends(ReadAccess)
):
    doc = await repository.find_by_id(blood_bank_id)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return success("Blood bank retrieved successfully", serialize_doc(doc))


@router.get("/code/{organization_code}")
async def get_blood_bank_by_code(
    organization_code: str,
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    current_user: dict = Depends(ReadAccess)
):
    doc = await repository.find_by_code(organization_code)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return success("Blood bank retrieved successfully", serialize_doc(doc))


@router.get("/status/{status}")
async def get_blood_banks_by_status(
    status: str,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    target = parse_status(status)
    pagination = Pagination(page, limit or settings.DEFAULT_PAGE_LIMIT)
    docs, meta = await repository.find_by_status(target, pagination)
    return success(f"Blood banks with status {target.value} retrieved successfully", listing(docs, meta))


@router.get("/{blood_bank_id}/stock")
async def get_blood_bank_stock(
    blood_bank_id: str,
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    current_user: dict = Depends(ReadAccess)
):
    stock = await repository.get_blood_stock(blood_bank_id)
    if not stock:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return success("Blood stock retrieved successfully", stock)


@router.get("/{blood_bank_id}/requests")
async def get_blood_bank_requests(
    blood_bank_id: str,
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    requests: HospitalRequestService = Depends(get_request_service),
    settings: Settings = Depends(get_settings),
    current_user: dict = Depends(ReadAccess)
):
    """Hospital blood requests addressed to this blood bank"""
    doc = await repository.find_by_id(blood_bank_id)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    pagination = Pagination(page, limit or settings.DEFAULT_PAGE_LIMIT)
    items, meta = await requests.find_for_blood_bank(str(doc["_id"]), pagination, status)
    return success("Hospital requests retrieved successfully", {"requests": items, "pagination": meta})


# ==================== Create / Update / Delete ====================

@router.post("")
async def create_blood_bank(
    data: BloodBankCreate,
    request: Request,
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    audit: AuditService = Depends(get_audit_service),
    current_user: dict = Depends(WriteAccess)
):
    doc = await repository.create(data)
    await audit.record(
        entity_type=AuditEntityType.BLOODBANK,
        action=AuditAction.CREATED,
        user=current_user,
        entity_id=str(doc["_id"]),
        entity_code=doc["organization_code"],
        entity_name=doc["name"],
        status=doc["status"],
        description=f"Registered blood bank {doc['name']}",
        request=request
    )
    return success("Blood bank created successfully", serialize_doc(doc))


@router.put("/{blood_bank_id}/stock")
async def update_blood_bank_stock(
    blood_bank_id: str,
    data: StockUpdate,
    request: Request,
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    audit: AuditService = Depends(get_audit_service),
    current_user: dict = Depends(WriteAccess)
):
    doc = await repository.update_stock(blood_bank_id, data.blood_stock)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    await audit.record(
        entity_type=AuditEntityType.BLOOD_STOCK,
        action=AuditAction.UPDATED,
        user=current_user,
        entity_id=str(doc["_id"]),
        entity_code=doc.get("organization_code"),
        entity_name=doc.get("name"),
        status=doc.get("status"),
        details={"changes": {group.value: units for group, units in data.blood_stock.items()}},
        request=request
    )
    return success("Blood stock updated successfully", {
        "blood_bank_id": str(doc["_id"]),
        "organization_code": doc.get("organization_code"),
        "name": doc.get("name"),
        "blood_stock": doc["blood_stock"]
    })


@router.put("/{blood_bank_id}")
async def update_blood_bank(
    blood_bank_id: str,
    updates: BloodBankUpdate,
    request: Request,
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    audit: AuditService = Depends(get_audit_service),
    current_user: dict = Depends(WriteAccess)
):
    update_data = updates.model_dump(exclude_unset=True)
    doc = await repository.update_by_id(blood_bank_id, update_data)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    if update_data:
        await audit.record(
            entity_type=AuditEntityType.BLOODBANK,
            action=AuditAction.UPDATED,
            user=current_user,
            entity_id=str(doc["_id"]),
            entity_code=doc.get("organization_code"),
            entity_name=doc.get("name"),
            status=doc.get("status"),
            details={"changes": update_data},
            request=request
        )
    return success("Blood bank updated successfully", serialize_doc(doc))


@router.delete("/{blood_bank_id}")
async def delete_blood_bank(
    blood_bank_id: str,
    request: Request,
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    audit: AuditService = Depends(get_audit_service),
    current_user: dict = Depends(WriteAccess)
):
    doc = await repository.delete_by_id(blood_bank_id)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    await audit.record(
        entity_type=AuditEntityType.BLOODBANK,
        action=AuditAction.DELETED,
        user=current_user,
        entity_id=str(doc["_id"]),
        entity_code=doc.get("organization_code"),
        entity_name=doc.get("name"),
        status=doc.get("status"),
        request=request
    )
    return success("Blood bank deleted successfully")


# ==================== Status transitions ====================

@router.post("/{blood_bank_id}/approve")
async def approve_blood_bank(
    blood_bank_id: str,
    request: Request,
    gate: StatusTransitionGate = Depends(get_status_gate),
    current_user: dict = Depends(WriteAccess)
):
    doc = await gate.approve(blood_bank_id, user=current_user, request=request)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return success("Blood bank approved successfully", serialize_doc(doc))


@router.post("/{blood_bank_id}/reject")
async def reject_blood_bank(
    blood_bank_id: str,
    request: Request,
    body: Optional[StatusReason] = None,
    gate: StatusTransitionGate = Depends(get_status_gate),
    current_user: dict = Depends(WriteAccess)
):
    reason = body.reason if body else None
    doc = await gate.reject(blood_bank_id, reason=reason, user=current_user, request=request)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return success("Blood bank rejected successfully", serialize_doc(doc))


@router.post("/{blood_bank_id}/activate")
async def activate_blood_bank(
    blood_bank_id: str,
    request: Request,
    gate: StatusTransitionGate = Depends(get_status_gate),
    current_user: dict = Depends(WriteAccess)
):
    doc = await gate.activate(blood_bank_id, user=current_user, request=request)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return success("Blood bank activated successfully", serialize_doc(doc))


@router.post("/{blood_bank_id}/suspend")
async def suspend_blood_bank(
    blood_bank_id: str,
    request: Request,
    body: Optional[StatusReason] = None,
    gate: StatusTransitionGate = Depends(get_status_gate),
    current_user: dict = Depends(WriteAccess)
):
    reason = body.reason if body else None
    doc = await gate.suspend(blood_bank_id, reason=reason, user=current_user, request=request)
    if not doc:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return success("Blood bank suspended successfully", serialize_doc(doc))
