from fastapi import APIRouter, Depends
from datetime import timedelta

from models import utcnow
from services import AuditService, HospitalRequestService, OrganizationRepository, success
from middleware import ReadAccess
from .deps import get_audit_service, get_blood_bank_repository, get_request_service

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard/stats")
async def get_dashboard_stats(
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    requests: HospitalRequestService = Depends(get_request_service),
    audit: AuditService = Depends(get_audit_service),
    current_user: dict = Depends(ReadAccess)
):
    by_status = await repository.count_by_status()
    stock = await repository.total_stock()
    now = utcnow()
    activity = await audit.get_stats(now - timedelta(hours=24), now)

    return success("Dashboard statistics retrieved successfully", {
        "blood_banks_by_status": by_status,
        "total_blood_banks": sum(by_status.values()),
        "blood_stock": stock,
        "total_units": sum(stock.values()),
        "pending_hospital_requests": await requests.count_pending(),
        "actions_last_24h": activity.total_logs
    })


@router.get("/")
async def root():
    return success("Service is healthy", {"service": "Blood Bank Network Admin API"})
