"""Per-request service construction from the application's database."""
from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from config import Settings, get_settings
from database import get_db
from models import OrganizationType
from services import AuditService, HospitalRequestService, OrganizationRepository, StatusTransitionGate


def get_blood_bank_repository(db: AsyncIOMotorDatabase = Depends(get_db)) -> OrganizationRepository:
    return OrganizationRepository(db, OrganizationType.BLOODBANK)


def get_audit_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> AuditService:
    return AuditService(db)


def get_request_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> HospitalRequestService:
    return HospitalRequestService(db)


def get_status_gate(
    repository: OrganizationRepository = Depends(get_blood_bank_repository),
    audit: AuditService = Depends(get_audit_service),
    settings: Settings = Depends(get_settings)
) -> StatusTransitionGate:
    return StatusTransitionGate(repository, audit, settings)
