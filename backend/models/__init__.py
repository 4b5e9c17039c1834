from .enums import (
    UserRole, OrganizationType, OrganizationStatus, BloodGroup, RequestStatus,
    AuditEntityType, AuditAction, ALLOWED_TRANSITIONS, can_transition, enum_values
)
from .common import utcnow
from .organization import (
    Organization, BloodBankCreate, BloodBankUpdate, StockUpdate, StatusReason,
    BLOOD_GROUPS, empty_stock, normalize_stock
)
from .audit import AuditLog, AuditLogFilter, AuditStats
from .request import HospitalBloodRequest
