from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "SuperAdmin"
    ADMIN = "ADMIN"
    AUDITOR = "AUDITOR"
    HOSPITAL = "HOSPITAL"
    BLOODBANK = "BLOODBANK"
    NGO = "NGO"


class OrganizationType(str, Enum):
    BLOODBANK = "bloodbank"
    HOSPITAL = "hospital"
    NGO = "ngo"


class OrganizationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"


class BloodGroup(str, Enum):
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


class RequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    FULFILLED = "FULFILLED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class AuditEntityType(str, Enum):
    ORGANIZATION = "ORGANIZATION"
    EMERGENCY = "EMERGENCY"
    BLOOD_STOCK = "BLOOD_STOCK"
    ALERT = "ALERT"
    HOSPITAL = "HOSPITAL"
    BLOODBANK = "BLOODBANK"
    NGO = "NGO"
    USER = "USER"
    APPROVAL = "APPROVAL"


class AuditAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SUSPENDED = "SUSPENDED"
    ACTIVATED = "ACTIVATED"
    DELETED = "DELETED"
    ACCESSED = "ACCESSED"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"


# Target statuses reachable from each status. REJECTED is terminal.
ALLOWED_TRANSITIONS = {
    OrganizationStatus.PENDING: {
        OrganizationStatus.APPROVED,
        OrganizationStatus.REJECTED,
        OrganizationStatus.SUSPENDED,
    },
    OrganizationStatus.APPROVED: {
        OrganizationStatus.APPROVED,
        OrganizationStatus.SUSPENDED,
    },
    OrganizationStatus.SUSPENDED: {
        OrganizationStatus.SUSPENDED,
        OrganizationStatus.APPROVED,
    },
    OrganizationStatus.REJECTED: set(),
}


def can_transition(current: OrganizationStatus, target: OrganizationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def enum_values(enum_cls) -> list:
    return [member.value for member in enum_cls]
