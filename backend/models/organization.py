from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from typing import Optional, Dict, Annotated
from datetime import datetime

from .common import utcnow
from .enums import BloodGroup, OrganizationType, OrganizationStatus, enum_values

BLOOD_GROUPS = enum_values(BloodGroup)


def empty_stock() -> Dict[str, int]:
    return {group: 0 for group in BLOOD_GROUPS}


def normalize_stock(stock: Optional[dict]) -> Dict[str, int]:
    """Full 8-key snapshot; missing groups read as zero."""
    snapshot = empty_stock()
    for group, units in (stock or {}).items():
        if group in snapshot:
            snapshot[group] = int(units or 0)
    return snapshot


class Organization(BaseModel):
    model_config = ConfigDict(extra="ignore", use_enum_values=True)
    type: OrganizationType
    organization_code: str
    name: str
    address: str
    city: str
    state: str
    pin_code: str
    contact_person: str
    email: str
    phone: str
    license_number: str
    status: OrganizationStatus = OrganizationStatus.PENDING
    suspension_reason: Optional[str] = None
    rejection_reason: Optional[str] = None
    blood_stock: Dict[str, int] = Field(default_factory=empty_stock)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class BloodBankCreate(BaseModel):
    organization_code: Optional[str] = None
    name: str = Field(min_length=1)
    address: str
    city: str = Field(min_length=1)
    state: str
    pin_code: str
    contact_person: str
    email: str = Field(min_length=3)
    phone: str
    license_number: str


class BloodBankUpdate(BaseModel):
    """Profile fields only; status changes go through the transition endpoints."""
    model_config = ConfigDict(extra="forbid")
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pin_code: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    license_number: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v is not None else v

    @model_validator(mode="after")
    def reject_nulls(self):
        nulls = sorted(name for name in self.model_fields_set if getattr(self, name) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class StockUpdate(BaseModel):
    """Partial stock update; groups not named keep their current count."""
    model_config = ConfigDict(extra="forbid")
    blood_stock: Dict[BloodGroup, Annotated[int, Field(ge=0)]]


class StatusReason(BaseModel):
    reason: Optional[str] = None
