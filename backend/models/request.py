from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from .common import utcnow
from .enums import BloodGroup, RequestStatus


class HospitalBloodRequest(BaseModel):
    """Blood request raised by a hospital against a blood bank."""
    model_config = ConfigDict(extra="ignore", use_enum_values=True)
    request_code: str
    hospital_id: str
    hospital_name: Optional[str] = None
    blood_bank_id: str
    blood_group: BloodGroup
    units: int = Field(ge=1)
    urgency: str = "normal"
    status: RequestStatus = RequestStatus.PENDING
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("hospital_id", "blood_bank_id", mode="before")
    @classmethod
    def reference_as_str(cls, v):
        # references may be stored as ObjectId or as their hex string
        return v if v is None or isinstance(v, str) else str(v)
