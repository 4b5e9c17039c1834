"""
Organization record store.
Blood banks, hospitals and NGOs share the organizations collection and are
told apart by their `type` field; every query here is scoped to one type.
"""
import logging
import re
from datetime import datetime, timedelta
from typing import Optional, Tuple

from fastapi import HTTPException
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from models import (
    Organization, BloodBankCreate, OrganizationType, OrganizationStatus,
    AuditEntityType, BLOOD_GROUPS, empty_stock, normalize_stock, utcnow
)
from .query import Pagination, build_organization_query, paginate
from .responses import to_object_id

logger = logging.getLogger(__name__)

CODE_PREFIXES = {
    OrganizationType.BLOODBANK: "BB",
    OrganizationType.HOSPITAL: "HOSP",
    OrganizationType.NGO: "NGO",
}

AUDIT_ENTITY_TYPES = {
    OrganizationType.BLOODBANK: AuditEntityType.BLOODBANK,
    OrganizationType.HOSPITAL: AuditEntityType.HOSPITAL,
    OrganizationType.NGO: AuditEntityType.NGO,
}


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Current time, bumped past `previous` so updated_at always moves forward."""
    now = utcnow()
    if previous is not None:
        if previous.tzinfo is not None:
            previous = previous.replace(tzinfo=None)
        if now <= previous:
            now = previous + timedelta(milliseconds=1)
    return now


def city_token(city: str) -> str:
    letters = re.sub(r"[^A-Za-z]", "", city or "").upper()
    return letters[:3] or "XXX"


class OrganizationRepository:
    """CRUD over one organization type in the shared collection."""

    def __init__(self, db: AsyncIOMotorDatabase, org_type: OrganizationType = OrganizationType.BLOODBANK):
        self.collection = db.organizations
        self.org_type = org_type
        self.entity_type = AUDIT_ENTITY_TYPES[org_type]

    def _scoped(self, **query) -> dict:
        return {"type": self.org_type.value, **query}

    async def generate_code(self, city: str) -> str:
        prefix = f"{CODE_PREFIXES[self.org_type]}-{city_token(city)}-"
        docs = await self.collection.find(
            self._scoped(organization_code={"$regex": f"^{re.escape(prefix)}"}),
            {"organization_code": 1}
        ).to_list(length=None)
        # next after the highest sequence in use, so deleted codes are never reissued
        highest = 0
        for doc in docs:
            suffix = doc["organization_code"][len(prefix):]
            if suffix.isdigit():
                highest = max(highest, int(suffix))
        return f"{prefix}{highest + 1:03d}"

    async def create(self, data: BloodBankCreate) -> dict:
        code = data.organization_code or await self.generate_code(data.city)
        if await self.find_by_code(code):
            raise HTTPException(status_code=400, detail=f"Organization code {code} already exists")

        record = Organization(
            type=self.org_type,
            organization_code=code,
            **data.model_dump(exclude={"organization_code"})
        )
        doc = record.model_dump()
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise HTTPException(status_code=400, detail=f"Organization code {code} already exists")

        doc["_id"] = result.inserted_id
        logger.info("Created %s %s", self.org_type.value, code)
        return doc

    async def find_by_id(self, org_id: str) -> Optional[dict]:
        oid = to_object_id(org_id)
        if oid is None:
            return None
        return await self.collection.find_one(self._scoped(_id=oid))

    async def find_by_code(self, organization_code: str) -> Optional[dict]:
        return await self.collection.find_one(self._scoped(organization_code=organization_code))

    async def find_all(self, filters: dict, pagination: Pagination) -> Tuple[list, dict]:
        query = build_organization_query(self.org_type.value, **filters)
        return await paginate(self.collection, query, pagination, "created_at")

    async def find_by_status(self, status: OrganizationStatus, pagination: Pagination) -> Tuple[list, dict]:
        return await self.find_all({"status": status.value}, pagination)

    async def get_blood_stock(self, org_id: str) -> Optional[dict]:
        doc = await self.find_by_id(org_id)
        if not doc:
            return None
        return {
            "blood_bank_id": str(doc["_id"]),
            "organization_code": doc.get("organization_code"),
            "name": doc.get("name"),
            "blood_stock": normalize_stock(doc.get("blood_stock")),
        }

    async def set_fields(self, doc: dict, fields: dict) -> dict:
        """Write fields onto an existing record and stamp updated_at."""
        update = {**fields, "updated_at": next_timestamp(doc.get("updated_at"))}
        return await self.collection.find_one_and_update(
            self._scoped(_id=doc["_id"]),
            {"$set": update},
            return_document=ReturnDocument.AFTER
        )

    async def restore_fields(self, doc: dict, keys: list) -> None:
        """Put `keys` back to their values in `doc`, unsetting ones it lacked."""
        restore = {key: doc[key] for key in keys if key in doc}
        update = {"$set": restore}
        missing = {key: "" for key in keys if key not in doc}
        if missing:
            update["$unset"] = missing
        await self.collection.update_one(self._scoped(_id=doc["_id"]), update)

    async def update_by_id(self, org_id: str, fields: dict) -> Optional[dict]:
        if "status" in fields:
            raise HTTPException(
                status_code=400,
                detail="Status can only be changed through approve, reject, activate or suspend"
            )
        doc = await self.find_by_id(org_id)
        if not doc:
            return None
        if not fields:
            return doc
        return await self.set_fields(doc, fields)

    async def update_stock(self, org_id: str, changes: dict) -> Optional[dict]:
        doc = await self.find_by_id(org_id)
        if not doc:
            return None
        stock = normalize_stock(doc.get("blood_stock"))
        for group, units in changes.items():
            stock[getattr(group, "value", group)] = units
        return await self.set_fields(doc, {"blood_stock": stock})

    async def delete_by_id(self, org_id: str) -> Optional[dict]:
        oid = to_object_id(org_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_delete(self._scoped(_id=oid))
        if doc:
            logger.info("Deleted %s %s", self.org_type.value, doc.get("organization_code"))
        return doc

    async def count_by_status(self) -> dict:
        counts = {}
        for status in OrganizationStatus:
            counts[status.value] = await self.collection.count_documents(self._scoped(status=status.value))
        return counts

    async def total_stock(self, status: OrganizationStatus = OrganizationStatus.APPROVED) -> dict:
        totals = empty_stock()
        docs = await self.collection.find(
            self._scoped(status=status.value), {"blood_stock": 1}
        ).to_list(length=None)
        for doc in docs:
            stock = normalize_stock(doc.get("blood_stock"))
            for group in BLOOD_GROUPS:
                totals[group] += stock[group]
        return totals
