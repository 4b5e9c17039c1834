"""Hospital blood requests addressed to blood banks (read side)."""
from typing import Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from models import HospitalBloodRequest, RequestStatus
from .query import Pagination, paginate
from .responses import to_object_id


class HospitalRequestService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db.blood_requests

    async def find_for_blood_bank(
        self,
        blood_bank_id: str,
        pagination: Pagination,
        status: Optional[str] = None
    ) -> Tuple[list, dict]:
        # the bank reference may be stored as an ObjectId or its hex string
        refs = [blood_bank_id]
        oid = to_object_id(blood_bank_id)
        if oid is not None:
            refs.append(oid)
        query = {"blood_bank_id": {"$in": refs}}
        if status:
            query["status"] = status
        docs, meta = await paginate(self.collection, query, pagination, "created_at")
        return [self._present(doc) for doc in docs], meta

    async def count_pending(self) -> int:
        return await self.collection.count_documents({"status": RequestStatus.PENDING.value})

    @staticmethod
    def _present(doc: dict) -> dict:
        request = HospitalBloodRequest.model_validate(doc)
        return {"id": str(doc["_id"]), **request.model_dump()}
