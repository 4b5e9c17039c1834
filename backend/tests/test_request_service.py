from bson import ObjectId

from services import HospitalRequestService, Pagination


async def test_requests_with_object_id_references(db):
    bank_id = ObjectId()
    hospital_id = ObjectId()
    await db.blood_requests.insert_many([
        {"request_code": "REQ-010", "hospital_id": hospital_id, "blood_bank_id": bank_id,
         "blood_group": "O-", "units": 4, "status": "PENDING"},
        {"request_code": "REQ-011", "hospital_id": "h7", "blood_bank_id": str(bank_id),
         "blood_group": "AB+", "units": 1, "status": "APPROVED"},
        {"request_code": "REQ-012", "hospital_id": hospital_id, "blood_bank_id": ObjectId(),
         "blood_group": "O-", "units": 2, "status": "PENDING"},
    ])

    requests, meta = await HospitalRequestService(db).find_for_blood_bank(str(bank_id), Pagination(1, 20))

    assert meta["total"] == 2
    by_code = {r["request_code"]: r for r in requests}
    assert set(by_code) == {"REQ-010", "REQ-011"}
    assert by_code["REQ-010"]["hospital_id"] == str(hospital_id)
    assert by_code["REQ-010"]["blood_bank_id"] == str(bank_id)


async def test_count_pending(db):
    await db.blood_requests.insert_many([
        {"request_code": "REQ-020", "hospital_id": "h1", "blood_bank_id": "b1",
         "blood_group": "A+", "units": 1, "status": "PENDING"},
        {"request_code": "REQ-021", "hospital_id": "h1", "blood_bank_id": "b1",
         "blood_group": "A+", "units": 1, "status": "FULFILLED"},
    ])

    assert await HospitalRequestService(db).count_pending() == 1
