from tests.factories import blood_bank_payload


async def test_health(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["success"] is True


async def test_dashboard_stats(client, db, admin_headers):
    first = (await client.post("/bloodbanks", json=blood_bank_payload(), headers=admin_headers)).json()["data"]
    await client.post("/bloodbanks", json=blood_bank_payload(name="Second"), headers=admin_headers)
    await client.post(f"/bloodbanks/{first['id']}/approve", headers=admin_headers)
    await client.put(f"/bloodbanks/{first['id']}/stock", json={"blood_stock": {"O-": 5, "B+": 3}},
                     headers=admin_headers)
    await db.blood_requests.insert_one({
        "request_code": "REQ-001", "hospital_id": "h1", "blood_bank_id": first["id"],
        "blood_group": "O-", "units": 2, "status": "PENDING"
    })

    response = await client.get("/dashboard/stats", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["blood_banks_by_status"] == {"PENDING": 1, "APPROVED": 1, "REJECTED": 0, "SUSPENDED": 0}
    assert data["total_blood_banks"] == 2
    assert data["blood_stock"]["O-"] == 5
    assert data["total_units"] == 8
    assert data["pending_hospital_requests"] == 1
    assert data["actions_last_24h"] == 4
