import pytest
from bson import ObjectId

from services import InvalidTransitionError, Pagination, StatusTransitionGate

ADMIN = {"id": "u-1", "email": "admin@sebn.com", "role": "ADMIN"}


async def test_suspend_then_activate_keeps_reason(gate, repository, create_blood_bank):
    doc = await create_blood_bank()
    org_id = str(doc["_id"])

    suspended = await gate.suspend(org_id, reason="policy violation", user=ADMIN)
    assert suspended["status"] == "SUSPENDED"
    assert suspended["suspension_reason"] == "policy violation"

    activated = await gate.activate(org_id, user=ADMIN)
    assert activated["status"] == "APPROVED"
    assert activated["suspension_reason"] == "policy violation"


async def test_activate_can_clear_reason_when_configured(repository, audit, settings, create_blood_bank):
    settings.CLEAR_SUSPENSION_REASON_ON_ACTIVATE = True
    gate = StatusTransitionGate(repository, audit, settings)
    doc = await create_blood_bank()

    await gate.suspend(str(doc["_id"]), reason="expired license")
    activated = await gate.activate(str(doc["_id"]))

    assert activated["status"] == "APPROVED"
    assert activated["suspension_reason"] is None


async def test_every_transition_moves_updated_at_forward(gate, create_blood_bank):
    doc = await create_blood_bank()
    org_id = str(doc["_id"])
    previous = doc["updated_at"]

    for step in (gate.approve, gate.suspend, gate.activate, gate.activate, gate.suspend):
        updated = await step(org_id)
        assert updated["updated_at"] > previous
        previous = updated["updated_at"]


async def test_activate_is_idempotent(gate, create_blood_bank):
    doc = await create_blood_bank()
    first = await gate.activate(str(doc["_id"]))
    second = await gate.activate(str(doc["_id"]))

    assert first["status"] == second["status"] == "APPROVED"
    assert second["updated_at"] > first["updated_at"]
    assert {k: v for k, v in first.items() if k != "updated_at"} == \
        {k: v for k, v in second.items() if k != "updated_at"}


async def test_suspend_without_reason_leaves_reason_unset(gate, create_blood_bank):
    doc = await create_blood_bank()

    suspended = await gate.suspend(str(doc["_id"]))

    assert suspended["status"] == "SUSPENDED"
    assert "suspension_reason" not in suspended or suspended["suspension_reason"] is None


async def test_rejected_is_terminal(gate, create_blood_bank):
    doc = await create_blood_bank()
    rejected = await gate.reject(str(doc["_id"]), reason="forged license")
    assert rejected["rejection_reason"] == "forged license"

    with pytest.raises(InvalidTransitionError) as exc:
        await gate.activate(str(doc["_id"]))
    assert exc.value.current == "REJECTED"
    assert exc.value.target == "APPROVED"


async def test_approve_only_from_pending(gate, create_blood_bank):
    doc = await create_blood_bank()
    await gate.suspend(str(doc["_id"]))

    with pytest.raises(InvalidTransitionError):
        await gate.approve(str(doc["_id"]))


async def test_reject_not_allowed_after_approval(gate, create_blood_bank):
    doc = await create_blood_bank()
    await gate.approve(str(doc["_id"]))

    with pytest.raises(InvalidTransitionError):
        await gate.reject(str(doc["_id"]))


async def test_unknown_or_malformed_id_returns_none(gate, audit):
    assert await gate.activate(str(ObjectId())) is None
    assert await gate.suspend("garbage", reason="x") is None
    assert (await audit.get_stats()).total_logs == 0


async def test_transition_writes_audit_entry(gate, audit, create_blood_bank):
    doc = await create_blood_bank()

    await gate.suspend(str(doc["_id"]), reason="policy violation", user=ADMIN)

    history = await audit.find_by_entity_code(doc["organization_code"], pagination=Pagination(1, 50))
    assert history["pagination"]["total"] == 1
    entry = history["logs"][0]
    assert entry["entity_type"] == "BLOODBANK"
    assert entry["action"] == "SUSPENDED"
    assert entry["status"] == "SUSPENDED"
    assert entry["performed_by"] == "admin@sebn.com"
    assert entry["performed_by_role"] == "ADMIN"
    assert entry["details"] == {"previous_status": "PENDING", "suspension_reason": "policy violation"}


async def test_failed_audit_write_restores_previous_state(gate, repository, create_blood_bank, monkeypatch):
    doc = await create_blood_bank()

    async def broken_record(**kwargs):
        raise RuntimeError("audit store unavailable")

    monkeypatch.setattr(gate.audit, "record", broken_record)

    with pytest.raises(RuntimeError):
        await gate.suspend(str(doc["_id"]), reason="policy violation")

    restored = await repository.find_by_id(str(doc["_id"]))
    assert restored["status"] == "PENDING"
    assert restored["updated_at"] == doc["updated_at"]
    assert restored.get("suspension_reason") is None
    assert restored == doc


async def test_record_deleted_mid_transition_is_not_audited(gate, repository, audit, create_blood_bank, monkeypatch):
    doc = await create_blood_bank()
    await repository.delete_by_id(str(doc["_id"]))

    async def stale_lookup(org_id):
        return doc

    monkeypatch.setattr(repository, "find_by_id", stale_lookup)

    assert await gate.suspend(str(doc["_id"]), reason="policy violation", user=ADMIN) is None
    assert (await audit.get_stats()).total_logs == 0
