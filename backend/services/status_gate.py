"""
Status transition gate for organization records.

Every transition is checked against ALLOWED_TRANSITIONS, stamps updated_at
and is paired with an audit entry. If the audit write fails the status write
is rolled back with a compensating update before the error propagates.
"""
import logging
from typing import Optional

from fastapi import Request

from config import Settings
from models import AuditAction, OrganizationStatus, can_transition
from .audit_service import AuditService
from .organization_service import OrganizationRepository

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid status transition from {current} to {target}")


class StatusTransitionGate:
    def __init__(self, repository: OrganizationRepository, audit: AuditService, settings: Settings):
        self.repository = repository
        self.audit = audit
        self.settings = settings

    async def transition(
        self,
        org_id: str,
        target: OrganizationStatus,
        action: AuditAction,
        user: Optional[dict] = None,
        fields: Optional[dict] = None,
        request: Optional[Request] = None,
        from_states: Optional[set] = None
    ) -> Optional[dict]:
        """
        Apply `target` to the record; returns the updated record or None if not found.
        `from_states` narrows the table further for operations that only make
        sense from particular states.
        """
        doc = await self.repository.find_by_id(org_id)
        if not doc:
            return None

        current = OrganizationStatus(doc["status"])
        if not can_transition(current, target) or (from_states and current not in from_states):
            raise InvalidTransitionError(current.value, target.value)

        changes = {"status": target.value, **(fields or {})}
        updated = await self.repository.set_fields(doc, changes)
        if updated is None:
            # deleted since the lookup; nothing was written
            return None

        try:
            await self.audit.record(
                entity_type=self.repository.entity_type,
                action=action,
                user=user,
                entity_id=str(doc["_id"]),
                entity_code=doc.get("organization_code"),
                entity_name=doc.get("name"),
                status=target.value,
                description=f"{doc.get('name')} {current.value} -> {target.value}",
                details={"previous_status": current.value, **(fields or {})},
                request=request
            )
        except Exception:
            logger.warning(
                "Audit write failed for %s; restoring status %s",
                doc.get("organization_code"), current.value
            )
            await self.repository.restore_fields(doc, list(changes) + ["updated_at"])
            raise

        logger.info(
            "%s %s: %s -> %s",
            self.repository.org_type.value, doc.get("organization_code"), current.value, target.value
        )
        return updated

    async def activate(self, org_id: str, user: Optional[dict] = None, request: Optional[Request] = None):
        fields = {}
        if self.settings.CLEAR_SUSPENSION_REASON_ON_ACTIVATE:
            fields["suspension_reason"] = None
        return await self.transition(
            org_id, OrganizationStatus.APPROVED, AuditAction.ACTIVATED, user, fields, request
        )

    async def suspend(
        self,
        org_id: str,
        reason: Optional[str] = None,
        user: Optional[dict] = None,
        request: Optional[Request] = None
    ):
        fields = {"suspension_reason": reason} if reason else {}
        return await self.transition(
            org_id, OrganizationStatus.SUSPENDED, AuditAction.SUSPENDED, user, fields, request
        )

    async def approve(self, org_id: str, user: Optional[dict] = None, request: Optional[Request] = None):
        return await self.transition(
            org_id, OrganizationStatus.APPROVED, AuditAction.APPROVED, user, None, request,
            from_states={OrganizationStatus.PENDING}
        )

    async def reject(
        self,
        org_id: str,
        reason: Optional[str] = None,
        user: Optional[dict] = None,
        request: Optional[Request] = None
    ):
        fields = {"rejection_reason": reason} if reason else {}
        return await self.transition(
            org_id, OrganizationStatus.REJECTED, AuditAction.REJECTED, user, fields, request
        )
