from .auth import get_current_user, create_access_token
from .query import Pagination, parse_date_bound
from .responses import success, failure, serialize_doc
from .audit_service import AuditService, validate_action, validate_entity_type
from .organization_service import OrganizationRepository
from .status_gate import StatusTransitionGate, InvalidTransitionError
from .request_service import HospitalRequestService
