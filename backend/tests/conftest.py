import uuid

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from config import Settings
from models import BloodBankCreate, OrganizationType
from server import create_app
from services import AuditService, OrganizationRepository, StatusTransitionGate, create_access_token
from tests.factories import blood_bank_payload


@pytest.fixture
def settings():
    return Settings(JWT_SECRET="test-secret", DB_NAME="test_blood_network", LOG_LEVEL="WARNING")


@pytest.fixture
def db():
    return AsyncMongoMockClient()[f"test_{uuid.uuid4().hex}"]


@pytest.fixture
def app(settings, db):
    return create_app(settings=settings, db=db)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def repository(db):
    return OrganizationRepository(db, OrganizationType.BLOODBANK)


@pytest.fixture
def audit(db):
    return AuditService(db)


@pytest.fixture
def gate(repository, audit, settings):
    return StatusTransitionGate(repository, audit, settings)


def make_headers(settings, role, email):
    token = create_access_token(subject=str(uuid.uuid4()), role=role, settings=settings, email=email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(settings):
    return make_headers(settings, "ADMIN", "admin@sebn.com")


@pytest.fixture
def superadmin_headers(settings):
    return make_headers(settings, "SuperAdmin", "root@sebn.com")


@pytest.fixture
def auditor_headers(settings):
    return make_headers(settings, "AUDITOR", "auditor@sebn.com")


@pytest.fixture
def hospital_headers(settings):
    return make_headers(settings, "HOSPITAL", "desk@cityhospital.org")


@pytest.fixture
def create_blood_bank(repository):
    async def _create(**overrides):
        return await repository.create(BloodBankCreate(**blood_bank_payload(**overrides)))
    return _create
