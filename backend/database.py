"""
Database connection management.
The client is created once per application and handed to routers via get_db.
"""
import logging

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from config import Settings

logger = logging.getLogger(__name__)


def connect(settings: Settings) -> AsyncIOMotorClient:
    logger.info("Connecting to MongoDB database %s", settings.DB_NAME)
    return AsyncIOMotorClient(settings.MONGO_URL)


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create the indexes the list and lookup queries rely on."""
    await db.organizations.create_index([("type", 1), ("organization_code", 1)], unique=True)
    await db.organizations.create_index([("type", 1), ("status", 1), ("created_at", -1)])
    await db.audit_logs.create_index([("timestamp", -1)])
    await db.audit_logs.create_index([("entity_code", 1), ("timestamp", -1)])
    await db.audit_logs.create_index([("entity_type", 1), ("action", 1)])
    await db.blood_requests.create_index([("blood_bank_id", 1), ("created_at", -1)])


def get_db(request: Request) -> AsyncIOMotorDatabase:
    """FastAPI dependency returning the database bound to this application."""
    return request.app.state.db
