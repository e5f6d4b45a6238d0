import logging

import certifi
from motor.motor_asyncio import AsyncIOMotorClient

from .config import get_settings

logger = logging.getLogger(__name__)

client: AsyncIOMotorClient = None
db = None


async def connect_db():
    global client, db
    settings = get_settings()
    if not settings.mongo_uri:
        logger.info("MONGO_URI not set — using in-memory audit store")
        return

    client = AsyncIOMotorClient(settings.mongo_uri, tls=True, tlsCAFile=certifi.where())
    db = client[settings.mongo_db_name]
    await db.brand_audits.create_index("audit_id", unique=True)
    await db.brand_audits.create_index("created_at")
    logger.info(f"Connected to MongoDB: {settings.mongo_db_name}")


async def close_db():
    global client, db
    if client:
        client.close()
        logger.info("MongoDB connection closed")
    client = None
    db = None


def get_db():
    return db
