import logging
import os

from dotenv import load_dotenv
from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from jobconnect.repositories.base import Repository
from jobconnect.repositories.memory import InMemoryRepository
from jobconnect.repositories.mongo import MongoRepository

load_dotenv()

logger = logging.getLogger(__name__)

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "jobconnect")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", 5000))

# "mongo" or "memory"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mongo").lower()
# Use the in-memory store when MongoDB cannot be reached at startup
MEMORY_FALLBACK = os.getenv("MEMORY_FALLBACK", "true").lower() in ("1", "true", "yes")


async def connect_to_mongo(uri: str = MONGO_URI, database_name: str = DATABASE_NAME) -> MongoRepository:
    client = AsyncIOMotorClient(uri, tz_aware=True, serverSelectionTimeoutMS=MONGO_TIMEOUT_MS)
    try:
        await client.admin.command("ping")
        repository = MongoRepository(client[database_name], client=client)
        await repository.ensure_indexes()
    except PyMongoError:
        client.close()
        raise

    if "mongodb+srv" in uri:
        logger.info("Connected to MongoDB Atlas, database %s", database_name)
    else:
        logger.info("Connected to MongoDB, database %s", database_name)
    return repository


async def init_repository(backend: str = STORAGE_BACKEND, fallback: bool = MEMORY_FALLBACK) -> Repository:
    """Pick the storage backend for this process."""
    if backend == "memory":
        logger.warning("Using in-memory store; data will not persist between restarts")
        return InMemoryRepository()

    if backend != "mongo":
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")

    try:
        return await connect_to_mongo()
    except PyMongoError as exc:
        if not fallback:
            raise
        logger.error("Database connection failed: %s", exc)
        logger.warning("Using in-memory store for demonstration; data will not persist between restarts")
        return InMemoryRepository()


async def close_repository(repository: Repository) -> None:
    await repository.close()


def get_repository(request: Request) -> Repository:
    return request.app.state.repository
