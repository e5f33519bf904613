"""
Async document store connection using motor.

The voter collections are schemaless: the same logical record can be
stored flat, nested under an ``s`` sub-document, or both. Nothing here
knows about that; see ``kural.services.normalizer``.
"""

import asyncio
from typing import Any, AsyncGenerator, Awaitable

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from kural.core.config import Settings, get_settings
from kural.core.exceptions import StoreUnavailableError
from kural.core.logging_config import get_logger

logger = get_logger(__name__)

# Global client
_client: AsyncIOMotorClient | None = None


async def init_db_client(settings: Settings):
    """
    Create the store client on startup.

    Call this in the FastAPI lifespan event.
    """
    global _client
    _client = AsyncIOMotorClient(
        settings.MONGODB_URL,
        maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
        serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
        timeoutMS=settings.store_timeout_ms,
        tz_aware=True,
    )
    logger.info(
        f"Document store client initialized: {settings.MONGODB_DATABASE} "
        f"(pool up to {settings.MONGODB_MAX_POOL_SIZE} connections)"
    )


async def close_db_client():
    """
    Close the store client on shutdown.

    Call this in the FastAPI lifespan event.
    """
    global _client
    if _client:
        _client.close()
        _client = None
        logger.info("Document store client closed")


def get_database() -> AsyncIOMotorDatabase:
    """Return the configured database handle."""
    if not _client:
        raise RuntimeError("Store client not initialized. Call init_db_client() first.")
    return _client[get_settings().MONGODB_DATABASE]


async def get_db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """
    FastAPI dependency for the database handle.

    Usage in routes:
        @router.get("/voters60/list")
        async def list_voters(db: AsyncIOMotorDatabase = Depends(get_db)):
            total = await db["60 and above"].count_documents({})
    """
    yield get_database()


async def ping_database() -> None:
    """Round-trip to the server; raises on failure."""
    await get_database().command("ping")


async def run_store_operation(awaitable: Awaitable[Any], operation: str) -> Any:
    """
    Await store work under the request deadline.

    Timeouts and driver errors surface as ``StoreUnavailableError`` so a
    caller never sees a partial result.
    """
    timeout = get_settings().STORE_TIMEOUT_SECONDS
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"Store operation timed out after {timeout}s: {operation}")
        raise StoreUnavailableError(
            f"Document store did not answer in time ({operation})"
        ) from e
    except PyMongoError as e:
        logger.error(f"Store operation failed: {operation}: {e}", exc_info=True)
        raise StoreUnavailableError(f"Document store error ({operation})") from e
