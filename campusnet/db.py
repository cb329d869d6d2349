from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from .config import get_settings

_settings = get_settings()
_client: AsyncIOMotorClient | None = None
_db: AsyncIOMotorDatabase | None = None

async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        client = AsyncIOMotorClient(
            _settings.mongodb_uri,
            serverSelectionTimeoutMS=_settings.mongodb_timeout_ms,
        )
        db = client[_settings.db_name]
        try:
            await ensure_indexes(db)
        except Exception:
            # Sin índices no se cachea: la siguiente petición lo reintenta
            client.close()
            raise
        _client, _db = client, db
    return _db

async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    await db.users.create_index("email", unique=True)
    # Hilo entre dos usuarios, del más reciente al más antiguo
    await db.messages.create_index([("sender_id", 1), ("receiver_id", 1), ("created_at", -1)])
    # Pendientes de leer por destinatario
    await db.messages.create_index([("receiver_id", 1), ("read", 1), ("created_at", -1)])
