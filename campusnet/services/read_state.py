# campusnet/services/read_state.py
import logging
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import AuthorizationError, NotFoundError, wraps_storage_errors
from ..utils import to_object_id, utcnow
from .message_log import MessageLog

logger = logging.getLogger(__name__)


class ReadStateTracker:
    """
    Paso de mensajes de no leído a leído. ``read`` nunca vuelve a False.

    Todas las escrituras llevan ``read: False`` en el filtro, así que repetirlas
    (o lanzarlas a la vez desde dos peticiones) no cambia ``read_at``.
    """

    def __init__(self, db: AsyncIOMotorDatabase, message_log: Optional[MessageLog] = None):
        self.db = db
        self.message_log = message_log or MessageLog(db)

    @wraps_storage_errors
    async def mark_thread_read(self, viewer_id, counterpart_id) -> int:
        viewer = to_object_id(viewer_id, "user_id")
        counterpart = to_object_id(counterpart_id, "user_id")
        now = utcnow()
        result = await self.db.messages.update_many(
            {"receiver_id": viewer, "sender_id": counterpart, "read": False, "is_deleted": False},
            {"$set": {"read": True, "read_at": now, "updated_at": now}},
        )
        if result.modified_count:
            logger.info(f"Marked {result.modified_count} messages from {counterpart} as read for {viewer}")
        return result.modified_count

    @wraps_storage_errors
    async def mark_message_read(self, message_id, viewer_id) -> Dict[str, Any]:
        message = await self.message_log.get(message_id)
        if message["receiver_id"] != to_object_id(viewer_id, "user_id"):
            raise AuthorizationError("No puedes marcar este mensaje como leído")

        now = utcnow()
        await self.db.messages.update_one(
            {"_id": message["_id"], "read": False, "is_deleted": False},
            {"$set": {"read": True, "read_at": now, "updated_at": now}},
        )
        doc = await self.db.messages.find_one({"_id": message["_id"], "is_deleted": False})
        if doc is None:
            # Borrado entre la lectura y la marca
            raise NotFoundError("Mensaje no encontrado")
        return doc
