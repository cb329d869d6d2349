"""
Registro de mensajes directos entre dos usuarios.

Los mensajes solo se insertan; después únicamente cambian ``read`` (lo hace
``ReadStateTracker``) e ``is_deleted`` (borrado lógico). Un mensaje borrado
deja de existir para cualquier consulta de esta capa.
"""
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from ..config import get_settings
from ..errors import AuthorizationError, NotFoundError, StorageError, ValidationError, wraps_storage_errors
from ..pagination import PageInfo, page_info, skip_for
from ..utils import to_object_id, utcnow
from .directory import UserDirectory

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1), ("_id", -1)]


def pair_query(user_a: ObjectId, user_b: ObjectId) -> Dict[str, Any]:
    return {
        "$or": [
            {"sender_id": user_a, "receiver_id": user_b},
            {"sender_id": user_b, "receiver_id": user_a},
        ],
        "is_deleted": False,
    }


def _attachment_dict(item) -> Dict[str, Any]:
    if isinstance(item, BaseModel):
        return item.model_dump()
    return dict(item)


class MessageLog:
    def __init__(self, db: AsyncIOMotorDatabase, directory: Optional[UserDirectory] = None):
        self.db = db
        self.directory = directory or UserDirectory(db)
        self.max_length = get_settings().message_max_length

    @wraps_storage_errors
    async def append(self, sender_id, receiver_id, content: str, attachments=None) -> Dict[str, Any]:
        content = (content or "").strip()
        if not content:
            raise ValidationError("El contenido del mensaje es obligatorio")
        # La longitud se mide en unidades UTF-16, como en JavaScript
        if len(content.encode("utf-16-le")) // 2 > self.max_length:
            raise ValidationError(f"El mensaje no puede superar {self.max_length} caracteres")

        sender = to_object_id(sender_id, "sender_id")
        receiver = to_object_id(receiver_id, "receiver_id")
        if sender == receiver:
            raise ValidationError("No puedes enviarte mensajes a ti mismo")

        await self.directory.require_snapshot(sender, "Remitente")
        await self.directory.require_snapshot(receiver, "Destinatario")

        now = utcnow()
        doc = {
            "sender_id": sender,
            "receiver_id": receiver,
            "content": content,
            "attachments": [_attachment_dict(a) for a in attachments or []],
            "read": False,
            "read_at": None,
            "is_deleted": False,
            "deleted_at": None,
            "created_at": now,
            "updated_at": now,
        }
        res = await self.db.messages.insert_one(doc)
        logger.info(f"Message {res.inserted_id} sent from {sender} to {receiver}")
        return await self.db.messages.find_one({"_id": res.inserted_id})

    @wraps_storage_errors
    async def list_thread(self, user_a, user_b, page: int, limit: int) -> Tuple[List[Dict[str, Any]], PageInfo]:
        """
        Mensajes entre dos usuarios en orden cronológico.

        Las páginas se cortan desde el final: la página 1 son los ``limit``
        mensajes más recientes, devueltos del más antiguo al más nuevo.
        """
        skip = skip_for(page, limit)
        query = pair_query(to_object_id(user_a, "user_id"), to_object_id(user_b, "user_id"))

        total = await self.db.messages.count_documents(query)
        items = []
        async for doc in self.db.messages.find(query, sort=NEWEST_FIRST, skip=skip, limit=limit):
            items.append(doc)
        items.reverse()
        return items, page_info(page, limit, total)

    async def list_for_user(self, user_id) -> AsyncIterator[Dict[str, Any]]:
        """Todos los mensajes visibles enviados o recibidos por el usuario, sin orden."""
        uid = to_object_id(user_id, "user_id")
        query = {"$or": [{"sender_id": uid}, {"receiver_id": uid}], "is_deleted": False}
        try:
            async for doc in self.db.messages.find(query):
                yield doc
        except PyMongoError as e:
            logger.error(f"Storage failure listing messages for {uid}: {e}", exc_info=True)
            raise StorageError("Error de almacenamiento, inténtalo más tarde") from e

    @wraps_storage_errors
    async def get(self, message_id) -> Dict[str, Any]:
        doc = await self.db.messages.find_one(
            {"_id": to_object_id(message_id, "message_id"), "is_deleted": False}
        )
        if not doc:
            raise NotFoundError("Mensaje no encontrado")
        return doc

    @wraps_storage_errors
    async def soft_delete(self, message_id, requesting_user_id) -> None:
        message = await self.get(message_id)
        requester = to_object_id(requesting_user_id, "user_id")
        if requester not in (message["sender_id"], message["receiver_id"]):
            raise AuthorizationError("No puedes eliminar este mensaje")

        now = utcnow()
        res = await self.db.messages.update_one(
            {"_id": message["_id"], "is_deleted": False},
            {"$set": {"is_deleted": True, "deleted_at": now, "updated_at": now}},
        )
        # Otra petición lo borró entre la lectura y la actualización
        if res.modified_count == 0:
            raise NotFoundError("Mensaje no encontrado")
        logger.info(f"Message {message['_id']} deleted by {requester}")
