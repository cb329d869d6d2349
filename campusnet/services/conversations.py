"""
Lista de conversaciones de un usuario.

Una conversación no se guarda en ningún sitio: se calcula en cada petición a
partir de los mensajes visibles del usuario, agrupándolos por interlocutor.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import wraps_storage_errors
from ..pagination import PageInfo, paginate, validate_page
from ..utils import to_id, to_object_id
from .directory import UserDirectory
from .message_log import MessageLog

logger = logging.getLogger(__name__)


def _recency(message: Dict[str, Any]):
    # A igual fecha gana el insertado después
    return message["created_at"], message["_id"]


def counterpart_of(message: Dict[str, Any], user_id: ObjectId) -> ObjectId:
    return message["sender_id"] if message["receiver_id"] == user_id else message["receiver_id"]


class ConversationAggregator:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        message_log: Optional[MessageLog] = None,
        directory: Optional[UserDirectory] = None,
    ):
        self.db = db
        self.directory = directory or UserDirectory(db)
        self.message_log = message_log or MessageLog(db, self.directory)

    async def _partitions(self, user_id: ObjectId) -> Dict[ObjectId, Dict[str, Any]]:
        partitions: Dict[ObjectId, Dict[str, Any]] = {}
        async for message in self.message_log.list_for_user(user_id):
            counterpart = counterpart_of(message, user_id)
            if counterpart == user_id:
                continue
            part = partitions.get(counterpart)
            if part is None:
                part = partitions[counterpart] = {"last": message, "unread": 0}
            elif _recency(message) > _recency(part["last"]):
                part["last"] = message
            if message["receiver_id"] == user_id and not message.get("read", False):
                part["unread"] += 1
        return partitions

    async def list_conversations(self, user_id, page: int, limit: int) -> Tuple[List[Dict[str, Any]], PageInfo]:
        validate_page(page, limit)
        uid = to_object_id(user_id, "user_id")

        partitions = await self._partitions(uid)
        snapshots = await self.directory.get_snapshots(partitions.keys())

        rows = []
        for counterpart, part in partitions.items():
            snapshot = snapshots.get(counterpart)
            if snapshot is None:
                logger.warning(f"Skipping conversation of {uid} with missing user {counterpart}")
                continue
            rows.append((snapshot, part))
        rows.sort(key=lambda row: _recency(row[1]["last"]), reverse=True)

        page_rows, info = paginate(rows, page, limit)
        return [self._conversation(snapshot, part) for snapshot, part in page_rows], info

    @staticmethod
    def _conversation(snapshot: Dict[str, Any], part: Dict[str, Any]) -> Dict[str, Any]:
        last = to_id(part["last"])
        return {
            "user": snapshot,
            "last_message": {
                "id": last["id"],
                "sender_id": last["sender_id"],
                "content": last["content"],
                "created_at": last["created_at"],
                "read": bool(last.get("read", False)),
            },
            "unread_count": part["unread"],
        }

    @wraps_storage_errors
    async def unread_total(self, user_id) -> int:
        """Mensajes sin leer del usuario, contando solo interlocutores que siguen existiendo."""
        uid = to_object_id(user_id, "user_id")
        query = {"receiver_id": uid, "read": False, "is_deleted": False}
        senders = set()
        async for doc in self.db.messages.find(query, {"sender_id": 1}):
            senders.add(doc["sender_id"])
        known = await self.directory.get_snapshots(senders)
        if not known:
            return 0
        return await self.db.messages.count_documents({**query, "sender_id": {"$in": list(known)}})
