# campusnet/services/directory.py
from typing import Any, Dict, Iterable, List, Optional
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..errors import NotFoundError, wraps_storage_errors
from ..utils import to_id, to_object_id

SNAPSHOT_FIELDS = {
    "first_name": 1,
    "last_name": 1,
    "profile_picture": 1,
    "is_online": 1,
    "last_seen": 1,
}

def to_snapshot(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Ficha pública de un usuario tal como la ve la mensajería."""
    out = to_id(doc)
    first = out.get("first_name") or ""
    last = out.get("last_name") or ""
    return {
        "id": out["id"],
        "first_name": first,
        "last_name": last,
        "name": f"{first} {last}".strip(),
        "profile_picture": out.get("profile_picture") or None,
        "is_online": bool(out.get("is_online", False)),
        "last_seen": out.get("last_seen"),
    }


class UserDirectory:
    """
    Lectura del directorio de usuarios.

    La presencia (``is_online``/``last_seen``) la escribe la capa de auth;
    aquí solo se lee y puede estar desfasada.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    @wraps_storage_errors
    async def get_snapshot(self, user_id) -> Optional[Dict[str, Any]]:
        doc = await self.db.users.find_one({"_id": to_object_id(user_id, "user_id")}, SNAPSHOT_FIELDS)
        return to_snapshot(doc) if doc else None

    async def require_snapshot(self, user_id, what: str = "Usuario") -> Dict[str, Any]:
        snapshot = await self.get_snapshot(user_id)
        if snapshot is None:
            raise NotFoundError(f"{what} no encontrado")
        return snapshot

    @wraps_storage_errors
    async def get_snapshots(self, user_ids: Iterable[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
        ids = list(user_ids)
        if not ids:
            return {}
        found = {}
        async for doc in self.db.users.find({"_id": {"$in": ids}}, SNAPSHOT_FIELDS):
            found[doc["_id"]] = to_snapshot(doc)
        return found

    async def with_participants(self, messages: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Serializa mensajes añadiendo la ficha de remitente y destinatario.

        Una sola consulta ``$in`` para todo el lote; si un participante ya no
        existe su ficha queda a ``None``.
        """
        messages = list(messages)
        ids = {m["sender_id"] for m in messages} | {m["receiver_id"] for m in messages}
        snapshots = await self.get_snapshots(ids)
        out = []
        for m in messages:
            item = to_id(m)
            item["sender"] = snapshots.get(m["sender_id"])
            item["receiver"] = snapshots.get(m["receiver_id"])
            out.append(item)
        return out
