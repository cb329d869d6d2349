from fastapi import APIRouter, Depends, status, Query, Request
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from ..config import get_settings
from ..db import get_db
from ..middleware.rate_limit import limiter, SEND_MESSAGE_LIMIT
from ..security import get_current_user
from ..schemas.message import ConversationPage, MessageCreate, MessageEnvelope, ThreadPage
from ..services.conversations import ConversationAggregator
from ..services.directory import UserDirectory
from ..services.message_log import MessageLog
from ..services.read_state import ReadStateTracker
import logging

logger = logging.getLogger(__name__)

settings = get_settings()

router = APIRouter()

# --------- dependencias ----------
def get_directory(db: AsyncIOMotorDatabase = Depends(get_db)) -> UserDirectory:
    return UserDirectory(db)

def get_message_log(
    db: AsyncIOMotorDatabase = Depends(get_db),
    directory: UserDirectory = Depends(get_directory),
) -> MessageLog:
    return MessageLog(db, directory)

def get_aggregator(
    db: AsyncIOMotorDatabase = Depends(get_db),
    message_log: MessageLog = Depends(get_message_log),
) -> ConversationAggregator:
    return ConversationAggregator(db, message_log, message_log.directory)

def get_read_state(
    db: AsyncIOMotorDatabase = Depends(get_db),
    message_log: MessageLog = Depends(get_message_log),
) -> ReadStateTracker:
    return ReadStateTracker(db, message_log)

# -------------------- Conversaciones --------------------

@router.get("", response_model=ConversationPage)
async def list_conversations(
    page: int = Query(1),
    limit: Optional[int] = Query(None, le=settings.max_page_limit),
    aggregator: ConversationAggregator = Depends(get_aggregator),
    current=Depends(get_current_user),
):
    """Una fila por interlocutor, de la más reciente a la más antigua"""
    conversations, info = await aggregator.list_conversations(
        current["id"], page, settings.conversations_page_size if limit is None else limit
    )
    return {"conversations": conversations, "pagination": info}

@router.get("/unread-count")
async def unread_count(
    aggregator: ConversationAggregator = Depends(get_aggregator),
    current=Depends(get_current_user),
):
    return {"unread": await aggregator.unread_total(current["id"])}

@router.get("/{user_id}", response_model=ThreadPage)
async def get_thread(
    user_id: str,
    page: int = Query(1),
    limit: Optional[int] = Query(None, le=settings.max_page_limit),
    mark_read: bool = Query(True, description="Marcar como leídos los mensajes recibidos"),
    message_log: MessageLog = Depends(get_message_log),
    read_state: ReadStateTracker = Depends(get_read_state),
    current=Depends(get_current_user),
):
    """Hilo con otro usuario en orden cronológico (página 1 = lo más reciente)"""
    other_user = await message_log.directory.require_snapshot(user_id)
    messages, info = await message_log.list_thread(
        current["id"], user_id, page, settings.thread_page_size if limit is None else limit
    )
    if mark_read:
        await read_state.mark_thread_read(current["id"], user_id)
    return {
        "messages": await message_log.directory.with_participants(messages),
        "other_user": other_user,
        "pagination": info,
    }

@router.put("/{user_id}/read-all")
async def mark_thread_read(
    user_id: str,
    message_log: MessageLog = Depends(get_message_log),
    read_state: ReadStateTracker = Depends(get_read_state),
    current=Depends(get_current_user),
):
    """Marcar como leído todo lo recibido de un usuario"""
    await message_log.directory.require_snapshot(user_id)
    updated = await read_state.mark_thread_read(current["id"], user_id)
    return {"updated": updated}

# -------------------- Mensajes --------------------

@router.post("", response_model=MessageEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(SEND_MESSAGE_LIMIT)
async def send_message(
    request: Request,
    payload: MessageCreate,
    message_log: MessageLog = Depends(get_message_log),
    current=Depends(get_current_user),
):
    message = await message_log.append(
        current["id"], payload.receiver_id, payload.content, payload.attachments
    )
    message, = await message_log.directory.with_participants([message])
    return {"message": message}

@router.put("/{message_id}/read", response_model=MessageEnvelope)
async def mark_message_read(
    message_id: str,
    read_state: ReadStateTracker = Depends(get_read_state),
    current=Depends(get_current_user),
):
    message = await read_state.mark_message_read(message_id, current["id"])
    message, = await read_state.message_log.directory.with_participants([message])
    return {"message": message}

@router.delete("/{message_id}")
async def delete_message(
    message_id: str,
    message_log: MessageLog = Depends(get_message_log),
    current=Depends(get_current_user),
):
    """Borrado lógico: el mensaje desaparece para los dos participantes"""
    await message_log.soft_delete(message_id, current["id"])
    return {"message": "Mensaje eliminado"}
