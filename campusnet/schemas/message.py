from pydantic import BaseModel, Field
from typing import List, Optional

from ..pagination import PageInfo
from .user import UserSnapshot

class Attachment(BaseModel):
    name: str
    url: str
    type: Optional[str] = Field(None, description="Tipo MIME")
    size: Optional[int] = Field(None, ge=0, description="Tamaño en bytes")

class MessageCreate(BaseModel):
    receiver_id: str
    # La longitud se valida en el servicio para responder 400, no 422
    content: str
    attachments: List[Attachment] = []

class MessageOut(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    attachments: List[Attachment] = []
    read: bool = False
    read_at: Optional[str] = None
    is_deleted: bool = False
    created_at: str
    sender: Optional[UserSnapshot] = None
    receiver: Optional[UserSnapshot] = None

class MessageEnvelope(BaseModel):
    message: MessageOut

class LastMessage(BaseModel):
    id: str
    sender_id: str
    content: str
    created_at: str
    read: bool

class ConversationOut(BaseModel):
    user: UserSnapshot
    last_message: LastMessage
    unread_count: int

class ConversationPage(BaseModel):
    conversations: List[ConversationOut]
    pagination: PageInfo

class ThreadPage(BaseModel):
    messages: List[MessageOut]
    other_user: UserSnapshot
    pagination: PageInfo
