# yaytravel/models/conversation_models.py

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, Literal


ConversationStatus = Literal["active", "completed", "archived"]
MessageRole = Literal["user", "assistant"]

DEFAULT_CONVERSATION_TITLE = "New conversation"


class CreateConversationIn(BaseModel):
    title: Optional[str] = None


class UpdateConversationIn(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    status: Optional[ConversationStatus] = None


class ConversationOut(BaseModel):
    id: str
    userId: str
    title: str
    status: ConversationStatus
    createdAt: str
    updatedAt: str


class MessageIn(BaseModel):
    content: str = Field(min_length=1)
    role: MessageRole = "user"


class MessageOut(BaseModel):
    id: str
    conversationId: str
    content: str
    role: MessageRole
    timestamp: str


class GenerateTitleIn(BaseModel):
    text: str = Field(min_length=1)


def conversation_out(row: Dict[str, Any]) -> ConversationOut:
    return ConversationOut(
        id=row["id"],
        userId=str(row["user_id"]),
        title=row["title"] or DEFAULT_CONVERSATION_TITLE,
        status=row["status"],
        createdAt=row["created_at"],
        updatedAt=row["updated_at"],
    )


def message_out(row: Dict[str, Any]) -> MessageOut:
    return MessageOut(
        id=row["id"],
        conversationId=row["conversation_id"],
        content=row["content"],
        role=row["role"],
        timestamp=row["created_at"],
    )
