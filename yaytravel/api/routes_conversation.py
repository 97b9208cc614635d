# yaytravel/api/routes_conversation.py

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, List

from yaytravel.api.routes_auth import get_current_user_id
from yaytravel.core.logger import logger
from yaytravel.db.sqlite_store import SQLiteStore, get_db
from yaytravel.models.conversation_models import (
    DEFAULT_CONVERSATION_TITLE,
    ConversationOut,
    ConversationStatus,
    CreateConversationIn,
    GenerateTitleIn,
    MessageIn,
    MessageOut,
    UpdateConversationIn,
    conversation_out,
    message_out,
)
from yaytravel.services.title_service import TitleService

router = APIRouter(prefix="/conversations", tags=["conversations"])


def get_title_service() -> TitleService:
    return TitleService()


def get_owned_conversation(db: SQLiteStore, conversation_id: str, user_id: int) -> dict:
    conv = db.get_conversation(conversation_id)
    if not conv or int(conv["user_id"]) != user_id:
        raise HTTPException(404, "Conversation not found")
    return conv


# --------------------------
# Create conversation
# --------------------------
@router.post("/", response_model=str)
def create_conversation(
    data: Optional[CreateConversationIn] = None,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    title = (data.title if data else None) or DEFAULT_CONVERSATION_TITLE
    cid = db.create_conversation(user_id, title)
    logger.info(f"User {user_id} created conversation {cid}")
    # The client expects the bare id, not an object
    return cid


# --------------------------
# List conversations
# --------------------------
@router.get("/", response_model=List[ConversationOut])
def list_conversations(
    status: Optional[ConversationStatus] = None,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    return [conversation_out(c) for c in db.list_conversations(user_id, status=status)]


@router.get("/{conversation_id}", response_model=ConversationOut)
def get_conversation(
    conversation_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    return conversation_out(get_owned_conversation(db, conversation_id, user_id))


@router.patch("/{conversation_id}", response_model=ConversationOut)
def update_conversation(
    conversation_id: str,
    data: UpdateConversationIn,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    get_owned_conversation(db, conversation_id, user_id)
    db.update_conversation(conversation_id, title=data.title, status=data.status)
    return conversation_out(db.get_conversation(conversation_id))


@router.delete("/{conversation_id}")
def delete_conversation(
    conversation_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    get_owned_conversation(db, conversation_id, user_id)
    db.delete_conversation(conversation_id)
    logger.info(f"User {user_id} deleted conversation {conversation_id}")
    return {"ok": True, "message": "Conversation deleted"}


# --------------------------
# Messages
# --------------------------
@router.get("/{conversation_id}/messages", response_model=List[MessageOut])
def get_messages(
    conversation_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    get_owned_conversation(db, conversation_id, user_id)
    return [message_out(m) for m in db.get_messages(conversation_id)]


@router.post("/{conversation_id}/messages", response_model=MessageOut, status_code=201)
def add_message(
    conversation_id: str,
    data: MessageIn,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    get_owned_conversation(db, conversation_id, user_id)
    return message_out(db.add_message(conversation_id, data.role, data.content))


# --------------------------
# Title generation
# --------------------------
@router.post("/{conversation_id}/title", response_model=ConversationOut)
def generate_conversation_title(
    conversation_id: str,
    data: GenerateTitleIn,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
    titles: TitleService = Depends(get_title_service),
):
    get_owned_conversation(db, conversation_id, user_id)
    title = titles.generate_title(data.text)
    db.update_conversation(conversation_id, title=title)
    return conversation_out(db.get_conversation(conversation_id))
