# yaytravel/api/routes_status.py

from fastapi import APIRouter, Depends

from yaytravel.core.logger import logger
from yaytravel.db.sqlite_store import SQLiteStore, get_db
from yaytravel.models.status_models import (
    TASK_COMPLETE,
    RealTimeStatusUpdate,
    StatusReadIn,
    StatusUpdatesOut,
    StatusWriteIn,
    status_update_out,
)

# Agents and the UI talk to these without a user token.
router = APIRouter(prefix="/status", tags=["status"])


@router.post("/read", response_model=StatusUpdatesOut)
def read_status_updates(data: StatusReadIn, db: SQLiteStore = Depends(get_db)):
    rows = db.get_status_updates(data.conversation_id)
    return {"status_updates": [status_update_out(r) for r in rows]}


@router.post("/write", response_model=RealTimeStatusUpdate, status_code=201)
def write_status_update(data: StatusWriteIn, db: SQLiteStore = Depends(get_db)):
    record = db.add_status_update(
        conversation_id=data.conversation_id,
        update=data.update,
        agent_id=data.agent_id,
        agent_type=data.agent_type,
    )
    logger.debug(f"[{data.agent_type or 'agent'}] {data.conversation_id}: {data.update}")

    if data.update == TASK_COMPLETE and db.get_conversation(data.conversation_id):
        db.update_conversation(data.conversation_id, status="completed")
        logger.info(f"Conversation {data.conversation_id} marked completed")

    return status_update_out(record)
