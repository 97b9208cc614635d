# yaytravel/models/status_models.py

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Any


# Agents post this as their last update once the trip plan is ready
TASK_COMPLETE = "TASK_COMPLETE"


class StatusReadIn(BaseModel):
    conversation_id: str


class StatusWriteIn(BaseModel):
    conversation_id: str
    agent_id: str = ""
    agent_type: str = ""
    update: str = Field(min_length=1)


class RealTimeStatusUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    agent_id: str = ""
    agent_type: str = ""
    conversation_id: str
    update: str
    timestamp: str

    @property
    def is_complete(self) -> bool:
        return self.update == TASK_COMPLETE


class StatusUpdatesOut(BaseModel):
    status_updates: List[RealTimeStatusUpdate]


def status_update_out(row: Dict[str, Any]) -> RealTimeStatusUpdate:
    return RealTimeStatusUpdate(
        id=row["id"],
        agent_id=row["agent_id"] or "",
        agent_type=row["agent_type"] or "",
        conversation_id=row["conversation_id"],
        update=row["update_text"],
        timestamp=row["timestamp"],
    )
