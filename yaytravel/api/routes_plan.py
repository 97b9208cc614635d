# yaytravel/api/routes_plan.py

from fastapi import APIRouter, Depends, HTTPException

from yaytravel.api.routes_auth import get_current_user_id
from yaytravel.api.routes_conversation import get_owned_conversation
from yaytravel.core.logger import logger
from yaytravel.db.sqlite_store import SQLiteStore, get_db
from yaytravel.models.trip_plan_models import (
    PlanStatusIn,
    PlanSummaryOut,
    TripPlanIn,
    TripPlanOut,
    TripPlanUpdate,
    plan_to_record,
    trip_plan_out,
)
from yaytravel.services.trip_plan_service import (
    InvalidPlanTransition,
    check_transition,
    format_trip_plan,
)

router = APIRouter(prefix="/plans", tags=["plans"])


def _owned_plan(db: SQLiteStore, plan_id: str, user_id: int) -> dict:
    plan = db.get_trip_plan(plan_id)
    if not plan:
        raise HTTPException(404, "Trip plan not found")
    conv = db.get_conversation(plan["conversation_id"])
    if not conv or int(conv["user_id"]) != user_id:
        raise HTTPException(404, "Trip plan not found")
    return plan


def _transition(db: SQLiteStore, plan: dict, target: str) -> TripPlanOut:
    try:
        changed = check_transition(plan["status"], target)
    except InvalidPlanTransition as e:
        raise HTTPException(409, str(e))

    if changed:
        plan = db.update_trip_plan(plan["id"], {"status": target})
        logger.info(f"Plan {plan['id']} moved to {target}")
    return trip_plan_out(plan)


# --------------------------
# Create / replace
# --------------------------
@router.post("/", response_model=TripPlanOut, status_code=201)
def create_trip_plan(
    data: TripPlanIn,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    get_owned_conversation(db, data.conversationId, user_id)
    plan = db.save_trip_plan(data.conversationId, plan_to_record(data))
    logger.info(f"Saved plan {plan['id']} for conversation {data.conversationId}")
    return trip_plan_out(plan)


@router.get("/conversation/{conversation_id}", response_model=TripPlanOut)
def get_plan_for_conversation(
    conversation_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    get_owned_conversation(db, conversation_id, user_id)
    plan = db.get_trip_plan_for_conversation(conversation_id)
    if not plan:
        raise HTTPException(404, "Trip plan not found")
    return trip_plan_out(plan)


@router.get("/{plan_id}", response_model=TripPlanOut)
def get_trip_plan(
    plan_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    return trip_plan_out(_owned_plan(db, plan_id, user_id))


@router.patch("/{plan_id}", response_model=TripPlanOut)
def update_trip_plan(
    plan_id: str,
    data: TripPlanUpdate,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    _owned_plan(db, plan_id, user_id)
    updates = {k: v for k, v in plan_to_record(data).items() if v is not None}
    return trip_plan_out(db.update_trip_plan(plan_id, updates))


# --------------------------
# Review workflow
# --------------------------
@router.post("/{plan_id}/status", response_model=TripPlanOut)
def update_plan_status(
    plan_id: str,
    data: PlanStatusIn,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    return _transition(db, _owned_plan(db, plan_id, user_id), data.status)


@router.post("/{plan_id}/accept", response_model=TripPlanOut)
def accept_trip_plan(
    plan_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    return _transition(db, _owned_plan(db, plan_id, user_id), "approved")


@router.post("/{plan_id}/reject", response_model=TripPlanOut)
def reject_trip_plan(
    plan_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    return _transition(db, _owned_plan(db, plan_id, user_id), "rejected")


@router.get("/{plan_id}/summary", response_model=PlanSummaryOut)
def get_plan_summary(
    plan_id: str,
    user_id: int = Depends(get_current_user_id),
    db: SQLiteStore = Depends(get_db),
):
    plan = trip_plan_out(_owned_plan(db, plan_id, user_id))
    return {"text": format_trip_plan(plan)}
