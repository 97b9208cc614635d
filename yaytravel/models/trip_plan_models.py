# yaytravel/models/trip_plan_models.py

import datetime as dt
from typing import Optional, List, Dict, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


PlanStatus = Literal["draft", "reviewing", "approved", "rejected"]
TaskCategory = Literal["accommodation", "transportation", "activities", "dining", "logistics"]
TaskStatus = Literal["pending", "in_progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high"]


# ----------------------------------------------------------
# TASKS
# ----------------------------------------------------------
class TripTask(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    description: str = ""
    category: TaskCategory
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    assignedTo: Optional[str] = None
    dueDate: Optional[dt.date] = None
    estimatedCost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


# ----------------------------------------------------------
# ITINERARY DETAILS
# ----------------------------------------------------------
class Flight(BaseModel):
    from_: str = Field(alias="from")
    to: str
    date: dt.date
    price: float
    currency: str
    airline: Optional[str] = None
    flightNumber: Optional[str] = None
    departureTime: Optional[str] = None
    arrivalTime: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class Companion(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class Hotel(BaseModel):
    name: str
    startDate: dt.date
    endDate: dt.date
    address: str
    price: float
    currency: str
    rating: Optional[float] = None
    amenities: List[str] = Field(default_factory=list)
    roomType: Optional[str] = None


class Restaurant(BaseModel):
    name: str
    date: dt.date
    startTime: str
    address: str
    cuisine: Optional[str] = None
    priceRange: Optional[str] = None
    rating: Optional[float] = None
    reservationRequired: Optional[bool] = None


class PlanDates(BaseModel):
    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def end_not_before_start(self):
        if self.end < self.start:
            raise ValueError("dates.end must not be before dates.start")
        return self


# ----------------------------------------------------------
# REQUESTS
# ----------------------------------------------------------
class TripPlanIn(BaseModel):
    conversationId: str
    destination: str = ""
    dates: PlanDates
    participants: List[str] = Field(default_factory=list)
    tasks: List[TripTask] = Field(default_factory=list)
    flights: List[Flight] = Field(default_factory=list)
    companions: List[Companion] = Field(default_factory=list)
    hotels: List[Hotel] = Field(default_factory=list)
    restaurants: List[Restaurant] = Field(default_factory=list)
    status: Optional[PlanStatus] = None


class TripPlanUpdate(BaseModel):
    destination: Optional[str] = None
    dates: Optional[PlanDates] = None
    participants: Optional[List[str]] = None
    tasks: Optional[List[TripTask]] = None
    flights: Optional[List[Flight]] = None
    companions: Optional[List[Companion]] = None
    hotels: Optional[List[Hotel]] = None
    restaurants: Optional[List[Restaurant]] = None


class PlanStatusIn(BaseModel):
    status: PlanStatus


class PlanSummaryOut(BaseModel):
    text: str


# ----------------------------------------------------------
# RESPONSE
# ----------------------------------------------------------
class TripPlanOut(BaseModel):
    id: str
    conversationId: str
    destination: str
    dates: PlanDates
    participants: List[str]
    tasks: List[TripTask]
    flights: List[Flight]
    companions: List[Companion]
    hotels: List[Hotel]
    restaurants: List[Restaurant]
    status: PlanStatus
    createdAt: str
    updatedAt: str


def plan_to_record(plan: BaseModel) -> Dict[str, Any]:
    """Flatten a TripPlanIn / TripPlanUpdate into the store's column layout."""
    data = plan.model_dump(mode="json", by_alias=True, exclude_unset=isinstance(plan, TripPlanUpdate))
    dates = data.pop("dates", None)
    data.pop("conversationId", None)
    if dates:
        data["date_start"] = dates["start"]
        data["date_end"] = dates["end"]
    return data


def trip_plan_out(record: Dict[str, Any]) -> TripPlanOut:
    return TripPlanOut(
        id=record["id"],
        conversationId=record["conversation_id"],
        destination=record["destination"] or "",
        dates=PlanDates(start=record["date_start"], end=record["date_end"]),
        participants=record["participants"],
        tasks=record["tasks"],
        flights=record["flights"],
        companions=record["companions"],
        hotels=record["hotels"],
        restaurants=record["restaurants"],
        status=record["status"],
        createdAt=record["created_at"],
        updatedAt=record["updated_at"],
    )
