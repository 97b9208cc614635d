# yaytravel/services/trip_plan_service.py

from typing import Dict, Set

from yaytravel.models.trip_plan_models import TripPlanOut


# Allowed review workflow moves. approved is final.
PLAN_TRANSITIONS: Dict[str, Set[str]] = {
    "draft": {"reviewing"},
    "reviewing": {"approved", "rejected", "draft"},
    "rejected": {"draft"},
    "approved": set(),
}


class InvalidPlanTransition(Exception):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move plan from '{current}' to '{target}'")


def check_transition(current: str, target: str) -> bool:
    """
    Returns True when the status actually changes, False for a no-op.
    Raises InvalidPlanTransition for moves outside PLAN_TRANSITIONS.
    """
    if current == target:
        return False
    if target not in PLAN_TRANSITIONS.get(current, set()):
        raise InvalidPlanTransition(current, target)
    return True


def _fmt_date(value) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _fmt_amount(value: float) -> str:
    return f"{value:g}"


def format_trip_plan(plan: TripPlanOut) -> str:
    lines = ["**Trip Plan**", ""]
    if plan.destination:
        lines.append(f"Destination: {plan.destination}")
    lines.append(f"Dates: {_fmt_date(plan.dates.start)} - {_fmt_date(plan.dates.end)}")
    if plan.participants:
        lines.append(f"Participants: {', '.join(plan.participants)}")
    lines.append(f"Status: {plan.status}")
    lines.append("")

    # Flights
    lines.append("**Flights:**")
    for flight in plan.flights:
        lines.append(f"From: {flight.from_}")
        lines.append(f"To: {flight.to}")
        lines.append(f"Date: {_fmt_date(flight.date)}")
        lines.append(f"Price: {flight.currency} {_fmt_amount(flight.price)}")
        if flight.airline:
            lines.append(f"Airline: {flight.airline}")
        if flight.flightNumber:
            lines.append(f"Flight: {flight.flightNumber}")
        if flight.departureTime:
            lines.append(f"Departure: {flight.departureTime}")
        if flight.arrivalTime:
            lines.append(f"Arrival: {flight.arrivalTime}")
        lines.append("")

    # Companions
    lines.append("**Companions:**")
    for companion in plan.companions:
        lines.append(f"Name: {companion.name}")
        if companion.email:
            lines.append(f"Email: {companion.email}")
        if companion.relationship:
            lines.append(f"Relationship: {companion.relationship}")
        lines.append("")

    # Hotels
    lines.append("**Hotels:**")
    for hotel in plan.hotels:
        lines.append(f"Name: {hotel.name}")
        lines.append(f"Start Date: {_fmt_date(hotel.startDate)}")
        lines.append(f"End Date: {_fmt_date(hotel.endDate)}")
        lines.append(f"Address: {hotel.address}")
        lines.append(f"Price: {hotel.currency} {_fmt_amount(hotel.price)}/night")
        if hotel.rating:
            lines.append(f"Rating: {hotel.rating}/5")
        lines.append("")

    # Restaurants
    lines.append("**Restaurants:**")
    for restaurant in plan.restaurants:
        lines.append(f"Name: {restaurant.name}")
        lines.append(f"Date: {_fmt_date(restaurant.date)}")
        lines.append(f"Start time: {restaurant.startTime}")
        lines.append(f"Address: {restaurant.address}")
        if restaurant.cuisine:
            lines.append(f"Cuisine: {restaurant.cuisine}")
        if restaurant.priceRange:
            lines.append(f"Price Range: {restaurant.priceRange}")
        if restaurant.rating:
            lines.append(f"Rating: {restaurant.rating}/5")
        lines.append("")

    # Tasks
    lines.append("**Tasks:**")
    for task in plan.tasks:
        lines.append(f"- [{task.status}] {task.title} ({task.category}, {task.priority} priority)")
        if task.estimatedCost is not None:
            lines.append(f"  Estimated cost: {_fmt_amount(task.estimatedCost)}")
        if task.notes:
            lines.append(f"  Notes: {task.notes}")

    return "\n".join(lines).rstrip() + "\n"
