import pytest

from yaytravel.models.trip_plan_models import TripPlanOut
from yaytravel.services.trip_plan_service import (
    InvalidPlanTransition,
    check_transition,
    format_trip_plan,
)


@pytest.mark.parametrize("current,target", [
    ("draft", "reviewing"),
    ("reviewing", "approved"),
    ("reviewing", "rejected"),
    ("reviewing", "draft"),
    ("rejected", "draft"),
])
def test_allowed_transitions(current, target):
    assert check_transition(current, target) is True


@pytest.mark.parametrize("current,target", [
    ("draft", "approved"),
    ("draft", "rejected"),
    ("approved", "draft"),
    ("approved", "rejected"),
    ("rejected", "approved"),
])
def test_forbidden_transitions(current, target):
    with pytest.raises(InvalidPlanTransition):
        check_transition(current, target)


def test_same_status_is_not_a_change():
    assert check_transition("approved", "approved") is False


def _plan(**overrides):
    data = {
        "id": "p1",
        "conversationId": "c1",
        "destination": "Paris, France",
        "dates": {"start": "2024-03-15", "end": "2024-03-22"},
        "participants": ["Sarah", "Mike"],
        "tasks": [],
        "flights": [],
        "companions": [{"name": "Sarah Johnson", "relationship": "Friend"}],
        "hotels": [{
            "name": "Le Marais Boutique Hotel",
            "startDate": "2024-03-19",
            "endDate": "2024-03-22",
            "address": "8 Rue de Jouy, 75004 Paris, France",
            "price": 220,
            "currency": "EUR",
            "rating": 4.5,
        }],
        "restaurants": [{
            "name": "L'As du Fallafel",
            "date": "2024-03-17",
            "startTime": "12:30 PM",
            "address": "34 Rue des Rosiers, 75004 Paris, France",
            "cuisine": "Middle Eastern",
        }],
        "status": "reviewing",
        "createdAt": "2024-02-15T00:00:00+00:00",
        "updatedAt": "2024-02-15T00:00:00+00:00",
    }
    data.update(overrides)
    return TripPlanOut.model_validate(data)


def test_format_renders_sections():
    text = format_trip_plan(_plan())
    assert "Dates: 3/15/2024 - 3/22/2024" in text
    assert "Participants: Sarah, Mike" in text
    assert "Relationship: Friend" in text
    assert "Price: EUR 220/night" in text
    assert "Rating: 4.5/5" in text
    assert "Start time: 12:30 PM" in text
    assert "Cuisine: Middle Eastern" in text
    assert text.endswith("\n")


def test_format_skips_missing_optional_fields():
    text = format_trip_plan(_plan())
    assert "Email:" not in text
    assert "Price Range:" not in text
    assert "Airline:" not in text
