from datetime import datetime

import pytest
from pydantic import ValidationError

from taskboard.models import (
    Prayer,
    PrayerCreate,
    PrayerUpdate,
    TaskCreate,
    TaskUpdate,
    options,
    to_json,
    validation_errors,
)


# --- tasks -------------------------------------------------------------------

def test_task_defaults():
    task = TaskCreate.model_validate({"title": "Buy milk"})
    assert task.priority == 1
    assert task.category == "general"
    assert task.completed is False
    assert task.description is None
    assert task.due_date is None


@pytest.mark.parametrize("payload", [{}, {"title": ""}, {"title": "   "}])
def test_task_requires_title(payload):
    with pytest.raises(ValidationError) as exc:
        TaskCreate.model_validate(payload)
    assert [e["loc"] for e in validation_errors(exc.value)] == [["title"]]


@pytest.mark.parametrize("priority", [0, 4, -1])
def test_task_priority_outside_range_rejected(priority):
    with pytest.raises(ValidationError):
        TaskCreate.model_validate({"title": "x", "priority": priority})


def test_task_every_field_error_reported():
    with pytest.raises(ValidationError) as exc:
        TaskCreate.model_validate({"title": "", "priority": 9})
    locs = sorted(e["loc"][0] for e in validation_errors(exc.value))
    assert locs == ["priority", "title"]


def test_task_due_date_string_coerced():
    task = TaskCreate.model_validate(
        {"title": "x", "dueDate": "2024-05-01T09:30:00"})
    assert task.due_date == datetime(2024, 5, 1, 9, 30)
    assert to_json(task)["dueDate"] == "2024-05-01T09:30:00"


def test_task_empty_due_date_left_absent():
    task = TaskCreate.model_validate({"title": "x", "dueDate": ""})
    assert task.due_date is None


def test_task_accepts_snake_case_names():
    task = TaskCreate.model_validate(
        {"title": "x", "due_date": "2024-05-01T00:00:00"})
    assert task.due_date is not None


def test_task_update_only_tracks_sent_fields():
    updates = TaskUpdate.model_validate({"completed": True})
    assert updates.changes() == {"completed": True}
    assert TaskUpdate.model_validate({}).changes() == {}


@pytest.mark.parametrize("field", ["title", "priority", "category", "completed"])
def test_task_update_rejects_null_for_required_fields(field):
    with pytest.raises(ValidationError) as exc:
        TaskUpdate.model_validate({field: None})
    assert [e["loc"] for e in validation_errors(exc.value)] == [[field]]


def test_task_update_allows_clearing_description():
    updates = TaskUpdate.model_validate({"description": None})
    assert updates.changes() == {"description": None}


def test_task_update_checks_priority():
    with pytest.raises(ValidationError):
        TaskUpdate.model_validate({"priority": 5})


# --- prayers -----------------------------------------------------------------

def test_alive_prayer_needs_no_death_fields():
    prayer = PrayerCreate.model_validate({
        "fullName": "Nguyen Van A",
        "prayerType": "alive",
        "birthYear": 1980,
        "address": "Da Nang",
    })
    assert prayer.address == "Da Nang"
    assert prayer.death_year is None
    assert prayer.burial_location is None


def test_deceased_prayer_missing_both_fields_rejected():
    with pytest.raises(ValidationError) as exc:
        PrayerCreate.model_validate({
            "fullName": "Nguyen Van A",
            "prayerType": "deceased",
            "birthYear": 1950,
        })
    msg = validation_errors(exc.value)[0]["msg"]
    assert "deceased" in msg
    assert "deathYear" in msg
    assert "burialLocation" in msg


@pytest.mark.parametrize("missing", ["deathYear", "burialLocation"])
def test_deceased_prayer_missing_one_field_rejected(deceased_payload, missing):
    del deceased_payload[missing]
    with pytest.raises(ValidationError) as exc:
        PrayerCreate.model_validate(deceased_payload)
    assert f"missing: {missing}" in str(exc.value)


def test_deceased_prayer_blank_burial_location_rejected(deceased_payload):
    deceased_payload["burialLocation"] = "  "
    with pytest.raises(ValidationError):
        PrayerCreate.model_validate(deceased_payload)


def test_death_before_birth_rejected(deceased_payload):
    deceased_payload["deathYear"] = 1930
    with pytest.raises(ValidationError):
        PrayerCreate.model_validate(deceased_payload)


def test_off_branch_fields_dropped(deceased_payload):
    deceased_payload["address"] = "Hanoi"
    prayer = PrayerCreate.model_validate(deceased_payload)
    assert prayer.address is None

    alive = PrayerCreate.model_validate(
        dict(deceased_payload, prayerType="alive"))
    assert alive.death_year is None
    assert alive.burial_location is None
    assert alive.address == "Hanoi"


@pytest.mark.parametrize("payload", [
    {"prayerType": "alive", "birthYear": 1980},
    {"fullName": "A", "prayerType": "alive"},
    {"fullName": "A", "prayerType": "unknown", "birthYear": 1980},
])
def test_prayer_required_fields(payload):
    with pytest.raises(ValidationError):
        PrayerCreate.model_validate(payload)


def test_prayer_update_revalidates_merged_record():
    alive = Prayer(id=1, full_name="A", prayer_type="alive", birth_year=1950)
    with pytest.raises(ValidationError):
        PrayerUpdate.model_validate({"prayerType": "deceased"}).apply_to(alive)

    merged = PrayerUpdate.model_validate({
        "prayerType": "deceased",
        "deathYear": 2000,
        "burialLocation": "Hue",
    }).apply_to(alive)
    assert merged.id == 1
    assert merged.prayer_type == "deceased"


def test_prayer_json_uses_camel_case(deceased_payload):
    data = to_json(Prayer(id=3, **deceased_payload))
    assert data == dict(deceased_payload, id=3, address=None)


def test_options_lists_reference_data():
    data = options()
    assert [p["value"] for p in data["priorities"]] == [1, 2, 3]
    assert "general" in data["categories"]
    assert {p["value"] for p in data["prayerTypes"]} == {"alive", "deceased"}


@pytest.mark.parametrize("field, value", [
    ("birthYear", 0),
    ("birthYear", 10 ** 20),
    ("deathYear", 10000),
])
def test_years_outside_range_rejected(deceased_payload, field, value):
    deceased_payload[field] = value
    with pytest.raises(ValidationError) as exc:
        PrayerCreate.model_validate(deceased_payload)
    assert [field] in [e["loc"] for e in validation_errors(exc.value)]


def test_prayer_update_checks_year_range():
    with pytest.raises(ValidationError):
        PrayerUpdate.model_validate({"birthYear": 10 ** 20})
