"""Data models for task and prayer request payloads."""
import json
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)


PRIORITIES = {1: "Low", 2: "Medium", 3: "High"}

DEFAULT_CATEGORIES = ("general", "work", "personal", "shopping", "health")

PRAYER_TYPES = {"alive": "Cầu an", "deceased": "Cầu siêu"}

MIN_YEAR, MAX_YEAR = 1, 9999


def _required_text(value: Optional[str]) -> str:
    if value is None:
        raise ValueError("may not be null")
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _check_priority(value: int) -> int:
    if value not in PRIORITIES:
        raise ValueError(
            f"must be one of {', '.join(str(p) for p in PRIORITIES)}")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Schema(BaseModel):
    """Base for wire models: camelCase aliases in, camelCase out."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TaskCreate(Schema):
    """Task creation request model."""
    title: str = Field(..., description="Short title of the task")
    description: Optional[str] = Field(
        None, description="Free-form details")
    due_date: Optional[datetime] = Field(
        None, alias="dueDate", description="When the task is due")
    priority: int = Field(1, description="1 = Low, 2 = Medium, 3 = High")
    category: str = Field("general", description="Task category")
    completed: bool = Field(False, description="Completion flag")

    @field_validator("title", "category")
    @classmethod
    def _not_blank(cls, value):
        return _required_text(value)

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value):
        return _optional_text(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _empty_due_date(cls, value):
        return _blank_to_none(value)

    @field_validator("priority")
    @classmethod
    def _priority_in_range(cls, value):
        return _check_priority(value)


class Task(TaskCreate):
    """Stored task."""
    id: int = Field(..., description="Identifier assigned on creation")


class TaskUpdate(Schema):
    """Partial task update; only fields present in the payload apply."""
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    priority: Optional[int] = None
    category: Optional[str] = None
    completed: Optional[bool] = None

    @field_validator("priority", "completed")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("title", "category")
    @classmethod
    def _not_blank(cls, value):
        return _required_text(value)

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value):
        return _optional_text(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _empty_due_date(cls, value):
        return _blank_to_none(value)

    @field_validator("priority")
    @classmethod
    def _priority_in_range(cls, value):
        return _check_priority(value)

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class PrayerCreate(Schema):
    """Prayer request creation model.

    ``prayer_type`` selects which of the remaining fields are required:
    a deceased person needs both ``death_year`` and ``burial_location``,
    a living person may carry an ``address``. Fields belonging to the
    other branch are dropped.
    """
    full_name: str = Field(..., alias="fullName")
    prayer_type: Literal["alive", "deceased"] = Field(..., alias="prayerType")
    birth_year: int = Field(
        ..., alias="birthYear", ge=MIN_YEAR, le=MAX_YEAR)
    address: Optional[str] = None
    death_year: Optional[int] = Field(
        None, alias="deathYear", ge=MIN_YEAR, le=MAX_YEAR)
    burial_location: Optional[str] = Field(None, alias="burialLocation")

    @field_validator("full_name")
    @classmethod
    def _not_blank(cls, value):
        return _required_text(value)

    @field_validator("address", "burial_location")
    @classmethod
    def _strip_text(cls, value):
        return _optional_text(value)

    @field_validator("death_year", mode="before")
    @classmethod
    def _empty_death_year(cls, value):
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _check_branch(self):
        if self.prayer_type == "deceased":
            missing = [
                alias for name, alias in (("death_year", "deathYear"),
                                          ("burial_location", "burialLocation"))
                if getattr(self, name) is None
            ]
            if missing:
                raise ValueError(
                    "deceased prayer requests require deathYear and "
                    f"burialLocation; missing: {', '.join(missing)}")
            if self.death_year < self.birth_year:
                raise ValueError("deathYear must not be earlier than birthYear")
            self.address = None
        else:
            self.death_year = None
            self.burial_location = None
        return self


class Prayer(PrayerCreate):
    """Stored prayer request."""
    id: int = Field(..., description="Identifier assigned on creation")


class PrayerUpdate(Schema):
    """Partial prayer update; merged result is re-validated as a whole."""
    full_name: Optional[str] = Field(None, alias="fullName")
    prayer_type: Optional[Literal["alive", "deceased"]] = Field(
        None, alias="prayerType")
    birth_year: Optional[int] = Field(
        None, alias="birthYear", ge=MIN_YEAR, le=MAX_YEAR)
    address: Optional[str] = None
    death_year: Optional[int] = Field(
        None, alias="deathYear", ge=MIN_YEAR, le=MAX_YEAR)
    burial_location: Optional[str] = Field(None, alias="burialLocation")

    @field_validator("full_name", "prayer_type", "birth_year")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("death_year", mode="before")
    @classmethod
    def _empty_death_year(cls, value):
        return _blank_to_none(value)

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)

    def apply_to(self, prayer: Prayer) -> Prayer:
        """Merge into ``prayer`` and validate the result.

        Raises pydantic.ValidationError when the merged record breaks the
        prayer type rule.
        """
        merged = prayer.model_dump()
        merged.update(self.changes())
        return Prayer.model_validate(merged)


def to_json(record: BaseModel) -> Dict[str, Any]:
    """JSON-ready dict with camelCase keys."""
    return record.model_dump(mode="json", by_alias=True)


def validation_errors(exc: ValidationError) -> List[Dict[str, Any]]:
    """Field errors in a JSON-safe shape."""
    return [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in json.loads(exc.json(include_url=False))
    ]


def options() -> Dict[str, Any]:
    """Reference data for form dropdowns."""
    return {
        "priorities": [
            {"value": value, "label": label}
            for value, label in PRIORITIES.items()
        ],
        "categories": list(DEFAULT_CATEGORIES),
        "prayerTypes": [
            {"value": value, "label": label}
            for value, label in PRAYER_TYPES.items()
        ],
    }
