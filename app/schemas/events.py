"""Validation schemas for event and booking input, plus the public DTOs."""

import re
from datetime import date, datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError

from app.db.models import EMAIL_PATTERN, TIME_PATTERN


SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MAX_AGENDA_ITEMS = 20
MAX_TAGS = 10


class EventMode(str, Enum):
    """How an event is attended."""
    online = "online"
    offline = "offline"
    hybrid = "hybrid"


def _check_length(value: str, label: str, min_length: int, max_length: int) -> str:
    if len(value) < min_length:
        raise PydanticCustomError(
            "string_too_short", f"{label} must be at least {min_length} characters"
        )
    if len(value) > max_length:
        raise PydanticCustomError(
            "string_too_long", f"{label} must be {max_length} characters or less"
        )
    return value


def _check_items(values: List[str], singular: str, plural: str, maximum: int) -> List[str]:
    cleaned = [item.strip() for item in values]
    if any(not item for item in cleaned):
        raise PydanticCustomError("item_empty", f"{singular} cannot be empty")
    if not cleaned:
        raise PydanticCustomError("too_short", f"At least one {plural} is required")
    if len(cleaned) > maximum:
        raise PydanticCustomError("too_long", f"Maximum {maximum} {plural}s allowed")
    return cleaned


class SlugInput(BaseModel):
    """Wrapper so a bare slug can be validated like any other input."""
    slug: str

    @field_validator("slug", mode="before")
    @classmethod
    def normalize_slug(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("slug_required", "Slug is required")
        if len(v) > 200:
            raise PydanticCustomError("slug_too_long", "Slug must be 200 characters or less")
        if not SLUG_PATTERN.match(v):
            raise PydanticCustomError(
                "slug_format",
                "Slug must contain only lowercase letters, numbers, and hyphens",
            )
        return v


def validate_slug(slug: str) -> str:
    """Normalize and validate a slug.

    Raises:
        pydantic.ValidationError: If the slug is malformed
    """
    return SlugInput(slug=slug).slug


class CreateEventInput(BaseModel):
    """Fields required to create a new event; the image is validated separately."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str
    description: str
    overview: str
    venue: str
    location: str
    date: str
    time: str
    mode: EventMode
    audience: str
    agenda: List[str]
    organizer: str
    tags: List[str]

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _check_length(v, "Title", 3, 200)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        return _check_length(v, "Description", 10, 1000)

    @field_validator("overview")
    @classmethod
    def check_overview(cls, v: str) -> str:
        return _check_length(v, "Overview", 10, 5000)

    @field_validator("venue", "location", "audience", "organizer")
    @classmethod
    def check_short_text(cls, v: str, info) -> str:
        return _check_length(v, info.field_name.capitalize(), 2, 200)

    @field_validator("date")
    @classmethod
    def check_date(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("date_required", "Date is required")
        if not DATE_PATTERN.match(v):
            raise PydanticCustomError("date_format", "Date must be in YYYY-MM-DD format")
        try:
            event_date = date.fromisoformat(v)
        except ValueError:
            raise PydanticCustomError("date_invalid", "Date must be a valid calendar date")
        if event_date < date.today():
            raise PydanticCustomError("date_past", "Event date cannot be in the past")
        return v

    @field_validator("time")
    @classmethod
    def check_time(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("time_required", "Time is required")
        if not TIME_PATTERN.match(v):
            raise PydanticCustomError("time_format", "Time must be in HH:MM format")
        return v

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            if v not in EventMode.__members__:
                raise PydanticCustomError(
                    "mode_invalid", "Mode must be online, offline, or hybrid"
                )
        return v

    @field_validator("agenda")
    @classmethod
    def check_agenda(cls, v: List[str]) -> List[str]:
        return _check_items(v, "Agenda item", "agenda item", MAX_AGENDA_ITEMS)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: List[str]) -> List[str]:
        return _check_items(v, "Tag", "tag", MAX_TAGS)


class CreateBookingInput(BaseModel):
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("email_required", "Email is required")
        if not EMAIL_PATTERN.match(v):
            raise PydanticCustomError("email_format", "Invalid email format")
        return v


class EventDTO(BaseModel):
    """Public-facing event data."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: EventMode
    audience: str
    agenda: List[str]
    organizer: str
    tags: List[str]
    created_at: datetime
    updated_at: datetime


class EventsListDTO(BaseModel):
    events: List[EventDTO]
    total: int


class BookingDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    event_id: str
    email: str
    created_at: datetime


class BookingCountDTO(BaseModel):
    event_id: str
    count: int
