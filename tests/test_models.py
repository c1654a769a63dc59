"""
Model tests: slug derivation, date normalization and field validators.
"""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from app.db.models import Booking, Event, normalize_date, slugify
from app.repositories.booking_repository import BookingRepository, EventDoesNotExist
from app.repositories.event_repository import EventRepository


def event_fields(**overrides) -> dict:
    fields = {
        "title": "React Conference 2025",
        "description": "Annual React conference",
        "overview": "Talks and workshops about React",
        "image": "/storage/images/DevEvent/cover.webp",
        "venue": "Convention Center",
        "location": "San Francisco, CA",
        "date": "2030-12-15",
        "time": "09:00",
        "mode": "hybrid",
        "audience": "Frontend developers",
        "agenda": ["Keynote", "Workshops"],
        "organizer": "React Community",
        "tags": ["react", "frontend"],
    }
    fields.update(overrides)
    return fields


# ============================================================================
# Slug derivation
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize("title, slug", [
    ("React Conference 2025", "react-conference-2025"),
    ("Next.js 15 Workshop", "nextjs-15-workshop"),
    ("AI-Powered Web Development", "ai-powered-web-development"),
    ("Modern CSS   and  Tailwind", "modern-css-and-tailwind"),
    ("C++ -- Systems", "c-systems"),
    ("Café Meetup", "caf-meetup"),
])
def test_slugify(title, slug):
    assert slugify(title) == slug


@pytest.mark.unit
def test_slugify_only_symbols_is_empty():
    assert slugify("!!!") == ""


@pytest.mark.unit
def test_title_assignment_sets_slug():
    event = Event(**event_fields(title="  TypeScript Deep Dive  "))

    assert event.title == "TypeScript Deep Dive"
    assert event.slug == "typescript-deep-dive"

    event.title = "TypeScript Deeper Dive"
    assert event.slug == "typescript-deeper-dive"


# ============================================================================
# Date and time normalization
# ============================================================================

@pytest.mark.unit
@pytest.mark.parametrize("value, expected", [
    ("2030-01-05", "2030-01-05"),
    ("2030-01-05T18:30:00Z", "2030-01-05"),
    ("2030-01-05T18:30:00+02:00", "2030-01-05"),
    (date(2030, 1, 5), "2030-01-05"),
    (datetime(2030, 1, 5, 10, 0, tzinfo=timezone.utc), "2030-01-05"),
])
def test_normalize_date(value, expected):
    assert normalize_date(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value", ["next tuesday", "2030-13-01", "", None])
def test_normalize_date_rejects_garbage(value):
    with pytest.raises(ValueError, match="Invalid date format"):
        normalize_date(value)


@pytest.mark.unit
@pytest.mark.parametrize("value", ["9:30", "09:30", "23:59", "00:00"])
def test_event_accepts_valid_times(value):
    assert Event(**event_fields(time=value)).time == value


@pytest.mark.unit
@pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "9.30"])
def test_event_rejects_invalid_times(value):
    with pytest.raises(ValueError, match="HH:MM"):
        Event(**event_fields(time=value))


@pytest.mark.unit
def test_event_mode_is_normalized():
    assert Event(**event_fields(mode=" Online ")).mode == "online"

    with pytest.raises(ValueError, match="online, offline, or hybrid"):
        Event(**event_fields(mode="remote"))


@pytest.mark.unit
@pytest.mark.parametrize("field", ["agenda", "tags"])
def test_event_requires_non_empty_lists(field):
    with pytest.raises(ValueError, match="at least one item"):
        Event(**event_fields(**{field: []}))


@pytest.mark.unit
def test_event_requires_text_fields():
    with pytest.raises(ValueError, match="venue is required"):
        Event(**event_fields(venue="   "))


# ============================================================================
# Booking
# ============================================================================

@pytest.mark.unit
def test_booking_email_is_normalized():
    booking = Booking(event_id="abc", email="  Jane.Smith@Example.COM ")
    assert booking.email == "jane.smith@example.com"


@pytest.mark.unit
@pytest.mark.parametrize("email", ["plainaddress", "a@b", "a b@example.com", ""])
def test_booking_rejects_invalid_email(email):
    with pytest.raises(ValueError):
        Booking(event_id="abc", email=email)


# ============================================================================
# Persistence constraints
# ============================================================================

@pytest.mark.unit
@pytest.mark.asyncio
async def test_slug_is_unique(test_db_session):
    repo = EventRepository(test_db_session)
    first_id = (await repo.create(**event_fields())).id
    await test_db_session.commit()

    with pytest.raises(IntegrityError):
        await repo.create(**event_fields(title="react conference 2025"))
    await test_db_session.rollback()

    assert (await repo.get(first_id)).slug == "react-conference-2025"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_booking_requires_existing_event(test_db_session):
    repo = BookingRepository(test_db_session)

    with pytest.raises(EventDoesNotExist):
        await repo.create(event_id="missing", email="jane@example.com")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_booking_unique_per_event_and_email(test_db_session):
    event = await EventRepository(test_db_session).create(**event_fields())
    event_id = event.id
    bookings = BookingRepository(test_db_session)
    await bookings.create(event_id=event_id, email="jane@example.com")
    await test_db_session.commit()

    with pytest.raises(IntegrityError):
        await bookings.create(event_id=event_id, email="JANE@example.com")
    await test_db_session.rollback()

    assert await bookings.count_by_event(event_id) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_similar_events_share_a_tag(test_db_session):
    repo = EventRepository(test_db_session)
    react = await repo.create(**event_fields())
    await repo.create(**event_fields(title="Next.js Workshop", tags=["nextjs", "react"]))
    await repo.create(**event_fields(title="CSS Day", tags=["css"]))
    await test_db_session.commit()

    similar = await repo.find_sharing_tags(react)

    assert [event.slug for event in similar] == ["nextjs-workshop"]
