"""SQLAlchemy models for the application."""

import re
from datetime import date, datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import ForeignKey, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from app.db.base import Base, TimestampMixin


EVENT_MODES = ("online", "offline", "hybrid")
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def new_id() -> str:
    return uuid4().hex


def slugify(title: str) -> str:
    """Derive the URL slug for an event title.

    "React Conf 2025!" -> "react-conf-2025"
    """
    slug = title.lower()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"--+", "-", slug)
    return slug.strip()


def normalize_date(value) -> str:
    """Normalize a date (or ISO date/datetime string) to YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value or "").strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        raise ValueError("Invalid date format. Please provide a valid date.")


class Event(Base, TimestampMixin):
    """A schedulable item with title, date, location and metadata.

    The slug is derived from the title every time the title is assigned,
    and date/time/mode are normalized on assignment as well.
    """
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    overview: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(String(1024), nullable=False)
    venue: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    mode: Mapped[str] = mapped_column(String(10), nullable=False)
    audience: Mapped[str] = mapped_column(String(200), nullable=False)
    agenda: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    organizer: Mapped[str] = mapped_column(String(200), nullable=False)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False)

    bookings: Mapped[List["Booking"]] = relationship(
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @validates("title")
    def _set_title(self, key: str, value: str) -> str:
        title = (value or "").strip()
        if not title:
            raise ValueError("Event title is required")
        self.slug = slugify(title)
        return title

    @validates("description", "overview", "image", "venue", "location", "audience", "organizer")
    def _strip_required(self, key: str, value: Optional[str]) -> str:
        text = (value or "").strip()
        if not text:
            raise ValueError(f"Event {key} is required")
        return text

    @validates("date")
    def _normalize_date(self, key: str, value) -> str:
        return normalize_date(value)

    @validates("time")
    def _check_time(self, key: str, value: str) -> str:
        text = (value or "").strip()
        if not TIME_PATTERN.match(text):
            raise ValueError(
                "Invalid time format. Please use HH:MM format (e.g., 09:30 or 14:45)."
            )
        return text

    @validates("mode")
    def _check_mode(self, key: str, value: str) -> str:
        mode = (value or "").strip().lower()
        if mode not in EVENT_MODES:
            raise ValueError("Mode must be either online, offline, or hybrid")
        return mode

    @validates("agenda", "tags")
    def _check_not_empty(self, key: str, value: List[str]) -> List[str]:
        if not isinstance(value, (list, tuple)) or len(value) == 0:
            label = "Agenda" if key == "agenda" else "Tags"
            raise ValueError(f"{label} must contain at least one item")
        return list(value)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug={self.slug})>"


class Booking(Base, TimestampMixin):
    """A record linking an email to an Event."""
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    event_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False)

    event: Mapped[Event] = relationship(back_populates="bookings")

    __table_args__ = (
        # One booking per email per event
        Index("ix_bookings_event_email", "event_id", "email", unique=True),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        email = (value or "").strip().lower()
        if not email:
            raise ValueError("Email is required")
        if not EMAIL_PATTERN.match(email):
            raise ValueError("Please provide a valid email address")
        return email

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, email={self.email})>"
