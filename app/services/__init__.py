"""
Services package - Business Logic Layer

Contains all business logic separated from HTTP/API concerns.
"""
from app.services.booking_service import BookingService
from app.services.event_service import EventService
from app.services.image_uploader import ImageUploader

__all__ = ["BookingService", "EventService", "ImageUploader"]
