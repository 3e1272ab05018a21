"""
Domain data models.
"""

from .reservation import (
    CalendarDay,
    MenuType,
    NewReservation,
    PendingSelection,
    Reservation,
    ReservationFilter,
    ReservationStatus,
    ViewType,
)
from .profile import Profile, ProfileAttributes
from .session import Session, SessionUser

__all__ = [
    "CalendarDay",
    "MenuType",
    "NewReservation",
    "PendingSelection",
    "Reservation",
    "ReservationFilter",
    "ReservationStatus",
    "ViewType",
    "Profile",
    "ProfileAttributes",
    "Session",
    "SessionUser",
]
