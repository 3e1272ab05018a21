"""
Reservation data models
"""

from pydantic import BaseModel, Field, field_validator
import datetime as dt
from datetime import date, datetime
from typing import Optional
from enum import Enum
from .base import BaseEntity, TimestampMixin
from ..utils.dates import as_date, to_ymd


class MenuType(str, Enum):
    """Menu type enum"""
    NORMAL = "Normal"
    HIPOCALORIC = "Hipocaloric"

    @classmethod
    def _missing_(cls, value):
        # Accented spelling used by the cafeteria staff
        if isinstance(value, str) and value.strip().lower() in ("hipocalórico", "hipocalorico"):
            return cls.HIPOCALORIC
        return None


class ReservationStatus(str, Enum):
    """Reservation status enum"""
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Reservation(BaseEntity, TimestampMixin):
    """Persisted reservation row"""
    id: str = Field(..., description="Reservation ID")
    owner_id: str = Field(..., description="Owning user ID")
    date: dt.date = Field(..., description="Lunch date")
    menu_type: MenuType = Field(..., description="Menu type")
    status: ReservationStatus = Field(..., description="Reservation status")

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.CONFIRMED

    @property
    def ymd(self) -> str:
        return to_ymd(self.date)


class NewReservation(BaseModel):
    """Row sent to the persistence layer on insert"""
    owner_id: str
    date: dt.date
    menu_type: MenuType
    status: ReservationStatus = ReservationStatus.CONFIRMED


class PendingSelection(BaseModel):
    """Chosen but not yet confirmed lunch day"""
    date: dt.date = Field(..., description="Lunch date")
    menu_type: MenuType = Field(MenuType.NORMAL, description="Menu type")

    model_config = {"frozen": True}

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v):
        if isinstance(v, datetime):
            return as_date(v)
        return v


class ReservationFilter(BaseModel):
    """Row filter for reservation updates, always scoped by owner"""
    owner_id: str
    ids: Optional[list[str]] = None
    dates: Optional[list[date]] = None
    statuses: Optional[list[ReservationStatus]] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class ViewType(str, Enum):
    """Calendar / listing period"""
    WEEK = "week"
    MONTH = "month"


class CalendarDay(BaseModel):
    """One cell of the selection calendar"""
    date: dt.date = Field(..., description="Calendar day")
    selectable: bool = Field(..., description="Can be added to the selection")
    selected: bool = Field(False, description="Currently in the pending selection")
    menu_type: Optional[MenuType] = Field(None, description="Pending menu type")
    reserved: bool = Field(False, description="Already has a confirmed reservation")
    in_period: bool = Field(True, description="Belongs to the displayed month")
    reason: Optional[str] = Field(None, description="Why the day is not selectable")
