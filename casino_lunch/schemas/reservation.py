"""
Reservation request/response schemas
"""

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models import CalendarDay, MenuType, Reservation, ReservationStatus, ViewType


class ReservationResponse(BaseModel):
    """Confirmed store row as exposed over HTTP"""
    id: str
    date: dt.date = Field(description="Lunch date (YYYY-MM-DD)")
    menu_type: MenuType
    status: ReservationStatus
    can_modify: bool = Field(description="Outside the 48 hour lockout")
    created_at: Optional[dt.datetime] = None

    @classmethod
    def from_reservation(cls, reservation: Reservation, can_modify: bool) -> "ReservationResponse":
        return cls(
            id=reservation.id,
            date=reservation.date,
            menu_type=reservation.menu_type,
            status=reservation.status,
            can_modify=can_modify,
            created_at=reservation.created_at,
        )


class ReservationListResponse(BaseModel):
    items: List[ReservationResponse]
    total: int


class PendingSelectionRequest(BaseModel):
    """Add or toggle a pending day"""
    date: dt.date = Field(description="Lunch date (YYYY-MM-DD)", examples=["2025-06-10"])
    menu_type: MenuType = Field(MenuType.NORMAL, description="Menu type")


class MenuUpdateRequest(BaseModel):
    menu_type: MenuType = Field(description="New menu type")


class PendingItem(BaseModel):
    date: dt.date
    menu_type: MenuType


class PendingSummary(BaseModel):
    total: int
    normal: int
    hipocaloric: int


class PendingResponse(BaseModel):
    """Current pending selection of the client"""
    items: List[PendingItem]
    summary: PendingSummary


class ToggleResponse(PendingResponse):
    selected: bool = Field(description="Whether the day ended up selected")


class ConfirmResponse(BaseModel):
    confirmed: int = Field(description="Committed selections")
    reservations: List[ReservationResponse]


class CancelPeriodRequest(BaseModel):
    view: ViewType = Field(ViewType.WEEK, description="week or month")
    anchor: dt.date = Field(description="Any day inside the period")


class CancelPeriodResponse(BaseModel):
    cancelled: int
    start: dt.date
    end: dt.date


class CalendarResponse(BaseModel):
    view: ViewType
    start: dt.date
    end: dt.date
    days: List[CalendarDay]
