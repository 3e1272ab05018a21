"""
Selection calendar route
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...models import ViewType
from ...schemas.reservation import CalendarResponse
from ...services import ReservationWorkspace
from ..deps import get_workspace

router = APIRouter()


@router.get("", response_model=CalendarResponse)
async def get_calendar(
    view: ViewType = Query(ViewType.WEEK, description="week or month"),
    anchor: Optional[date] = Query(None, description="Any day of the period, defaults to today"),
    workspace: ReservationWorkspace = Depends(get_workspace),
):
    """
    Calendar cells for the week (Monday first) or the month grid

    Each cell tells whether the day can be selected, and why not otherwise.
    """
    days = workspace.calendar(view, anchor or date.today())
    return CalendarResponse(view=view, start=days[0].date, end=days[-1].date, days=days)
