"""
Confirmed reservation routes
Listing by period, single cancel, period cancel and menu changes
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.exceptions import ReservationLockedError, ReservationNotFoundError
from ...models import MenuType, ViewType
from ...schemas.reservation import (
    CancelPeriodRequest,
    CancelPeriodResponse,
    MenuUpdateRequest,
    ReservationListResponse,
    ReservationResponse,
)
from ...services import ReservationWorkspace
from ...services.workspace import period_range
from ..deps import get_workspace

router = APIRouter()


def _require(workspace: ReservationWorkspace, reservation_id: str):
    reservation = workspace.reservations.get(reservation_id)
    if reservation is None:
        raise ReservationNotFoundError(reservation_id)
    return reservation


def _to_response(workspace: ReservationWorkspace, reservation) -> ReservationResponse:
    return ReservationResponse.from_reservation(
        reservation, workspace.reservations.can_modify(reservation.id)
    )


@router.get("", response_model=ReservationListResponse)
async def list_reservations(
    view: Optional[ViewType] = Query(None, description="week or month; all rows when omitted"),
    anchor: Optional[date] = Query(None, description="Any day of the period, defaults to today"),
    menu: Optional[MenuType] = Query(None, description="Only this menu type"),
    workspace: ReservationWorkspace = Depends(get_workspace),
):
    """
    Reservations of the signed-in owner

    With a view only confirmed rows inside the period are returned, otherwise
    every row (cancelled included) ordered by date.
    """
    if view is not None:
        rows = workspace.reservations_for_period(view, anchor or date.today(), menu)
    else:
        rows = [r for r in workspace.reservations.reservations
                if menu is None or r.menu_type == menu]
    items = [_to_response(workspace, r) for r in rows]
    return ReservationListResponse(items=items, total=len(items))


@router.post("/cancel-period", response_model=CancelPeriodResponse)
async def cancel_period(req: CancelPeriodRequest,
                        workspace: ReservationWorkspace = Depends(get_workspace)):
    """Cancel every confirmed reservation of the week or month"""
    start, end = period_range(req.view, req.anchor)
    cancelled = await workspace.cancel_period(req.view, req.anchor)
    return CancelPeriodResponse(cancelled=cancelled, start=start, end=end)


@router.get("/{reservation_id}", response_model=ReservationResponse)
async def get_reservation(reservation_id: str,
                          workspace: ReservationWorkspace = Depends(get_workspace)):
    return _to_response(workspace, _require(workspace, reservation_id))


@router.post("/{reservation_id}/cancel", response_model=ReservationResponse)
async def cancel_reservation(reservation_id: str,
                             workspace: ReservationWorkspace = Depends(get_workspace)):
    """Soft-delete a reservation; the row stays with status cancelled"""
    await workspace.reservations.cancel(reservation_id)
    return _to_response(workspace, _require(workspace, reservation_id))


@router.patch("/{reservation_id}/menu", response_model=ReservationResponse)
async def update_reservation_menu(reservation_id: str, req: MenuUpdateRequest,
                                  workspace: ReservationWorkspace = Depends(get_workspace)):
    store = workspace.reservations
    _require(workspace, reservation_id)
    if not await store.update_menu(reservation_id, req.menu_type):
        raise ReservationLockedError(reservation_id)
    return _to_response(workspace, _require(workspace, reservation_id))
