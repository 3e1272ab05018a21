"""
Pending selection routes
Chosen-but-unconfirmed days of the signed-in client and their confirmation
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from ...schemas.reservation import (
    ConfirmResponse,
    MenuUpdateRequest,
    PendingItem,
    PendingResponse,
    PendingSelectionRequest,
    PendingSummary,
    ReservationResponse,
    ToggleResponse,
)
from ...services import ReservationWorkspace
from ..deps import get_workspace

router = APIRouter()


def _pending_response(workspace: ReservationWorkspace) -> PendingResponse:
    return PendingResponse(
        items=[PendingItem(date=s.date, menu_type=s.menu_type)
               for s in workspace.pending.selections],
        summary=PendingSummary(**workspace.summary()),
    )


@router.get("", response_model=PendingResponse)
async def list_pending(workspace: ReservationWorkspace = Depends(get_workspace)):
    return _pending_response(workspace)


@router.post("", response_model=PendingResponse)
async def add_pending(req: PendingSelectionRequest,
                      workspace: ReservationWorkspace = Depends(get_workspace)):
    """Add a day (or overwrite its menu) after checking the date rules"""
    workspace.add_selection(req.date, req.menu_type)
    return _pending_response(workspace)


@router.post("/toggle", response_model=ToggleResponse)
async def toggle_pending(req: PendingSelectionRequest,
                         workspace: ReservationWorkspace = Depends(get_workspace)):
    """Calendar click: select the day if absent, unselect it otherwise"""
    selected = workspace.select_date(req.date, req.menu_type)
    response = _pending_response(workspace)
    return ToggleResponse(selected=selected, **response.model_dump())


@router.patch("/{day}", response_model=PendingResponse)
async def change_pending_menu(day: date, req: MenuUpdateRequest,
                              workspace: ReservationWorkspace = Depends(get_workspace)):
    if not workspace.change_selection_menu(day, req.menu_type):
        raise HTTPException(status_code=404, detail="Día no seleccionado")
    return _pending_response(workspace)


@router.delete("/{day}", response_model=PendingResponse)
async def remove_pending(day: date, workspace: ReservationWorkspace = Depends(get_workspace)):
    workspace.remove_selection(day)
    return _pending_response(workspace)


@router.delete("", response_model=PendingResponse)
async def reset_pending(workspace: ReservationWorkspace = Depends(get_workspace)):
    workspace.reset()
    return _pending_response(workspace)


@router.post("/confirm", response_model=ConfirmResponse)
async def confirm_pending(workspace: ReservationWorkspace = Depends(get_workspace)):
    """
    Commit the pending selection

    Cancelled rows for the chosen days are reactivated, the rest inserted.
    On failure the pending selection is kept so the client can retry.
    """
    confirmed = await workspace.confirm()
    store = workspace.reservations
    return ConfirmResponse(
        confirmed=confirmed,
        reservations=[ReservationResponse.from_reservation(r, store.can_modify(r.id))
                      for r in store.reservations],
    )
