"""
Business logic services.
Reservation engine components and the authentication service.
"""

from .auth_service import AuthService
from .pending_store import PendingSelectionStore
from .reconciliation import ReconciliationEngine
from .reservation_store import ConfirmedReservationStore
from .session_binder import SessionBinder, SessionState
from .workspace import ReservationWorkspace, WorkspaceRegistry

__all__ = [
    "AuthService",
    "PendingSelectionStore",
    "ReconciliationEngine",
    "ConfirmedReservationStore",
    "SessionBinder",
    "SessionState",
    "ReservationWorkspace",
    "WorkspaceRegistry",
]
