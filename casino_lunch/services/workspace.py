"""
Reservation workspace
Per-client composition of the reservation engine over injected gateways

Main features:
- wires the pending store, confirmed store, reconciler and session binder
- calendar click flow with the date rules checked at the moment of the click
- week / month calendar grids and period listings (Monday-start weeks)
- period cancel and selection summary
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Tuple

from ..core.exceptions import ValidationError
from ..core.security import SecurityManager, security_manager
from ..gateways.base import IdentityGateway, PersistenceGateway
from ..models import CalendarDay, MenuType, Reservation, ViewType
from ..utils.dates import DateLike, as_date, iter_days, month_grid_range, month_range, week_range
from . import date_rules
from .pending_store import PendingSelectionStore
from .reconciliation import ReconciliationEngine
from .reservation_store import ConfirmedReservationStore
from .session_binder import SessionBinder, SessionState

logger = logging.getLogger(__name__)

ALREADY_RESERVED_MESSAGE = "Ya tienes una reserva confirmada para este día"


def period_range(view: ViewType, anchor: DateLike) -> Tuple[date, date]:
    """Inclusive date range shown for ``view`` around ``anchor``"""
    if ViewType(view) == ViewType.WEEK:
        return week_range(anchor)
    return month_range(anchor)


class ReservationWorkspace:
    """Everything one signed-in client works with"""

    def __init__(self, identity: IdentityGateway, persistence: PersistenceGateway):
        self.identity = identity
        self.persistence = persistence
        self.pending = PendingSelectionStore()
        self.reservations = ConfirmedReservationStore(persistence)
        self.reconciler = ReconciliationEngine(self.pending, self.reservations, persistence)
        self.binder = SessionBinder(identity, self.reservations, self.pending)

    async def start(self) -> SessionState:
        return await self.binder.start()

    def stop(self) -> None:
        self.binder.stop()

    @property
    def state(self) -> SessionState:
        return self.binder.state

    @property
    def owner_id(self) -> Optional[str]:
        return self.binder.owner_id

    # Pending selection

    def _ensure_available(self, day: DateLike, now: Optional[datetime]) -> None:
        date_rules.ensure_selectable(day, now)
        existing = self.reservations.find_by_date(day)
        if existing is not None and existing.is_active:
            raise ValidationError(
                ALREADY_RESERVED_MESSAGE,
                "DATE_ALREADY_RESERVED",
                {"date": as_date(day).isoformat(), "reservation_id": existing.id},
            )

    def select_date(self, day: DateLike, menu_type: MenuType = MenuType.NORMAL,
                    now: Optional[datetime] = None) -> bool:
        """Calendar click; returns True when the day ends up selected"""
        self._ensure_available(day, now)
        return self.pending.toggle(day, menu_type)

    def add_selection(self, day: DateLike, menu_type: MenuType = MenuType.NORMAL,
                      now: Optional[datetime] = None) -> None:
        self._ensure_available(day, now)
        self.pending.add(day, menu_type)

    def change_selection_menu(self, day: DateLike, menu_type: MenuType) -> bool:
        if not self.pending.contains(day):
            return False
        self.pending.update_menu(day, menu_type)
        return True

    def remove_selection(self, day: DateLike) -> None:
        self.pending.remove(day)

    def reset(self) -> None:
        """Discard the whole pending selection"""
        self.pending.clear()

    def summary(self) -> Dict[str, int]:
        counts = self.pending.count_by_menu()
        return {
            "total": len(self.pending),
            "normal": counts[MenuType.NORMAL],
            "hipocaloric": counts[MenuType.HIPOCALORIC],
        }

    async def confirm(self, now: Optional[datetime] = None) -> int:
        return await self.reconciler.confirm(now)

    # Calendar

    def calendar(self, view: ViewType, anchor: DateLike,
                 now: Optional[datetime] = None) -> List[CalendarDay]:
        """Selection calendar cells for a week or a whole-week month grid"""
        now = now or datetime.now()
        if ViewType(view) == ViewType.WEEK:
            start, end = week_range(anchor)
            month = None
        else:
            start, end = month_grid_range(anchor)
            month = as_date(anchor).month

        days = []
        for day in iter_days(start, end):
            existing = self.reservations.find_by_date(day)
            reserved = existing is not None and existing.is_active
            reason = date_rules.rejection_reason(day, now)
            days.append(CalendarDay(
                date=day,
                selectable=reason is None and not reserved,
                selected=self.pending.contains(day),
                menu_type=self.pending.menu_for(day),
                reserved=reserved,
                in_period=month is None or day.month == month,
                reason=reason or (ALREADY_RESERVED_MESSAGE if reserved else None),
            ))
        return days

    # Confirmed reservations

    def reservations_for_period(self, view: ViewType, anchor: DateLike,
                                menu_type: Optional[MenuType] = None) -> List[Reservation]:
        start, end = period_range(view, anchor)
        return self.reservations.confirmed_in_range(start, end, menu_type)

    async def cancel_period(self, view: ViewType, anchor: DateLike) -> int:
        start, end = period_range(view, anchor)
        return await self.reservations.cancel_in_range(start, end)

    async def sign_out(self) -> None:
        await self.identity.sign_out()


class WorkspaceRegistry:
    """One workspace per signed-in owner, shared by the HTTP handlers"""

    def __init__(self, persistence: PersistenceGateway,
                 identity_factory: Callable[[], IdentityGateway],
                 security: SecurityManager = None):
        self.persistence = persistence
        self.identity_factory = identity_factory
        self.security = security or security_manager
        self._workspaces: Dict[str, ReservationWorkspace] = {}
        self._lock = asyncio.Lock()

    def get(self, owner_id: str) -> Optional[ReservationWorkspace]:
        return self._workspaces.get(owner_id)

    async def adopt(self, identity: IdentityGateway) -> ReservationWorkspace:
        """Bind a workspace to an identity gateway that already holds a session"""
        session = await identity.get_current_session()
        async with self._lock:
            workspace = self._workspaces.get(session.owner_id) if session else None
            if workspace is None:
                workspace = ReservationWorkspace(identity, self.persistence)
                await workspace.start()
                if session is not None:
                    self._workspaces[session.owner_id] = workspace
            return workspace

    async def for_token(self, token: str) -> ReservationWorkspace:
        """Workspace of the bearer token's owner, restoring the session if needed"""
        owner_id = self.security.get_user_id_from_token(token)
        workspace = self._workspaces.get(owner_id)
        if workspace is not None:
            return workspace

        identity = self.identity_factory()
        await identity.restore_session(token)
        return await self.adopt(identity)

    async def discard(self, owner_id: str) -> None:
        async with self._lock:
            workspace = self._workspaces.pop(owner_id, None)
        if workspace is not None:
            await workspace.sign_out()
            workspace.stop()
            logger.info("Workspace for %s discarded", owner_id)
