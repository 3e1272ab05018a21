"""
Confirmed reservation store
In-memory mirror of the signed-in owner's reservation rows

Consistency rules:
- the persistence gateway is the source of truth; every mutation awaits its
  write and is followed by a full refetch instead of local patching
- each fetch takes a token from a monotonically increasing counter and only
  the most recently initiated fetch may replace the mirror
- a failed fetch leaves the mirror at its last known-good value
- clear() starts a new session epoch; the trailing refetch of a write begun
  in an earlier epoch is skipped so a previous owner never reappears
"""

import logging
from datetime import datetime
from typing import List, Optional

from ..core.events import Observable
from ..core.exceptions import (
    PersistenceError,
    ReservationNotFoundError,
    SessionRequiredError,
)
from ..gateways.base import PersistenceGateway
from ..models import (
    MenuType,
    Reservation,
    ReservationFilter,
    ReservationStatus,
)
from ..utils.dates import DateLike, as_date, to_ymd
from . import date_rules

logger = logging.getLogger(__name__)


class ConfirmedReservationStore(Observable):
    """Authoritative reservation mirror for one owner"""

    def __init__(self, gateway: PersistenceGateway):
        super().__init__()
        self.gateway = gateway
        self._owner_id: Optional[str] = None
        self._reservations: List[Reservation] = []
        self._latest_token = 0
        self._epoch = 0

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    @property
    def epoch(self) -> int:
        """Session epoch, bumped by every clear()"""
        return self._epoch

    @property
    def reservations(self) -> List[Reservation]:
        return list(self._reservations)

    def _require_owner(self) -> str:
        if self._owner_id is None:
            raise SessionRequiredError()
        return self._owner_id

    async def fetch_all(self, owner_id: str) -> List[Reservation]:
        """
        Load every row of ``owner_id`` ordered by date and replace the mirror

        Raises:
            PersistenceError: transport or query failure; mirror untouched
        """
        self._latest_token += 1
        token = self._latest_token

        rows = await self.gateway.select_reservations(owner_id)

        if token != self._latest_token:
            logger.debug("Discarding stale reservation fetch %s (latest %s)",
                         token, self._latest_token)
            return self.reservations

        self._owner_id = owner_id
        self._reservations = sorted(rows, key=lambda r: r.date)
        self._notify()
        return self.reservations

    def is_current(self, owner_id: str, epoch: int) -> bool:
        return self._epoch == epoch and self._owner_id == owner_id

    async def refetch(self, owner_id: str, epoch: int) -> bool:
        """
        Trailing refetch of a write begun in ``epoch``

        Returns False, leaving the mirror alone, when the session changed since
        the write started or a newer fetch superseded this one.
        """
        if not self.is_current(owner_id, epoch):
            logger.info("Skipping refetch for %s: session changed during write", owner_id)
            return False
        await self.fetch_all(owner_id)
        return self.is_current(owner_id, epoch)

    def clear(self) -> None:
        """Forget the mirror without a gateway call; in-flight fetches go stale"""
        self._latest_token += 1
        self._epoch += 1
        self._owner_id = None
        self._reservations = []
        self._notify()

    async def cancel(self, reservation_id: str) -> None:
        """
        Soft-delete one reservation then refetch

        Raises:
            ReservationNotFoundError: no row with this id for the owner
            PersistenceError: update rejected
        """
        owner_id = self._require_owner()
        epoch = self._epoch
        affected = await self.gateway.update_reservation_status(
            ReservationFilter(owner_id=owner_id, ids=[reservation_id]),
            ReservationStatus.CANCELLED,
        )
        if not affected:
            raise ReservationNotFoundError(reservation_id)
        await self._log(owner_id, "reservation_cancel", {"reservation_id": reservation_id})
        await self.refetch(owner_id, epoch)

    async def cancel_in_range(self, start: DateLike, end: DateLike) -> int:
        """Cancel every confirmed row dated within [start, end]; returns the count"""
        owner_id = self._require_owner()
        epoch = self._epoch
        start_day, end_day = as_date(start), as_date(end)
        affected = await self.gateway.update_reservation_status(
            ReservationFilter(
                owner_id=owner_id,
                statuses=[ReservationStatus.CONFIRMED],
                date_from=start_day,
                date_to=end_day,
            ),
            ReservationStatus.CANCELLED,
        )
        await self._log(owner_id, "reservation_cancel_period", {
            "start": to_ymd(start_day),
            "end": to_ymd(end_day),
            "cancelled": affected,
        })
        await self.refetch(owner_id, epoch)
        return affected

    async def update_menu(self, reservation_id: str, menu_type: MenuType,
                          now: Optional[datetime] = None) -> bool:
        """
        Change the menu of a reservation

        Returns False without touching persistence when the row is unknown or
        inside the 48 hour lockout, True once the write and refetch succeed.
        """
        owner_id = self._require_owner()
        epoch = self._epoch
        reservation = self.get(reservation_id)
        if reservation is None or not date_rules.is_modifiable(reservation.date, now):
            return False

        await self.gateway.update_reservation_menu(
            ReservationFilter(owner_id=owner_id, ids=[reservation_id]),
            MenuType(menu_type),
        )
        await self._log(owner_id, "reservation_menu_update", {
            "reservation_id": reservation_id,
            "date": reservation.ymd,
            "from": reservation.menu_type.value,
            "to": MenuType(menu_type).value,
        })
        await self.refetch(owner_id, epoch)
        return True

    def get(self, reservation_id: str) -> Optional[Reservation]:
        for reservation in self._reservations:
            if reservation.id == reservation_id:
                return reservation
        return None

    def find_by_date(self, day: DateLike) -> Optional[Reservation]:
        key = as_date(day)
        for reservation in self._reservations:
            if reservation.date == key:
                return reservation
        return None

    def can_modify(self, reservation_id: str, now: Optional[datetime] = None) -> bool:
        reservation = self.get(reservation_id)
        return reservation is not None and date_rules.is_modifiable(reservation.date, now)

    def confirmed_in_range(self, start: DateLike, end: DateLike,
                           menu_type: Optional[MenuType] = None) -> List[Reservation]:
        """Active reservations within [start, end], optionally of one menu"""
        start_day, end_day = as_date(start), as_date(end)
        return [
            r for r in self._reservations
            if r.is_active
            and start_day <= r.date <= end_day
            and (menu_type is None or r.menu_type == MenuType(menu_type))
        ]

    async def _log(self, owner_id: str, action: str, detail: dict) -> None:
        logger.info("%s owner=%s %s", action, owner_id, detail)
        try:
            await self.gateway.log_action(owner_id, action, detail)
        except PersistenceError as e:
            # Audit trail only; the reservation change already happened
            logger.warning("Failed to write audit log %s: %s", action, e.message)
