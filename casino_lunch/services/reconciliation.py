"""
Reconciliation engine
Commits the pending selections into persisted reservations

Per pending day there are three cases:
- no row for that day: insert a new confirmed row
- a cancelled row: reactivate it with the pending menu (never a second row)
- a confirmed row: the reactivation update re-asserts the pending menu

Algorithm:
1. re-validate every pending day against the date rules (no gateway call on failure)
2. one batched reactivation update per menu type group
3. one batched insert of every pending row; duplicate-key rejections are
   expected and swallowed by retrying the batch row by row
4. refetch the confirmed store, then clear the pending store; a failed
   refetch keeps the pending store so the user can retry; when the session
   changed while writing, the refetch is skipped and the pending store, which
   now belongs to the new session, is left alone
"""

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, List, Optional

from ..core.exceptions import (
    DuplicateKeyError,
    PersistenceError,
    SessionRequiredError,
    ValidationError,
)
from ..gateways.base import PersistenceGateway
from ..models import (
    MenuType,
    NewReservation,
    PendingSelection,
    ReservationFilter,
    ReservationStatus,
)
from ..utils.dates import to_ymd
from . import date_rules
from .pending_store import PendingSelectionStore
from .reservation_store import ConfirmedReservationStore

logger = logging.getLogger(__name__)


def group_by_menu(selections: List[PendingSelection]) -> Dict[MenuType, List[date]]:
    """Partition pending selections into menu type -> days"""
    groups: Dict[MenuType, List[date]] = defaultdict(list)
    for selection in selections:
        groups[selection.menu_type].append(selection.date)
    return dict(groups)


class ReconciliationEngine:
    """Turns a batch of pending selections into confirmed reservations"""

    def __init__(self, pending: PendingSelectionStore,
                 store: ConfirmedReservationStore,
                 gateway: PersistenceGateway):
        self.pending = pending
        self.store = store
        self.gateway = gateway

    async def confirm(self, now: Optional[datetime] = None) -> int:
        """
        Commit every pending selection

        Args:
            now: decision instant for the date rules, wall clock when omitted

        Returns:
            int: number of committed selections, 0 when nothing was pending

        Raises:
            ValidationError: a pending day is no longer selectable
            SessionRequiredError: no owner is loaded in the confirmed store
            PersistenceError: reactivation, insert or refetch failed
        """
        selections = self.pending.selections
        if not selections:
            return 0

        owner_id = self.store.owner_id
        if owner_id is None:
            raise SessionRequiredError()

        self._validate(selections, now)

        epoch = self.store.epoch
        await self._reactivate(owner_id, selections)
        inserted = await self._insert(owner_id, selections)

        if await self.store.refetch(owner_id, epoch):
            self.pending.clear()

        await self._log(owner_id, selections, inserted)
        return len(selections)

    def _validate(self, selections: List[PendingSelection], now: Optional[datetime]) -> None:
        rejected = {}
        for s in selections:
            reason = date_rules.rejection_reason(s.date, now)
            if reason is not None:
                rejected[to_ymd(s.date)] = reason
        if rejected:
            first = next(iter(rejected.values()))
            raise ValidationError(first, "DATE_NOT_SELECTABLE", {"dates": rejected})

    async def _reactivate(self, owner_id: str, selections: List[PendingSelection]) -> None:
        for menu_type, days in group_by_menu(selections).items():
            affected = await self.gateway.update_reservation_status(
                ReservationFilter(
                    owner_id=owner_id,
                    dates=days,
                    statuses=[ReservationStatus.CANCELLED, ReservationStatus.CONFIRMED],
                ),
                ReservationStatus.CONFIRMED,
                menu_type=menu_type,
            )
            logger.debug("Reactivated %s %s reservation(s) for %s",
                         affected, menu_type.value, owner_id)

    async def _insert(self, owner_id: str, selections: List[PendingSelection]) -> int:
        rows = [
            NewReservation(owner_id=owner_id, date=s.date, menu_type=s.menu_type)
            for s in selections
        ]
        try:
            await self.gateway.insert_reservations(rows)
            return len(rows)
        except DuplicateKeyError:
            logger.debug("Batch insert hit existing rows, inserting one by one")

        inserted = 0
        for row in rows:
            try:
                await self.gateway.insert_reservations([row])
                inserted += 1
            except DuplicateKeyError:
                logger.debug("Reservation for %s already exists", to_ymd(row.date))
        return inserted

    async def _log(self, owner_id: str, selections: List[PendingSelection],
                   inserted: int) -> None:
        detail = {
            "dates": [to_ymd(s.date) for s in selections],
            "menus": {to_ymd(s.date): s.menu_type.value for s in selections},
            "inserted": inserted,
            "reactivated": len(selections) - inserted,
        }
        logger.info("Confirmed %s reservation(s) for %s", len(selections), owner_id)
        try:
            await self.gateway.log_action(owner_id, "reservation_confirm", detail)
        except PersistenceError as e:
            logger.warning("Failed to write audit log reservation_confirm: %s", e.message)
