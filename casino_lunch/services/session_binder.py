"""
Session binder
Keeps the reservation stores in step with the identity provider session

States: loading (initial) -> authenticated | anonymous. Every session-change
notification is re-evaluated; a present session refetches the owner's
reservations, an absent one clears both stores without any gateway call.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from ..core.events import Observable
from ..core.exceptions import PersistenceError
from ..gateways.base import IdentityGateway
from ..models import Session
from .pending_store import PendingSelectionStore
from .reservation_store import ConfirmedReservationStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """Session binder state"""
    ANONYMOUS = "anonymous"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


class SessionBinder(Observable):
    """Drives the confirmed and pending stores from session-change events"""

    def __init__(self, identity: IdentityGateway,
                 store: ConfirmedReservationStore,
                 pending: PendingSelectionStore):
        super().__init__()
        self.identity = identity
        self.store = store
        self.pending = pending
        self.state = SessionState.LOADING
        self.session: Optional[Session] = None
        self.last_error: Optional[PersistenceError] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def owner_id(self) -> Optional[str]:
        return self.session.owner_id if self.session else None

    async def start(self) -> SessionState:
        """Register for session changes and evaluate the current session"""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.on_session_change(self.handle_session_change)
        await self.handle_session_change(await self.identity.get_current_session())
        return self.state

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def handle_session_change(self, session: Optional[Session]) -> None:
        if session is None:
            self._to_anonymous()
            return

        previous_owner = self.owner_id
        if previous_owner is not None and previous_owner != session.owner_id:
            # A different employee takes over this client
            self.store.clear()
            self.pending.clear()

        self.session = session
        self.state = SessionState.AUTHENTICATED
        self.last_error = None
        self._notify()

        try:
            await self.store.fetch_all(session.owner_id)
        except PersistenceError as e:
            logger.warning("Failed to load reservations for %s: %s", session.owner_id, e.message)
            if self.owner_id != session.owner_id:
                # Another session took over while the load was in flight
                return
            self.last_error = e
            self._notify()

    def _to_anonymous(self) -> None:
        self.session = None
        self.state = SessionState.ANONYMOUS
        self.last_error = None
        self.store.clear()
        self.pending.clear()
        self._notify()
