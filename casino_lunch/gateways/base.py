"""
Gateway interfaces
Capabilities the reservation engine consumes from the identity provider and
the relational data store. Every call is a coroutine; failures are raised as
AuthError / PersistenceError subclasses.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence, Union

from ..models import (
    MenuType,
    NewReservation,
    Profile,
    Reservation,
    ReservationFilter,
    ReservationStatus,
    Session,
)

SessionListener = Callable[[Optional[Session]], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


class IdentityGateway(Protocol):
    """Identity provider capability"""

    async def get_current_session(self) -> Optional[Session]: ...

    def on_session_change(self, callback: SessionListener) -> Unsubscribe: ...

    async def sign_in(self, email: str, password: str) -> Session: ...

    async def sign_up(self, email: str, password: str,
                      profile_attributes: Dict[str, Any]) -> Session: ...

    async def sign_out(self) -> None: ...

    async def restore_session(self, token: str) -> Session: ...


class PersistenceGateway(Protocol):
    """Relational data store capability"""

    async def select_reservations(self, owner_id: str) -> List[Reservation]: ...

    async def insert_reservations(self, rows: Sequence[NewReservation]) -> None: ...

    async def update_reservation_status(self, filter: ReservationFilter,
                                        new_status: ReservationStatus,
                                        menu_type: Optional[MenuType] = None) -> int: ...

    async def update_reservation_menu(self, filter: ReservationFilter,
                                      new_menu_type: MenuType) -> int: ...

    async def upsert_profile(self, row: Profile) -> None: ...

    async def get_profile(self, owner_id: str) -> Optional[Profile]: ...

    async def log_action(self, owner_id: Optional[str], action: str,
                         detail: Dict[str, Any]) -> None: ...
