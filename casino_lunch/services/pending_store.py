"""
Pending selection store
In-memory workspace of lunch days chosen but not yet confirmed

The store holds at most one entry per calendar day and never validates dates;
callers consult the date rules before adding.
"""

from datetime import date
from typing import Dict, List, Optional

from ..core.events import Observable
from ..models import MenuType, PendingSelection
from ..utils.dates import DateLike, as_date


class PendingSelectionStore(Observable):
    """Day -> menu type mapping for the current editing session"""

    def __init__(self):
        super().__init__()
        self._entries: Dict[date, MenuType] = {}

    def add(self, day: DateLike, menu_type: MenuType = MenuType.NORMAL) -> None:
        """Insert or overwrite the entry for ``day``"""
        self._entries[as_date(day)] = MenuType(menu_type)
        self._notify()

    def remove(self, day: DateLike) -> None:
        if self._entries.pop(as_date(day), None) is not None:
            self._notify()

    def update_menu(self, day: DateLike, menu_type: MenuType) -> None:
        key = as_date(day)
        if key in self._entries:
            self._entries[key] = MenuType(menu_type)
            self._notify()

    def toggle(self, day: DateLike, menu_type: MenuType = MenuType.NORMAL) -> bool:
        """Calendar click: deselect a selected day, select it otherwise.

        Returns True when the day ends up selected.
        """
        if self.contains(day):
            self.remove(day)
            return False
        self.add(day, menu_type)
        return True

    def clear(self) -> None:
        if self._entries:
            self._entries.clear()
            self._notify()

    def contains(self, day: DateLike) -> bool:
        return as_date(day) in self._entries

    def menu_for(self, day: DateLike) -> Optional[MenuType]:
        return self._entries.get(as_date(day))

    @property
    def selections(self) -> List[PendingSelection]:
        """Snapshot sorted by date"""
        return [
            PendingSelection(date=day, menu_type=menu)
            for day, menu in sorted(self._entries.items())
        ]

    def count_by_menu(self) -> Dict[MenuType, int]:
        counts = {menu: 0 for menu in MenuType}
        for menu in self._entries.values():
            counts[menu] += 1
        return counts

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
