"""
Observer registration for UI bindings
"""

from typing import Callable, List


class Observable:
    """Subscribe/notify mixin; listeners receive the observable itself"""

    def __init__(self):
        self._subscribers: List[Callable] = []

    def subscribe(self, listener: Callable) -> Callable[[], None]:
        """Register a listener, returns the unsubscribe handle"""
        self._subscribers.append(listener)

        def unsubscribe():
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._subscribers):
            listener(self)
