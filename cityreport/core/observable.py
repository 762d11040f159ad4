"""
CityReport - Observable State
A single-value cell the UI layer subscribes to instead of passing callbacks
down through every component.
"""

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateCell(Generic[T]):
    """
    Holds one value and notifies subscribers when it changes.

    Usage:
        cell = StateCell(0.0)
        unsubscribe = cell.subscribe(lambda value: print(value))
        cell.set(0.5)
        unsubscribe()
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Store a new value and notify subscribers if it differs."""
        if value == self._value:
            return
        self._value = value
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"State subscriber failed: {e}")

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a callback invoked with every new value.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
