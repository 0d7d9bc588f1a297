"""Reactive value container with Qt signal integration.

Observable holds one value and emits its ``changed`` signal whenever the
value is replaced by a different one. The store keeps its whole state in a
single Observable, so subscribers see every state transition exactly once.
"""

from typing import Callable, Generic, Optional, TypeVar

from PySide6.QtCore import QObject, Signal

T = TypeVar("T")


class Observable(QObject, Generic[T]):
    """Reactive value container.

    Example:
        >>> counter = Observable(0)
        >>> unsubscribe = counter.subscribe(lambda val: print(f"New value: {val}"))
        >>> counter.set(5)  # Prints: "New value: 5"
        >>> unsubscribe()
    """

    changed = Signal(object)

    def __init__(self, initial: T, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    def set(self, new_value: T) -> None:
        """Replace the value, emitting ``changed`` only if it differs."""
        if new_value != self._value:
            self._value = new_value
            self.changed.emit(new_value)

    def update(self, fn: Callable[[T], T]) -> None:
        """Replace the value with ``fn(current)`` in one step.

        Example:
            >>> counter = Observable(0)
            >>> counter.update(lambda x: x + 1)
            >>> counter.value  # 1
        """
        self.set(fn(self._value))

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Call ``callback`` with the new value after every change.

        Returns:
            Function that removes the subscription
        """
        self.changed.connect(callback)

        def unsubscribe() -> None:
            self.changed.disconnect(callback)

        return unsubscribe
