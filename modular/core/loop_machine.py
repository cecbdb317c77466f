"""Loop machine: a stateful step iterator that notifies observers on every advance."""

import enum
import logging
from typing import Any, Iterable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class LoopState(enum.Enum):
    """Lifecycle of a loop machine walk."""
    IDLE = "idle"
    LOOP = "loop"
    FINISHED = "finished"


class Observer(Protocol):
    """Anything that wants to hear about loop machine advances."""

    def on_notify(self, source: Any) -> None:
        ...


class StepIterator(Protocol):
    """A notifying iteration source, as consumed by observers."""

    @property
    def state(self) -> LoopState:
        ...

    @property
    def current(self) -> Any:
        ...

    def attach(self, observer: Observer) -> None:
        ...

    def process(self, sequence: Iterable[Any]) -> None:
        ...


class LoopMachine:
    """
    Walks a sequence one element at a time.

    Observers are notified once when the walk starts (IDLE), once per
    element (LOOP, with ``current`` set) and once when it ends (FINISHED).
    """

    def __init__(self):
        self._observers: List[Observer] = []
        self._state = LoopState.IDLE
        self._current: Optional[Any] = None
        self._processing = False

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def current(self) -> Any:
        """Element the machine is positioned on. Only valid in LOOP state."""
        if self._state is not LoopState.LOOP:
            raise RuntimeError(f"No current element in state {self._state.value}")
        return self._current

    def attach(self, observer: Observer):
        """Register an observer; attaching the same observer twice is a no-op."""
        if observer not in self._observers:
            self._observers.append(observer)
            logger.debug(f"Attached observer {observer!r}")

    def detach(self, observer: Observer):
        """Unregister an observer."""
        if observer in self._observers:
            self._observers.remove(observer)
            logger.debug(f"Detached observer {observer!r}")

    @property
    def observers(self) -> List[Observer]:
        return list(self._observers)

    def notify(self):
        """Notify all observers of the current state."""
        # Snapshot so observers may detach while being notified
        for observer in list(self._observers):
            observer.on_notify(self)

    def process(self, sequence: Iterable[Any]):
        """
        Walk the sequence, notifying observers after each transition.

        Args:
            sequence: Elements to walk, in order

        Raises:
            RuntimeError: If called from within a running walk
        """
        if self._processing:
            raise RuntimeError("Loop machine is already processing")

        self._processing = True
        try:
            self._state = LoopState.IDLE
            self._current = None
            self.notify()

            count = 0
            for element in sequence:
                self._state = LoopState.LOOP
                self._current = element
                count += 1
                self.notify()

            self._state = LoopState.FINISHED
            self._current = None
            logger.debug(f"Loop machine walked {count} elements")
            self.notify()
        finally:
            self._state = LoopState.FINISHED
            self._current = None
            self._processing = False
