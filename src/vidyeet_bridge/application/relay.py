"""Progress relay: hands upload progress to the caller's observer."""

from typing import Iterable, Optional

from vidyeet_bridge.domain.models import ProgressEvent
from vidyeet_bridge.domain.protocols import ProgressObserver
from vidyeet_bridge.shared.logging import get_logger

logger = get_logger(__name__)


class ProgressObserverError(Exception):
    """Raised when the caller's observer fails on an event."""

    def __init__(self, event: ProgressEvent, cause: Exception):
        super().__init__(f"progress observer failed on {event.phase.value}: {cause!r}")
        self.event = event
        self.cause = cause


class ProgressRelay:
    """Delivers events to one observer, one at a time, in the order given.

    Without an observer, events are counted and dropped.
    """

    def __init__(self, observer: Optional[ProgressObserver] = None):
        self._observer = observer
        self.delivered = 0
        self.discarded = 0

    @property
    def has_observer(self) -> bool:
        return self._observer is not None

    def deliver(self, event: ProgressEvent) -> None:
        if self._observer is None:
            self.discarded += 1
            return
        try:
            self._observer(event)
        except Exception as e:
            raise ProgressObserverError(event, e) from e
        self.delivered += 1

    def deliver_all(self, events: Iterable[ProgressEvent]) -> None:
        for event in events:
            self.deliver(event)


def deliver(observer: Optional[ProgressObserver], events: Iterable[ProgressEvent]) -> None:
    """Invoke ``observer`` once per event, in order."""
    ProgressRelay(observer).deliver_all(events)
