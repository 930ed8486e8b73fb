"""Single-slot hand-off between the sampler thread and the UI."""

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class LatestChannel(Generic[T]):
    """
    Latest-wins channel holding at most one unread value.

    publish() never blocks and replaces any value the consumer has not
    picked up yet; poll() never blocks and empties the slot. The lock is
    only held for the swap of the slot reference.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: T | None = None
        self._pending = False
        self._published = 0
        self._dropped = 0

    def publish(self, value: T) -> None:
        """Store value, discarding any unread predecessor."""
        with self._lock:
            if self._pending:
                self._dropped += 1
            self._value = value
            self._pending = True
            self._published += 1

    def poll(self) -> T | None:
        """Take the pending value, or None if the consumer is caught up."""
        with self._lock:
            if not self._pending:
                return None
            value, self._value = self._value, None
            self._pending = False
        return value

    @property
    def pending(self) -> bool:
        """Whether an unread value is waiting."""
        with self._lock:
            return self._pending

    @property
    def published(self) -> int:
        """Number of values published so far."""
        return self._published

    @property
    def dropped(self) -> int:
        """Number of values replaced before they were read."""
        return self._dropped
