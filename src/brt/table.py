"""Sorted, navigable process table for brt."""

from collections.abc import Callable
from enum import Enum

from brt.logging import get_logger
from brt.models import ProcessRecord, Snapshot

log = get_logger(__name__)

DEFAULT_PAGE_SIZE = 20


class Order(Enum):
    """Sort keys for the process table, stepped through cyclically."""

    PID = "pid"
    NAME = "name"
    COMMAND = "command"
    THREADS = "threads"
    CPU = "cpu"

    @property
    def label(self) -> str:
        return self.value

    def next(self) -> "Order":
        """The following key, wrapping from the last to the first."""
        keys = list(Order)
        return keys[(keys.index(self) + 1) % len(keys)]

    def previous(self) -> "Order":
        """The preceding key, wrapping from the first to the last."""
        keys = list(Order)
        return keys[(keys.index(self) - 1) % len(keys)]


# Ties fall back to pid so equal keys always sort the same way
_SORT_KEYS: dict[Order, Callable[[ProcessRecord], tuple]] = {
    Order.PID: lambda r: (r.pid,),
    Order.NAME: lambda r: (r.name, r.pid),
    Order.COMMAND: lambda r: (r.command, r.pid),
    Order.THREADS: lambda r: (r.threads, r.pid),
    Order.CPU: lambda r: (r.cpu, r.pid),
}


class ProcessTableModel:
    """
    Owns the sort order and navigation state of the process table.

    Snapshots are replaced wholesale by apply_snapshot(); the selected
    process stays selected across snapshots and reorders while it exists,
    otherwise the selection index is clamped into range.
    """

    def __init__(self, order: Order = Order.PID, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._snapshot = Snapshot()
        self._rows: list[ProcessRecord] = []
        self._order = order
        self._selected = 0
        self._offset = 0
        self._viewport = 0  # 0 until the presentation reports its height
        self._page_size = max(1, page_size)

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def rows(self) -> list[ProcessRecord]:
        """All rows in display order."""
        return list(self._rows)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def order(self) -> Order:
        return self._order

    @property
    def order_label(self) -> str:
        return self._order.label

    @property
    def selected_index(self) -> int:
        """Selected row, 0 when the table is empty."""
        return self._selected

    @property
    def selected_record(self) -> ProcessRecord | None:
        if not self._rows:
            return None
        return self._rows[self._selected]

    @property
    def selected_pid(self) -> int | None:
        record = self.selected_record
        return record.pid if record is not None else None

    @property
    def scroll_offset(self) -> int:
        return self._offset

    @property
    def viewport_height(self) -> int:
        return self._viewport

    @property
    def page_size(self) -> int:
        """Rows moved by a page jump: the viewport height once known."""
        return self._viewport if self._viewport > 0 else self._page_size

    @property
    def visible_rows(self) -> list[ProcessRecord]:
        """The rows currently inside the viewport."""
        if self._viewport <= 0:
            return list(self._rows)
        return self._rows[self._offset : self._offset + self._viewport]

    @property
    def position(self) -> str:
        """'x/y' summary of the selection, '0/0' for an empty table."""
        if not self._rows:
            return "0/0"
        return f"{self._selected + 1}/{len(self._rows)}"

    def apply_snapshot(self, snapshot: Snapshot) -> None:
        """Adopt a new snapshot and re-sort it by the active order."""
        self._snapshot = snapshot
        self._resort()

    def set_order(self, order: Order) -> None:
        """Re-sort by order, keeping the selected process selected."""
        self._order = order
        self._resort()

    def next_order(self) -> Order:
        self.set_order(self._order.next())
        return self._order

    def previous_order(self) -> Order:
        self.set_order(self._order.previous())
        return self._order

    def move_selection(self, steps: int) -> None:
        """
        Move the selection by steps rows, wrapping around both ends.

        Any magnitude and sign is resolved with a single modulo; an empty
        table is left untouched.
        """
        length = len(self._rows)
        if length == 0:
            return
        location = self._selected
        self._selected = (location + steps) % length
        log.debug(
            "selection_moved",
            steps=steps,
            length=length,
            start=location,
            end=self._selected,
        )
        self._scroll_to_selection()

    def page_down(self) -> None:
        self.move_selection(self.page_size)

    def page_up(self) -> None:
        self.move_selection(-self.page_size)

    def set_viewport_height(self, height: int) -> None:
        """Record how many rows the presentation can show."""
        self._viewport = max(0, height)
        self._scroll_to_selection()

    def _resort(self) -> None:
        pid = self.selected_pid
        self._rows = sorted(self._snapshot.values(), key=_SORT_KEYS[self._order])

        if not self._rows:
            self._selected = 0
        elif pid is not None and pid in self._snapshot:
            self._selected = next(i for i, r in enumerate(self._rows) if r.pid == pid)
        else:
            self._selected = min(self._selected, len(self._rows) - 1)
        self._scroll_to_selection()

    def _scroll_to_selection(self) -> None:
        """Shift the scroll offset so the selected row is visible."""
        if self._viewport <= 0:
            self._offset = 0
            return
        if self._selected < self._offset:
            self._offset = self._selected
        elif self._selected >= self._offset + self._viewport:
            self._offset = self._selected - self._viewport + 1
        self._offset = min(self._offset, max(0, len(self._rows) - self._viewport))
