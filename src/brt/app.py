"""brt - Main Textual application."""

import time

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Static

from brt.channel import LatestChannel
from brt.config import Config
from brt.enumerator import ProcessEnumerator
from brt.formatting import (
    format_battery,
    format_clock,
    format_order,
    format_row,
    format_uptime,
)
from brt.logging import get_logger
from brt.models import Snapshot
from brt.readings import read_battery, read_clock, read_uptime
from brt.sampler import ProcessSampler
from brt.table import ProcessTableModel

log = get_logger(__name__)

COLUMNS = [
    ("Pid:", "pid", 8),
    ("Program:", "program", 16),
    ("Command:", "command", None),
    ("Threads:", "threads", 8),
    ("User:", "user", 10),
    ("MemB", "mem", 7),
    ("", "graph", 5),
    ("Cpu%", "cpu", 6),
]


class RateCounter:
    """Counts events and reports them per second, refreshed once a second."""

    def __init__(self) -> None:
        self._count = 0
        self._since = time.monotonic()
        self.per_second = 0.0

    def hit(self) -> None:
        self._count += 1
        now = time.monotonic()
        elapsed = now - self._since
        if elapsed >= 1.0:
            self.per_second = self._count / elapsed
            self._since = now
            self._count = 0


class HeaderBar(Static):
    """Title line with battery, uptime, clock and the active sort order."""

    DEFAULT_CSS = """
    HeaderBar {
        height: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.battery_text = format_battery(None)
        self.uptime_text = format_uptime(None)
        self.clock_text = format_clock(read_clock())
        self.order_text = ""

    def update_readings(self) -> None:
        """Poll battery and uptime and redraw."""
        self.battery_text = format_battery(read_battery())
        self.uptime_text = format_uptime(read_uptime())
        self._redraw()

    def update_clock(self) -> None:
        self.clock_text = format_clock(read_clock())
        self._redraw()

    def update_order(self, label: str) -> None:
        self.order_text = format_order(label)
        self._redraw()

    def _redraw(self) -> None:
        self.update(
            f"[bold]brt[/bold]  {self.battery_text}  "
            f"[dim]{self.uptime_text}[/dim]  {self.clock_text}  [red]{self.order_text}[/red]"
        )


class FooterBar(Static):
    """Position of the selection and, in debug mode, tick and frame rates."""

    DEFAULT_CSS = """
    FooterBar {
        height: 1;
        text-align: right;
    }
    """

    summary = ""

    def show(self, position: str, ticks: float | None = None, frames: float | None = None) -> None:
        if ticks is None or frames is None:
            text = position
        else:
            text = f"[dim]{ticks:.2f} ticks/sec, {frames:.2f} FPS[/dim]  {position}"
        if text != self.summary:
            self.summary = text
            self.update(text)


class ProcessTable(Container):
    """Renders the visible page of a ProcessTableModel."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: round $primary;
    }

    ProcessTable > DataTable {
        overflow-x: hidden;
        overflow-y: hidden;
    }
    """

    def __init__(self, model: ProcessTableModel, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.model = model

    def compose(self) -> ComposeResult:
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        table.can_focus = False
        for label, key, width in COLUMNS:
            table.add_column(label, key=key, width=width)

    def on_resize(self) -> None:
        # One line for the column header
        self.model.set_viewport_height(max(1, self.size.height - 1))
        self.redraw()

    def redraw(self) -> None:
        """Replace the displayed rows with the model's visible page."""
        table = self.query_one("#process-table", DataTable)
        table.clear()
        rows = self.model.visible_rows
        # Text cells so brackets in command lines are not read as markup
        table.add_rows([Text(cell) for cell in format_row(record)] for record in rows)
        if rows:
            table.move_cursor(row=self.model.selected_index - self.model.scroll_offset)


class BrtApp(App):
    """Main brt application."""

    TITLE = "brt"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("escape", "quit", "Quit"),
        ("up", "step(-1)", "Up"),
        ("k", "step(-1)", "Up"),
        ("down", "step(1)", "Down"),
        ("j", "step(1)", "Down"),
        ("pageup", "page(-1)", "Page up"),
        ("pagedown", "page(1)", "Page down"),
        ("left", "previous_order", "Previous order"),
        ("right", "next_order", "Next order"),
    ]

    def __init__(
        self,
        config: Config | None = None,
        enumerator: ProcessEnumerator | None = None,
    ) -> None:
        """Initialize the BrtApp."""
        super().__init__()
        self.config = config or Config()
        self.channel: LatestChannel[Snapshot] = LatestChannel()
        self.sampler = ProcessSampler(
            self.channel,
            enumerator,
            interval=self.config.sampler.interval,
            history_length=self.config.sampler.history_length,
            thresholds=self.config.sampler.thresholds,
        )
        self.model = ProcessTableModel(page_size=self.config.ui.page_size)
        self._ticks = RateCounter()
        self._frames = RateCounter()
        self._dirty = True

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderBar(id="header")
        yield ProcessTable(self.model, id="processes")
        yield FooterBar(id="footer")

    def on_mount(self) -> None:
        """Start the sampler and the render and readings timers."""
        self.sampler.start()
        self.query_one(HeaderBar).update_order(self.model.order_label)
        self.query_one(HeaderBar).update_readings()
        self.set_interval(1.0 / self.config.ui.frame_rate, self._render_tick)
        self.set_interval(1.0, self.query_one(HeaderBar).update_readings)

    def on_unmount(self) -> None:
        self.sampler.stop()

    def _render_tick(self) -> None:
        """Adopt the newest snapshot, if any, and redraw what changed."""
        self._frames.hit()
        self.query_one(HeaderBar).update_clock()
        snapshot = self.channel.poll()
        if snapshot is not None:
            self._ticks.hit()
            self.model.apply_snapshot(snapshot)
            log.debug("snapshot_adopted", sequence=snapshot.sequence, rows=len(snapshot))
            self._dirty = True

        if self._dirty:
            self.query_one(ProcessTable).redraw()
            self._dirty = False
        self._update_footer()

    def _update_footer(self) -> None:
        footer = self.query_one(FooterBar)
        if self.config.ui.debug:
            footer.show(self.model.position, self._ticks.per_second, self._frames.per_second)
        else:
            footer.show(self.model.position)

    def action_step(self, steps: int) -> None:
        """Move the selection by steps rows."""
        self.model.move_selection(steps)
        self._dirty = True

    def action_page(self, direction: int) -> None:
        """Move the selection by one page in direction."""
        if direction < 0:
            self.model.page_up()
        else:
            self.model.page_down()
        self._dirty = True

    def action_next_order(self) -> None:
        self.query_one(HeaderBar).update_order(self.model.next_order().label)
        self._dirty = True

    def action_previous_order(self) -> None:
        self.query_one(HeaderBar).update_order(self.model.previous_order().label)
        self._dirty = True

    async def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self.sampler.stop()
        self.exit()
