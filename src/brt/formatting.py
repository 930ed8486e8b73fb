"""Display formatting helpers for brt."""

from datetime import datetime

from brt.models import ProcessRecord
from brt.readings import BatteryReading


def format_bytes(size: int) -> str:
    """Format bytes as a short binary size, e.g. '1.5M'."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:.1f}{unit}" if unit != "B" else f"{size}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_cpu(percent: float) -> str:
    return f"{percent:.2f}"


def format_uptime(seconds: float | None) -> str:
    """Format uptime like 'up 3 days, 04:05:06'."""
    if seconds is None:
        return "up ?"
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if days > 0:
        unit = "day" if days == 1 else "days"
        return f"up {days} {unit}, {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"up {hours:02d}:{minutes:02d}:{secs:02d}"


def format_battery(reading: BatteryReading | None) -> str:
    """Format a battery reading like 'BAT▼ 87% 1:05', time left only when known."""
    if reading is None:
        return "BAT○ --"
    text = f"BAT{reading.state.value} {int(reading.percent)}%"
    if reading.seconds_left is not None:
        hours, rest = divmod(int(reading.seconds_left), 3600)
        text += f" {hours}:{rest // 60:02d}"
    return text


def format_clock(moment: datetime) -> str:
    """Format a time of day with milliseconds, e.g. '14:03:07.250'."""
    return f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}"


def format_order(label: str) -> str:
    return f"< {label} >"


def format_row(record: ProcessRecord) -> tuple[str, ...]:
    """Cells of one process table row, in column order."""
    return (
        str(record.pid),
        record.name,
        record.command,
        str(record.threads),
        record.user,
        format_bytes(record.memory),
        record.graph,
        format_cpu(record.cpu),
    )
