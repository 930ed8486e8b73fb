"""Single-value system readings shown in the brt header."""

import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

import psutil


class BatteryState(Enum):
    """Charging state of the battery."""

    CHARGING = "▲"
    DISCHARGING = "▼"
    FULL = "■"
    UNKNOWN = "○"


@dataclass(slots=True, frozen=True)
class BatteryReading:
    """Battery charge at one point in time."""

    percent: float
    state: BatteryState
    seconds_left: int | None  # None when unknown or on AC power


def read_battery() -> BatteryReading | None:
    """Read the first battery, or None on machines without one."""
    try:
        battery = psutil.sensors_battery()
    except (AttributeError, NotImplementedError, OSError):
        # sensors_battery is missing on some platforms
        return None
    if battery is None:
        return None

    if battery.power_plugged is None:
        state = BatteryState.UNKNOWN
    elif battery.power_plugged:
        state = BatteryState.FULL if battery.percent >= 100 else BatteryState.CHARGING
    else:
        state = BatteryState.DISCHARGING

    secsleft = battery.secsleft
    if secsleft in (psutil.POWER_TIME_UNKNOWN, psutil.POWER_TIME_UNLIMITED):
        secsleft = None
    return BatteryReading(percent=float(battery.percent), state=state, seconds_left=secsleft)


def read_uptime() -> float | None:
    """Seconds since boot, or None if the boot time can't be read."""
    try:
        boot_time = psutil.boot_time()
    except (psutil.Error, OSError):
        return None
    return max(0.0, time.time() - boot_time)


def read_clock() -> datetime:
    """Local wall-clock time."""
    return datetime.now()
