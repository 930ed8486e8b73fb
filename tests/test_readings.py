"""Tests for battery, uptime and clock readings."""

from collections import namedtuple
from datetime import datetime

import psutil

from brt import readings
from brt.readings import BatteryState, read_battery, read_clock, read_uptime

sbattery = namedtuple("sbattery", ["percent", "secsleft", "power_plugged"])


def test_no_battery(monkeypatch):
    monkeypatch.setattr(psutil, "sensors_battery", lambda: None)
    assert read_battery() is None


def test_battery_discharging(monkeypatch):
    monkeypatch.setattr(psutil, "sensors_battery", lambda: sbattery(55.0, 1200, False))

    reading = read_battery()

    assert reading is not None
    assert reading.percent == 55.0
    assert reading.state is BatteryState.DISCHARGING
    assert reading.seconds_left == 1200


def test_battery_charging(monkeypatch):
    monkeypatch.setattr(
        psutil,
        "sensors_battery",
        lambda: sbattery(40.0, psutil.POWER_TIME_UNLIMITED, True),
    )

    reading = read_battery()

    assert reading.state is BatteryState.CHARGING
    assert reading.seconds_left is None


def test_battery_full(monkeypatch):
    monkeypatch.setattr(
        psutil, "sensors_battery", lambda: sbattery(100.0, psutil.POWER_TIME_UNLIMITED, True)
    )
    assert read_battery().state is BatteryState.FULL


def test_battery_unknown_plug_state(monkeypatch):
    monkeypatch.setattr(
        psutil, "sensors_battery", lambda: sbattery(70.0, psutil.POWER_TIME_UNKNOWN, None)
    )
    assert read_battery().state is BatteryState.UNKNOWN


def test_battery_read_error(monkeypatch):
    def broken():
        raise OSError("no sysfs")

    monkeypatch.setattr(psutil, "sensors_battery", broken)
    assert read_battery() is None


def test_uptime_positive():
    uptime = read_uptime()
    assert uptime is not None
    assert uptime > 0


def test_uptime_unavailable(monkeypatch):
    def broken():
        raise OSError("no /proc/stat")

    monkeypatch.setattr(readings.psutil, "boot_time", broken)
    assert read_uptime() is None


def test_clock_is_local_now():
    before = datetime.now()
    moment = read_clock()
    after = datetime.now()

    assert before <= moment <= after
    assert moment.tzinfo is None
