"""Shared test fixtures for brt."""

from collections.abc import Iterator

import pytest

from brt.errors import EnumerationError, ProcessReadError
from brt.models import ProcessRecord, RawProcess, Snapshot


class FakeHandle:
    """Handle returning a prepared RawProcess, or failing like a dead process."""

    def __init__(self, raw: RawProcess, error: str | None = None) -> None:
        self.pid = raw.pid
        self._raw = raw
        self._error = error

    def read(self) -> RawProcess:
        if self._error is not None:
            raise ProcessReadError(self.pid, self._error)
        return self._raw


class FakeEnumerator:
    """Scriptable process table with a controllable clock."""

    def __init__(self, processes: list[RawProcess] | None = None, cores: int = 1) -> None:
        self.processes_list: list[RawProcess] = list(processes or [])
        self.failing: dict[int, str] = {}
        self.broken = False
        self.cores = cores
        self.clock = 1000.0
        self.calls = 0

    def processes(self) -> Iterator[FakeHandle]:
        self.calls += 1
        if self.broken:
            raise EnumerationError("/proc is gone")
        return iter([FakeHandle(raw, self.failing.get(raw.pid)) for raw in self.processes_list])

    def cpu_count(self) -> int:
        return self.cores

    def now(self) -> float:
        return self.clock


def make_raw(
    pid: int = 100,
    name: str = "test",
    cmdline: list[str] | None = None,
    threads: int = 1,
    memory: int = 4096,
    username: str | None = "user",
    cpu_time: float = 0.0,
    start_time: float = 900.0,
    ppid: int = 1,
) -> RawProcess:
    """Create a RawProcess for testing."""
    return RawProcess(
        pid=pid,
        ppid=ppid,
        name=name,
        cmdline=[f"/bin/{name}"] if cmdline is None else cmdline,
        threads=threads,
        memory=memory,
        username=username,
        cpu_time=cpu_time,
        start_time=start_time,
    )


def make_record(
    pid: int = 100,
    name: str | None = None,
    command: str | None = None,
    threads: int = 1,
    cpu: float = 0.0,
    user: str = "user",
    memory: int = 4096,
) -> ProcessRecord:
    """Create a ProcessRecord for testing."""
    name = name if name is not None else f"proc{pid}"
    return ProcessRecord(
        pid=pid,
        ppid=1,
        name=name,
        command=command if command is not None else f"/bin/{name}",
        threads=threads,
        user=user,
        memory=memory,
        cpu=cpu,
        history=(0.0,) * 9 + (cpu,),
        graph="     ",
    )


def make_snapshot(*records: ProcessRecord, sequence: int = 1) -> Snapshot:
    return Snapshot.from_records(list(records), timestamp=1000.0, sequence=sequence)


@pytest.fixture
def enumerator() -> FakeEnumerator:
    """A fake enumerator with three processes."""
    return FakeEnumerator(
        [
            make_raw(pid=1, name="init", cpu_time=10.0, start_time=0.0),
            make_raw(pid=200, name="bash", cpu_time=5.0, start_time=500.0),
            make_raw(pid=300, name="python", cpu_time=50.0, start_time=900.0),
        ]
    )


@pytest.fixture
def isolated_logging(monkeypatch, tmp_path):
    """Point BRT_DATA at a temp dir and undo logging configuration afterwards."""
    import logging

    import structlog

    monkeypatch.setenv("BRT_DATA", str(tmp_path))
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield tmp_path
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
