"""Process table access for brt, backed by psutil."""

import time
from collections.abc import Iterator
from typing import Protocol

import psutil

from brt.errors import EnumerationError, ProcessReadError, StartupError
from brt.models import RawProcess

ATTRS = [
    "pid",
    "ppid",
    "name",
    "cmdline",
    "num_threads",
    "memory_info",
    "username",
    "cpu_times",
    "create_time",
]


class ProcessHandle(Protocol):
    """A process discovered by an enumerator whose details may still fail."""

    pid: int

    def read(self) -> RawProcess:
        """Read accounting fields, raising ProcessReadError on failure."""
        ...


class ProcessEnumerator(Protocol):
    """Pull-style source of process handles."""

    def processes(self) -> Iterator[ProcessHandle]:
        """Yield one handle per visible process, or raise EnumerationError."""
        ...

    def cpu_count(self) -> int: ...

    def now(self) -> float: ...


class PsutilHandle:
    """Handle around a psutil.Process."""

    __slots__ = ("_proc", "pid")

    def __init__(self, proc: psutil.Process) -> None:
        self._proc = proc
        self.pid = proc.pid

    def read(self) -> RawProcess:
        """
        Read one process using the oneshot() context manager.

        Username and command line failures degrade to None; anything that
        prevents reading the basic accounting fields raises ProcessReadError.
        """
        try:
            with self._proc.oneshot():
                info = self._proc.as_dict(attrs=ATTRS, ad_value=None)
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess) as e:
            raise ProcessReadError(self.pid, type(e).__name__) from e
        except OSError as e:
            raise ProcessReadError(self.pid, str(e)) from e

        cpu_times = info.get("cpu_times")
        create_time = info.get("create_time")
        if cpu_times is None or create_time is None:
            raise ProcessReadError(self.pid, "accounting fields unavailable")

        mem_info = info.get("memory_info")
        return RawProcess(
            pid=self.pid,
            ppid=info.get("ppid") or 0,
            name=info.get("name") or "",
            cmdline=info.get("cmdline"),
            threads=info.get("num_threads") or 0,
            memory=mem_info.rss if mem_info else 0,
            username=info.get("username"),
            cpu_time=cpu_times.user + cpu_times.system,
            start_time=create_time,
        )


class PsutilEnumerator:
    """Enumerates the local process table with psutil."""

    def processes(self) -> Iterator[PsutilHandle]:
        try:
            procs = list(psutil.process_iter())
        except (psutil.Error, OSError) as e:
            raise EnumerationError(f"Can't enumerate processes: {e}") from e
        for proc in procs:
            yield PsutilHandle(proc)

    def cpu_count(self) -> int:
        return psutil.cpu_count() or 1

    def now(self) -> float:
        return time.time()


def probe(enumerator: ProcessEnumerator) -> int:
    """
    Check once that the process table can be read at all.

    Returns:
        The number of visible processes.

    Raises:
        StartupError: If enumeration fails.
    """
    try:
        return sum(1 for _ in enumerator.processes())
    except EnumerationError as e:
        raise StartupError(str(e)) from e
