"""Data models for brt."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

UNKNOWN_USER = "<unknown>"
ZOMBIE_COMMAND = "<zombie>"


@dataclass(slots=True, frozen=True)
class RawProcess:
    """Accounting fields of one process as read from the OS."""

    pid: int
    ppid: int
    name: str
    cmdline: list[str] | None  # None when the process is gone or hidden
    threads: int
    memory: int  # Resident bytes
    username: str | None
    cpu_time: float  # user + system seconds since process start
    start_time: float  # Epoch seconds


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable view of a process at sample time."""

    pid: int
    ppid: int
    name: str
    command: str
    threads: int
    user: str
    memory: int
    cpu: float  # 0.0 - 100.0, normalized by core count
    history: tuple[float, ...]
    graph: str
    start_time: float = 0.0
    cpu_time: float = 0.0


@dataclass(frozen=True)
class Snapshot(Mapping[int, ProcessRecord]):
    """
    One complete sampling pass, keyed by pid.

    The mapping is read-only; a new pass produces a new Snapshot rather than
    updating an existing one.
    """

    records: Mapping[int, ProcessRecord] = field(default_factory=dict)
    timestamp: float = 0.0
    sequence: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", MappingProxyType(dict(self.records)))

    def __getitem__(self, pid: int) -> ProcessRecord:
        return self.records[pid]

    def __iter__(self) -> Iterator[int]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @classmethod
    def from_records(
        cls, records: list[ProcessRecord], timestamp: float = 0.0, sequence: int = 0
    ) -> "Snapshot":
        """Build a snapshot from a list of records."""
        return cls({record.pid: record for record in records}, timestamp, sequence)
