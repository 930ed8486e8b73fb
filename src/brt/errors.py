"""Exception types for brt."""


class BrtError(Exception):
    """Base class for brt errors."""


class ProcessReadError(BrtError):
    """A single process could not be read (exited, access denied, zombie)."""

    def __init__(self, pid: int, reason: str) -> None:
        super().__init__(f"Can't read process {pid}: {reason}")
        self.pid = pid
        self.reason = reason


class EnumerationError(BrtError):
    """The process table could not be enumerated at all."""


class StartupError(BrtError):
    """The process table capability is unavailable at startup."""
