"""Background process sampler for brt."""

import threading
from collections.abc import Sequence

from brt.channel import LatestChannel
from brt.enumerator import ProcessEnumerator, PsutilEnumerator
from brt.errors import EnumerationError, ProcessReadError
from brt.estimator import (
    DEFAULT_HISTORY_LENGTH,
    DEFAULT_THRESHOLDS,
    CpuHistory,
    Sparkline,
    cpu_percent,
)
from brt.logging import get_logger
from brt.models import UNKNOWN_USER, ZOMBIE_COMMAND, ProcessRecord, RawProcess, Snapshot

log = get_logger(__name__)

MIN_INTERVAL = 0.1


class ProcessSampler:
    """
    Periodically samples the process table into immutable Snapshots.

    Runs in a separate daemon thread and publishes every completed pass to a
    latest-wins channel. A process that can't be read is skipped; a pass that
    can't enumerate at all keeps the previous snapshot and publishes nothing.
    """

    def __init__(
        self,
        channel: LatestChannel[Snapshot],
        enumerator: ProcessEnumerator | None = None,
        interval: float = 2.0,
        history_length: int = DEFAULT_HISTORY_LENGTH,
        thresholds: Sequence[float] = DEFAULT_THRESHOLDS,
    ) -> None:
        """
        Initialize the ProcessSampler.

        Args:
            channel: Channel to publish snapshots to.
            enumerator: Process table source. Default reads the local OS.
            interval: Seconds between sampling passes. Default 2.0s.
            history_length: CPU readings kept per process.
            thresholds: Sparkline level boundaries.
        """
        self._channel = channel
        self._enumerator = enumerator if enumerator is not None else PsutilEnumerator()
        self._interval = max(MIN_INTERVAL, interval)
        self._history_length = history_length
        self._sparkline = Sparkline(thresholds)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._previous = Snapshot()
        self._sequence = 0
        self._failures = 0

    @property
    def interval(self) -> float:
        """Get the current sampling interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the sampling interval."""
        self._interval = max(MIN_INTERVAL, value)

    @property
    def is_running(self) -> bool:
        """Check if the sampler thread is running."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def latest(self) -> Snapshot:
        """The last successfully sampled snapshot."""
        return self._previous

    @property
    def consecutive_failures(self) -> int:
        """Passes in a row that could not enumerate processes."""
        return self._failures

    def start(self) -> None:
        """Start the sampling thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._sample_loop,
            daemon=True,
            name="ProcessSampler",
        )
        self._thread.start()
        log.info("sampler_started", interval=self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the sampling thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is None:
            return
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            # Still inside a pass; start() must not spawn a second thread
            log.warning("sampler_stop_timeout", timeout=timeout)
            return
        self._thread = None
        log.info("sampler_stopped", samples=self._sequence)

    def _sample_loop(self) -> None:
        """Main sampling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                snapshot = self.sample_once()
                if snapshot is not None:
                    self._channel.publish(snapshot)
            except Exception:
                log.exception("sample_crashed")

            # Wait for interval seconds or until stop is requested
            self._stop_event.wait(timeout=self._interval)

    def sample_once(self) -> Snapshot | None:
        """
        Run one sampling pass.

        Returns:
            The new Snapshot, or None if the process table could not be
            enumerated, in which case the previous snapshot is kept.
        """
        enumerator = self._enumerator
        try:
            handles = list(enumerator.processes())
        except EnumerationError as e:
            self._failures += 1
            log.warning(
                "enumeration_failed",
                error=str(e),
                consecutive=self._failures,
                kept_sequence=self._previous.sequence,
            )
            return None
        self._failures = 0

        now = enumerator.now()
        cores = enumerator.cpu_count()
        previous = self._previous
        elapsed = now - previous.timestamp
        records: list[ProcessRecord] = []
        skipped = 0

        for handle in handles:
            try:
                raw = handle.read()
            except ProcessReadError as e:
                # Exited mid-pass, access denied or zombie
                skipped += 1
                log.debug("process_read_failed", pid=e.pid, reason=e.reason)
                continue
            records.append(
                self._build_record(raw, previous.get(raw.pid), now, elapsed, cores)
            )

        self._sequence += 1
        snapshot = Snapshot.from_records(records, timestamp=now, sequence=self._sequence)
        self._previous = snapshot
        log.debug(
            "sample_completed",
            sequence=self._sequence,
            processes=len(snapshot),
            skipped=skipped,
        )
        return snapshot

    def _build_record(
        self,
        raw: RawProcess,
        before: ProcessRecord | None,
        now: float,
        elapsed: float,
        cores: int,
    ) -> ProcessRecord:
        """Estimate CPU for raw and carry the history of the same process forward."""
        # A reused pid has a different start time and starts from scratch
        if before is not None and before.start_time == raw.start_time:
            cpu = cpu_percent(raw.cpu_time - before.cpu_time, elapsed, cores, raw.pid)
            history = CpuHistory(self._history_length, before.history)
        else:
            cpu = cpu_percent(raw.cpu_time, now - raw.start_time, cores, raw.pid)
            history = CpuHistory(self._history_length)
        history.push(cpu)
        values = history.values()

        return ProcessRecord(
            pid=raw.pid,
            ppid=raw.ppid,
            name=raw.name,
            command=" ".join(raw.cmdline) if raw.cmdline is not None else ZOMBIE_COMMAND,
            threads=raw.threads,
            user=raw.username or UNKNOWN_USER,
            memory=raw.memory,
            cpu=cpu,
            history=values,
            graph=self._sparkline.encode(values),
            start_time=raw.start_time,
            cpu_time=raw.cpu_time,
        )
