"""Collector that runs probes with timeouts and failure isolation.

Each registered probe runs at most once per pass:
- Per-probe timeout (a timed-out probe counts as unavailable)
- Complete failure isolation (one failing probe doesn't affect others)
- Optional parallel fan-out, with results reassembled in registration order

Example usage::

    collector = Collector(timeout=5.0)
    collector.register(SystemProbe())
    collector.register(NvidiaGpuProbe())
    result = collector.collect()
    for failure in result.failures:
        print(failure.note)
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import structlog

from hostdoctor.collector.base import Probe
from hostdoctor.collector.exceptions import ProbeError, ProbeUnavailable
from hostdoctor.models.enums import FailureKind
from hostdoctor.models.sample import ProbeFailure, Sample

log = structlog.get_logger(__name__)

DEFAULT_PROBE_TIMEOUT = 5.0  # seconds per probe


@dataclass
class ProbeOutcome:
    """Result slot for a single probe in a collection pass."""

    probe: str
    """Probe name."""

    samples: List[Sample] = field(default_factory=list)
    """Samples produced (empty on failure)."""

    failure: Optional[ProbeFailure] = None
    """Failure record if the probe produced nothing usable."""

    duration_ms: float = 0.0
    """Wall time spent waiting for the probe."""

    @property
    def ok(self) -> bool:
        """Whether the probe completed without failure."""
        return self.failure is None


@dataclass
class CollectionResult:
    """Ordered outcomes of one collection pass."""

    outcomes: List[ProbeOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def samples(self) -> List[Sample]:
        """All samples, in probe registration order."""
        return [sample for outcome in self.outcomes for sample in outcome.samples]

    @property
    def failures(self) -> List[ProbeFailure]:
        """Failure records, in probe registration order."""
        return [outcome.failure for outcome in self.outcomes if outcome.failure is not None]

    @property
    def probe_names(self) -> List[str]:
        """Names of the probes that were run."""
        return [outcome.probe for outcome in self.outcomes]

    def get_outcome(self, probe: str) -> Optional[ProbeOutcome]:
        """Get the outcome slot for a probe by name."""
        for outcome in self.outcomes:
            if outcome.probe == probe:
                return outcome
        return None


class Collector:
    """Runs registered probes and gathers their samples.

    Registration order is collection order. Probe names must be unique.
    """

    def __init__(
        self,
        probes: Optional[Iterable[Probe]] = None,
        timeout: Optional[float] = DEFAULT_PROBE_TIMEOUT,
        parallel: bool = False,
    ) -> None:
        """Initialize the collector.

        Args:
            probes: Probes to register, in collection order.
            timeout: Seconds to wait for each probe. None waits indefinitely.
            parallel: Run probes concurrently (output order is unchanged).
        """
        self.timeout = timeout
        self.parallel = parallel
        self._probes: List[Probe] = []
        for probe in probes or []:
            self.register(probe)

    @property
    def probes(self) -> List[Probe]:
        """Registered probes in collection order."""
        return list(self._probes)

    def register(self, probe: Probe) -> None:
        """Register a probe.

        Args:
            probe: Probe to add at the end of the collection order.

        Raises:
            ValueError: If a probe with the same name is already registered.
        """
        if any(existing.name == probe.name for existing in self._probes):
            raise ValueError(f"Probe '{probe.name}' is already registered")
        self._probes.append(probe)
        log.debug("probe_registered", probe=probe.name)

    def collect(self, stop_event: Optional[threading.Event] = None) -> CollectionResult:
        """Run every registered probe once.

        Probes run on daemon threads. A probe that times out is abandoned
        and cannot keep the process alive after the caller is done.

        Args:
            stop_event: Optional event; when set, no further probes are
                awaited and the partial result is returned with
                ``cancelled=True``.

        Returns:
            CollectionResult with one outcome per probe that was run.
        """
        if not self._probes:
            return CollectionResult()

        if self.parallel:
            result = self._collect_parallel(stop_event)
        else:
            result = self._collect_sequential(stop_event)

        log.info(
            "collection_complete",
            probes_run=len(result.outcomes),
            samples=len(result.samples),
            failures=len(result.failures),
            cancelled=result.cancelled,
        )
        return result

    @staticmethod
    def _start(probe: Probe) -> "Future[List[Sample]]":
        """Run ``probe.collect`` on a daemon thread and return its future."""
        future: "Future[List[Sample]]" = Future()
        future.set_running_or_notify_cancel()

        def run() -> None:
            try:
                samples = probe.collect()
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(samples)

        thread = threading.Thread(target=run, name=f"hostdoctor-probe-{probe.name}", daemon=True)
        thread.start()
        return future

    def _collect_sequential(self, stop_event: Optional[threading.Event]) -> CollectionResult:
        result = CollectionResult()
        for probe in self._probes:
            if stop_event is not None and stop_event.is_set():
                result.cancelled = True
                log.info("collection_cancelled", remaining=len(self._probes) - len(result.outcomes))
                break
            started = time.monotonic()
            future = self._start(probe)
            result.outcomes.append(self._await(probe, future, self.timeout, started))
        return result

    def _collect_parallel(self, stop_event: Optional[threading.Event]) -> CollectionResult:
        result = CollectionResult()
        started = time.monotonic()
        futures = [(probe, self._start(probe)) for probe in self._probes]

        for probe, future in futures:
            if stop_event is not None and stop_event.is_set() and not future.done():
                result.cancelled = True
                log.info("collection_cancelled", remaining=len(futures) - len(result.outcomes))
                break
            remaining: Optional[float] = None
            if self.timeout is not None:
                remaining = max(0.0, self.timeout - (time.monotonic() - started))
            result.outcomes.append(self._await(probe, future, remaining, started))
        return result

    def _await(
        self,
        probe: Probe,
        future: "Future[List[Sample]]",
        timeout: Optional[float],
        started: float,
    ) -> ProbeOutcome:
        """Wait for a probe future and convert the result to an outcome."""
        try:
            samples = future.result(timeout=timeout)
        except FutureTimeoutError:
            error: ProbeError = ProbeUnavailable(
                probe.name, f"timed out after {self.timeout:g}s"
            )
            return self._failed(probe, error, started)
        except ProbeError as e:
            return self._failed(probe, e, started)
        except Exception as e:
            # Misbehaving probe - treat as unavailable rather than aborting
            error = ProbeUnavailable(probe.name, f"{type(e).__name__}: {e}", cause=e)
            return self._failed(probe, error, started)

        duration_ms = (time.monotonic() - started) * 1000
        log.debug("probe_collected", probe=probe.name, samples=len(samples), duration_ms=round(duration_ms, 1))
        return ProbeOutcome(probe=probe.name, samples=list(samples), duration_ms=duration_ms)

    def _failed(self, probe: Probe, error: ProbeError, started: float) -> ProbeOutcome:
        duration_ms = (time.monotonic() - started) * 1000
        event = (
            "probe_parse_failure"
            if error.kind == FailureKind.PARSE_FAILURE
            else "probe_unavailable"
        )
        log.warning(event, probe=probe.name, reason=error.message)
        return ProbeOutcome(
            probe=probe.name,
            failure=ProbeFailure(probe=probe.name, kind=error.kind, message=error.message),
            duration_ms=duration_ms,
        )
