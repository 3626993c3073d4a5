"""Probe interface and generic probe adapters.

A probe is anything with a ``name`` and a ``collect()`` method returning a
list of Samples. Two adapters cover the common cases: wrapping a plain
function, and running an external command with a timeout and parsing its
standard output.
"""

from __future__ import annotations

import subprocess
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

import structlog

from hostdoctor.collector.exceptions import ParseFailure, ProbeError, ProbeUnavailable
from hostdoctor.models.sample import Sample, SampleValue

logger = structlog.get_logger(__name__)

DEFAULT_COMMAND_TIMEOUT = 5.0

# Parsers may return ready Samples or a name -> value mapping
ParserOutput = Union[Iterable[Sample], Mapping[str, SampleValue]]


@runtime_checkable
class Probe(Protocol):
    """Protocol for probes.

    ``collect`` returns zero or more Samples, or raises ProbeUnavailable /
    ParseFailure. It is invoked at most once per collection pass.
    """

    @property
    def name(self) -> str:
        """Unique probe identifier used for registration and reporting."""
        ...

    def collect(self) -> List[Sample]:
        """Query the data source and return samples."""
        ...


class BaseProbe:
    """Convenience base class providing sample construction."""

    def __init__(self, name: str, units: Optional[Mapping[str, str]] = None) -> None:
        self._name = name
        self._units: Dict[str, str] = dict(units or {})

    @property
    def name(self) -> str:
        return self._name

    def collect(self) -> List[Sample]:
        raise NotImplementedError

    def sample(
        self,
        name: str,
        value: SampleValue,
        unit: Optional[str] = None,
        timestamp: Optional[datetime] = None,
        **extra: Any,
    ) -> Sample:
        """Build a Sample attributed to this probe."""
        return Sample(
            name=name,
            value=value,
            unit=unit if unit is not None else self._units.get(name),
            timestamp=timestamp or datetime.now(timezone.utc),
            source=self._name,
            extra=extra,
        )

    def _to_samples(self, output: ParserOutput) -> List[Sample]:
        """Normalize parser output into a list of Samples."""
        if isinstance(output, Mapping):
            return [self.sample(key, value) for key, value in output.items()]
        return list(output)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"


class FunctionProbe(BaseProbe):
    """Probe backed by a callable.

    The callable returns either Samples or a ``{name: value}`` mapping.
    Exceptions other than ProbeError are reported as ProbeUnavailable.

    Example:
        >>> probe = FunctionProbe("battery", lambda: {"battery.pct": 42})
        >>> probe.collect()[0].value
        42
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], ParserOutput],
        units: Optional[Mapping[str, str]] = None,
    ) -> None:
        super().__init__(name, units)
        self._func = func

    def collect(self) -> List[Sample]:
        try:
            output = self._func()
        except ProbeError:
            raise
        except PermissionError as e:
            raise ProbeUnavailable(self.name, f"permission denied: {e}", cause=e)
        except Exception as e:
            raise ProbeUnavailable(self.name, str(e) or type(e).__name__, cause=e)
        return self._to_samples(output)


class CommandProbe(BaseProbe):
    """Probe that runs an external command and parses its stdout.

    Subclasses override ``parse``; alternatively a ``parser`` callable can be
    passed. The command is never run through a shell.

    Failure mapping:
        - executable not found, permission denied, timeout, non-zero exit
          -> ProbeUnavailable
        - parser raised (other than a ProbeError) -> ParseFailure
    """

    def __init__(
        self,
        name: str,
        command: Sequence[str],
        parser: Optional[Callable[[str], ParserOutput]] = None,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
        units: Optional[Mapping[str, str]] = None,
        ok_returncodes: Sequence[int] = (0,),
    ) -> None:
        super().__init__(name, units)
        self.command = list(command)
        self.timeout = timeout
        self._parser = parser
        self._ok_returncodes = tuple(ok_returncodes)

    def run(self) -> str:
        """Run the command and return its stdout."""
        try:
            completed = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ProbeUnavailable(self.name, f"{self.command[0]} not found", cause=e)
        except PermissionError as e:
            raise ProbeUnavailable(self.name, f"permission denied running {self.command[0]}", cause=e)
        except subprocess.TimeoutExpired as e:
            raise ProbeUnavailable(
                self.name, f"{self.command[0]} timed out after {self.timeout:g}s", cause=e
            )
        except OSError as e:
            raise ProbeUnavailable(self.name, f"cannot run {self.command[0]}: {e}", cause=e)

        if completed.returncode not in self._ok_returncodes:
            stderr = (completed.stderr or "").strip().splitlines()
            detail = stderr[-1] if stderr else "no error output"
            raise ProbeUnavailable(
                self.name,
                f"{self.command[0]} exited with status {completed.returncode}: {detail}",
            )
        return completed.stdout or ""

    def parse(self, output: str) -> ParserOutput:
        """Interpret command output. Override in subclasses."""
        if self._parser is None:
            raise NotImplementedError(f"{type(self).__name__} has no parser")
        return self._parser(output)

    def collect(self) -> List[Sample]:
        output = self.run()
        try:
            return self._to_samples(self.parse(output))
        except ProbeError:
            raise
        except Exception as e:
            logger.debug("probe_parse_error", probe=self.name, error=str(e), output=output[:200])
            raise ParseFailure(self.name, f"unexpected output from {self.command[0]}: {e}", cause=e)
