"""
Per-request telemetry for the HubSpot connection.

Every request the client sends ends in exactly one RequestEvent: the
resolved path, the status (if a response arrived), the elapsed time and how
the request ended. Events are written to the ``hubspot_api.core.telemetry``
logger as JSON or key=value lines. Failed requests log at INFO, everything
else at DEBUG. Recorders can also keep the events and running totals, which
is what the test-suite inspects.
"""
import json
import logging
import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class TelemetryLevel(Enum):
    """Telemetry verbosity levels."""
    INFO = "info"
    DEBUG = "debug"


class RequestOutcome(Enum):
    """How a request ended."""
    OK = "ok"                        # 2xx response, body decoded
    HTTP_ERROR = "http_error"        # Non-2xx response
    NETWORK_ERROR = "network_error"  # Connection failure or timeout
    DECODE_ERROR = "decode_error"    # 2xx response with an unreadable body


@dataclass
class RequestEvent:
    """
    One HTTP request as seen by the connection.

    Attributes:
        timestamp: UTC time the event was created, ISO 8601
        method: Upper-case HTTP method
        path: Resolved path, without query string or credentials
        status: Response status; None when no response arrived
        elapsed_ms: Time from send to outcome
        outcome: RequestOutcome value
        error: Failure description, if any
    """
    timestamp: str
    method: str
    path: str
    status: Optional[int]
    elapsed_ms: float
    outcome: str
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.outcome != RequestOutcome.OK.value

    def to_dict(self) -> Dict[str, Any]:
        # status stays even when None so network failures are visible
        data = asdict(self)
        if data["error"] is None:
            del data["error"]
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def to_keyvalue(self) -> str:
        return " ".join(f"{key}={value}" for key, value in self.to_dict().items())


@dataclass
class TelemetryStats:
    """Running totals over recorded requests."""
    total_requests: int = 0
    total_failures: int = 0
    total_elapsed_time: float = 0.0
    outcomes: Dict[str, int] = field(default_factory=dict)
    status_codes: Dict[int, int] = field(default_factory=dict)

    def add(self, event: RequestEvent) -> None:
        """Count one event."""
        self.total_requests += 1
        self.total_elapsed_time += event.elapsed_ms
        if event.failed:
            self.total_failures += 1
        self.outcomes[event.outcome] = self.outcomes.get(event.outcome, 0) + 1
        if event.status:
            self.status_codes[event.status] = self.status_codes.get(event.status, 0) + 1

    @property
    def average_elapsed_ms(self) -> float:
        if not self.total_requests:
            return 0.0
        return self.total_elapsed_time / self.total_requests

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "total_failures": self.total_failures,
            "avg_latency_ms": round(self.average_elapsed_ms, 2),
            "outcomes": self.outcomes,
            "status_codes": self.status_codes,
        }


class TelemetryRecorder:
    """
    Logs request events and optionally keeps them.

    Safe to share between threads.
    """

    def __init__(
        self,
        level: TelemetryLevel = TelemetryLevel.INFO,
        format_json: bool = True,
        collect_stats: bool = False,
        keep_events: bool = False,
    ):
        """
        Args:
            level: DEBUG sends every event to DEBUG; INFO raises failures to INFO
            format_json: Log lines as JSON instead of key=value pairs
            collect_stats: Maintain TelemetryStats
            keep_events: Keep events for get_events()
        """
        self.level = level
        self.format_json = format_json
        self.collect_stats = collect_stats
        self.keep_events = keep_events

        self._lock = threading.Lock()
        self._stats = TelemetryStats()
        self._events: List[RequestEvent] = []

    def _log(self, event: RequestEvent) -> None:
        line = event.to_json() if self.format_json else event.to_keyvalue()
        if event.failed and self.level is TelemetryLevel.INFO:
            logger.info(line)
        else:
            logger.debug(line)

    def record(self, event: RequestEvent) -> None:
        """Log an event and fold it into stats and history."""
        self._log(event)
        if not (self.collect_stats or self.keep_events):
            return
        with self._lock:
            if self.collect_stats:
                self._stats.add(event)
            if self.keep_events:
                self._events.append(event)

    def get_stats(self) -> TelemetryStats:
        """Snapshot of the running totals."""
        with self._lock:
            return replace(
                self._stats,
                outcomes=dict(self._stats.outcomes),
                status_codes=dict(self._stats.status_codes),
            )

    def reset_stats(self) -> None:
        with self._lock:
            self._stats = TelemetryStats()

    def get_events(self) -> List[RequestEvent]:
        with self._lock:
            return list(self._events)

    def clear_events(self) -> None:
        with self._lock:
            self._events.clear()


_recorder: Optional[TelemetryRecorder] = None
_recorder_lock = threading.Lock()


def get_recorder() -> TelemetryRecorder:
    """
    Return the process-wide recorder used by connections.

    The default recorder logs only; it keeps no event history.
    """
    global _recorder

    with _recorder_lock:
        if _recorder is None:
            _recorder = TelemetryRecorder()
        return _recorder


def set_recorder(recorder: Optional[TelemetryRecorder]) -> None:
    """Install a process-wide recorder; None goes back to the default."""
    global _recorder

    with _recorder_lock:
        _recorder = recorder


def create_event(
    method: str,
    path: str,
    outcome: RequestOutcome,
    status: Optional[int] = None,
    elapsed_ms: float = 0.0,
    error: Optional[str] = None,
) -> RequestEvent:
    """Build a RequestEvent stamped with the current UTC time."""
    return RequestEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        method=method.upper(),
        path=path,
        status=status,
        elapsed_ms=elapsed_ms,
        outcome=outcome.value,
        error=error,
    )
