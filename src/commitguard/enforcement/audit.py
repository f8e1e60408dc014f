"""Audit emitter -- one structured event per evaluation, side effect only."""

import logging
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("commitguard.audit")


@dataclass(frozen=True)
class AuditEvent:
    profile: str
    passed: bool
    rules_evaluated: int
    violation_count: int
    adjustment_count: int
    failed_adjustment_count: int
    skipped_count: int
    timestamp: datetime

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


@runtime_checkable
class AuditSink(Protocol):
    def emit(self, event: AuditEvent) -> None: ...


class LoggingAuditSink:
    """Writes events to the `commitguard.audit` logger as structured extras."""

    def emit(self, event: AuditEvent) -> None:
        audit_logger.info("Commitment enforcement completed", extra={"audit": event.to_dict()})


class MemoryAuditSink:
    """Keeps the most recent events in memory."""

    def __init__(self, max_events: int = 1000):
        self.events: deque[AuditEvent] = deque(maxlen=max_events)

    def emit(self, event: AuditEvent) -> None:
        self.events.append(event)


def emit_safely(sink: AuditSink, event: AuditEvent) -> None:
    """Emit without letting a sink failure reach the caller."""
    try:
        sink.emit(event)
    except Exception as e:
        logger.warning(f"[Audit] Sink {type(sink).__name__} failed: {e}")
