"""
Activity and audit sinks for menu changes.

The no-op sinks are null objects injected by default; the logging and
in-memory sinks are for production logging and tests respectively.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from menukit.components.menus.models import ActivityEvent, AuditEvent


class NoopActivityEmitter:
    """Disabled activity sink."""

    def enabled(self) -> bool:
        return False

    def emit(self, event: ActivityEvent) -> None:
        return None


class NoopAuditRecorder:
    """Audit sink that drops every event."""

    def record(self, event: AuditEvent) -> None:
        return None


class LoggingActivityEmitter:
    """Writes activity events to a logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("menukit.activity")
        self._level = level

    def enabled(self) -> bool:
        return self._logger.isEnabledFor(self._level)

    def emit(self, event: ActivityEvent) -> None:
        self._logger.log(
            self._level,
            "menu activity: %s %s %s by %s %s",
            event.verb,
            event.object_type,
            event.object_id,
            event.actor_id,
            event.metadata,
        )


class InMemoryActivityEmitter:
    """Collects activity events; for testing/dev."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.events: list[ActivityEvent] = []

    def enabled(self) -> bool:
        return True

    def emit(self, event: ActivityEvent) -> None:
        with self._lock:
            self.events.append(event)

    def verbs(self) -> list[str]:
        with self._lock:
            return [e.verb for e in self.events]


class InMemoryAuditRecorder:
    """Collects audit events; for testing/dev."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.events: list[AuditEvent] = []

    def record(self, event: AuditEvent) -> None:
        with self._lock:
            self.events.append(event)

    def actions(self) -> list[str]:
        with self._lock:
            return [e.action for e in self.events]
