"""In-memory buffer of recent log records for on-demand inspection.

:class:`LogBuffer` is an ordinary :class:`logging.Handler`: attach it to the
package logger and it keeps the newest records (newest first) so a front end
can list recent warnings and errors, export them as JSON, or be notified of
each new record.

Typical usage::

    from energy_scenario.diagnostics.log_buffer import install
    buffer = install()
    ...
    for entry in buffer.errors():
        print(entry.timestamp, entry.message)
"""

from __future__ import annotations

import itertools
import json
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Callable

from energy_scenario.config.defaults import LOG_BUFFER_MAX_ENTRIES

_PACKAGE_LOGGER = "energy_scenario"
_DEFAULT_FORMATTER = logging.Formatter()

Listener = Callable[[list["LogEntry"]], None]


@dataclass(frozen=True)
class LogEntry:
    """One captured log record."""

    id: int
    timestamp: datetime
    level: str
    message: str
    context: str
    stack: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class LogBuffer(logging.Handler):
    """Logging handler retaining the most recent *max_entries* records.

    Listeners registered with :meth:`subscribe` receive a snapshot of all
    entries after every new record.  A listener that itself logs does not
    re-enter the buffer.
    """

    def __init__(self, max_entries: int = LOG_BUFFER_MAX_ENTRIES, level: int = logging.NOTSET) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}.")
        super().__init__(level)
        self._max_entries = max_entries
        self._entries: list[LogEntry] = []
        self._listeners: list[Listener] = []
        self._ids = itertools.count(1)
        self._local = threading.local()

    # ------------------------------------------------------------------
    # logging.Handler interface
    # ------------------------------------------------------------------

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "emitting", False):
            return
        self._local.emitting = True
        try:
            entry = LogEntry(
                id=next(self._ids),
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
                level=record.levelname.lower(),
                message=record.getMessage(),
                context=record.name,
                stack=self._stack_text(record),
            )
            self.acquire()
            try:
                self._entries.insert(0, entry)
                del self._entries[self._max_entries :]
                snapshot = list(self._entries)
                listeners = list(self._listeners)
            finally:
                self.release()
            for listener in listeners:
                listener(snapshot)
        except Exception:
            self.handleError(record)
        finally:
            self._local.emitting = False

    def _stack_text(self, record: logging.LogRecord) -> str | None:
        if record.exc_info:
            return (self.formatter or _DEFAULT_FORMATTER).formatException(record.exc_info)
        return record.stack_info

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def entries(self, level: str | None = None) -> list[LogEntry]:
        """Return captured entries, newest first, optionally for one level."""
        with self.lock:
            snapshot = list(self._entries)
        if level is None:
            return snapshot
        return [e for e in snapshot if e.level == level.lower()]

    def errors(self) -> list[LogEntry]:
        return self.entries("error")

    def clear(self) -> None:
        """Drop all entries and notify listeners with an empty list."""
        with self.lock:
            self._entries.clear()
            listeners = list(self._listeners)
        for listener in listeners:
            listener([])

    def export_json(self) -> str:
        """Return all entries as an indented JSON array, newest first."""
        return json.dumps([e.to_dict() for e in self.entries()], indent=2)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; return a function that unregisters it."""
        with self.lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self.lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe


def install(
    max_entries: int = LOG_BUFFER_MAX_ENTRIES,
    level: int = logging.WARNING,
    logger_name: str = _PACKAGE_LOGGER,
) -> LogBuffer:
    """Attach a new :class:`LogBuffer` to *logger_name* and return it."""
    buffer = LogBuffer(max_entries=max_entries, level=level)
    logging.getLogger(logger_name).addHandler(buffer)
    return buffer


def uninstall(buffer: LogBuffer, logger_name: str = _PACKAGE_LOGGER) -> None:
    """Detach *buffer* from *logger_name*."""
    logging.getLogger(logger_name).removeHandler(buffer)
