"""Unit tests for energy_scenario.diagnostics.log_buffer.

Covers:
- records captured newest first with level, context and message
- max_entries trimming
- level filtering (handler level and entries(level=...))
- exception tracebacks kept in ``stack``
- subscribe / unsubscribe, clear() notification
- listeners that log do not re-enter the buffer
- export_json
- install / uninstall on a named logger
"""

from __future__ import annotations

import json
import logging

import pytest

from energy_scenario.diagnostics.log_buffer import LogBuffer, install, uninstall

_LOGGER_NAME = "energy_scenario.tests.log_buffer"


@pytest.fixture
def log() -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    yield logger
    logger.handlers.clear()
    logger.propagate = True


@pytest.fixture
def buffer(log) -> LogBuffer:
    handler = LogBuffer(max_entries=3)
    log.addHandler(handler)
    return handler


class TestCapture:
    def test_newest_first(self, log, buffer):
        log.info("first")
        log.warning("second %d", 2)
        entries = buffer.entries()
        assert [e.message for e in entries] == ["second 2", "first"]
        assert entries[0].level == "warning"
        assert entries[0].context == _LOGGER_NAME
        assert entries[0].id > entries[1].id

    def test_trimmed_to_max_entries(self, log, buffer):
        for i in range(5):
            log.info("msg %d", i)
        assert [e.message for e in buffer.entries()] == ["msg 4", "msg 3", "msg 2"]

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError, match="max_entries"):
            LogBuffer(max_entries=0)

    def test_handler_level(self, log):
        handler = LogBuffer(level=logging.WARNING)
        log.addHandler(handler)
        log.info("ignored")
        log.error("kept")
        assert [e.message for e in handler.entries()] == ["kept"]

    def test_filter_by_level(self, log, buffer):
        log.info("a")
        log.error("b")
        log.warning("c")
        assert [e.message for e in buffer.errors()] == ["b"]
        assert [e.message for e in buffer.entries("WARNING")] == ["c"]

    def test_exception_stack(self, log, buffer):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            log.exception("failed")
        entry = buffer.entries()[0]
        assert entry.level == "error"
        assert "RuntimeError: boom" in entry.stack

    def test_no_stack_without_exception(self, log, buffer):
        log.warning("plain")
        assert buffer.entries()[0].stack is None


class TestSubscriptions:
    def test_listener_receives_snapshot(self, log, buffer):
        seen = []
        buffer.subscribe(lambda entries: seen.append([e.message for e in entries]))
        log.info("one")
        log.info("two")
        assert seen == [["one"], ["two", "one"]]

    def test_unsubscribe(self, log, buffer):
        seen = []
        unsubscribe = buffer.subscribe(seen.append)
        log.info("one")
        unsubscribe()
        log.info("two")
        assert len(seen) == 1
        unsubscribe()

    def test_clear_notifies_empty(self, log, buffer):
        seen = []
        log.info("one")
        buffer.subscribe(seen.append)
        buffer.clear()
        assert buffer.entries() == []
        assert seen == [[]]

    def test_logging_listener_does_not_recurse(self, log, buffer):
        calls = []

        def listener(entries):
            calls.append(len(entries))
            log.info("listener saw %d", len(entries))

        buffer.subscribe(listener)
        log.info("trigger")
        assert calls == [1]
        assert [e.message for e in buffer.entries()] == ["trigger"]


class TestExport:
    def test_export_json(self, log, buffer):
        log.warning("exported")
        data = json.loads(buffer.export_json())
        assert len(data) == 1
        assert data[0]["message"] == "exported"
        assert data[0]["level"] == "warning"
        assert data[0]["timestamp"].endswith("+00:00")

    def test_export_empty(self, buffer):
        assert json.loads(buffer.export_json()) == []


class TestInstall:
    def test_install_and_uninstall(self, log):
        handler = install(max_entries=10, level=logging.INFO, logger_name=_LOGGER_NAME)
        assert handler in log.handlers
        log.info("captured")
        uninstall(handler, logger_name=_LOGGER_NAME)
        log.info("not captured")
        assert handler not in log.handlers
        assert [e.message for e in handler.entries()] == ["captured"]
