"""Unit tests for connection IDs and the logger adapter."""

import logging
import threading
import uuid

import pytest

from rawhttp.domain.connection_id import (
    ConnectionLoggerAdapter,
    clear_connection_id,
    generate_connection_id,
    get_connection_id,
    get_logger,
    set_connection_id,
)


@pytest.fixture(name="logger_adapter")
def logger_adapter_fixture():
    """Create a ConnectionLoggerAdapter over rawhttp.test."""
    return ConnectionLoggerAdapter(logging.getLogger("rawhttp.test"), {})


@pytest.fixture(autouse=True)
def reset_connection_id():
    """Leave no connection ID behind between tests."""
    clear_connection_id()
    yield
    clear_connection_id()


def test_generated_ids_are_unique_uuids():
    """IDs are UUID4 strings."""
    first, second = generate_connection_id(), generate_connection_id()
    assert first != second
    assert uuid.UUID(first).version == 4


def test_adapter_injects_connection_id(logger_adapter):
    """The bound connection ID is added to extra."""
    set_connection_id("conn-123")

    _, kwargs = logger_adapter.process("Test message", {})

    assert kwargs["extra"]["connection_id"] == "conn-123"


def test_adapter_defaults_connection_id_when_missing(logger_adapter):
    """Without a bound ID the placeholder is used."""
    _, kwargs = logger_adapter.process("Test message", {})

    assert kwargs["extra"]["connection_id"] == "-"


def test_adapter_derives_component_from_logger_name():
    """The rawhttp. prefix is stripped from the component."""
    _, kwargs = get_logger("pipeline.router").process("msg", {})
    assert kwargs["extra"]["component"] == "pipeline.router"

    foreign = ConnectionLoggerAdapter(logging.getLogger("other.module"), {})
    _, kwargs = foreign.process("msg", {})
    assert kwargs["extra"]["component"] == "other.module"


def test_adapter_preserves_and_does_not_mutate_extra(logger_adapter):
    """Caller extras are kept and the caller's dict is left untouched."""
    set_connection_id("conn-1")
    extra = {"event": "custom", "status_code": 200}

    _, kwargs = logger_adapter.process("Test message", {"extra": extra})

    assert kwargs["extra"]["event"] == "custom"
    assert kwargs["extra"]["status_code"] == 200
    assert "connection_id" not in extra


def test_connection_ids_are_isolated_per_thread():
    """A worker thread does not see the ID bound in another thread."""
    set_connection_id("main-thread")
    seen = []

    def worker():
        seen.append(get_connection_id())
        set_connection_id("worker-thread")

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()

    assert seen == [None]
    assert get_connection_id() == "main-thread"


def test_adapter_records_reach_caplog(caplog):
    """Adapter output carries the connection ID into log records."""
    caplog.set_level(logging.INFO)
    set_connection_id("conn-log")

    get_logger("test").info("hello", extra={"event": "test_event"})

    record = caplog.records[-1]
    assert record.connection_id == "conn-log"
    assert record.component == "test"
    assert record.event == "test_event"
