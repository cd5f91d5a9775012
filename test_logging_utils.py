#!/usr/bin/env python3
"""
Test script for logging utilities.

This validates that the centralized logging and error classification works correctly.
"""

import json

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from chatstream import logging_utils
from chatstream.llm.exceptions import BadStatusError, ErrorKind, StreamDecodeError
from chatstream.logging_utils import (
    ContextualLogger,
    StreamErrorHandler,
    configure_logging,
    log_operation,
    operation_context,
)


class _Strict(BaseModel):
    value: int


class TestStreamErrorHandler:
    """Test the StreamErrorHandler class."""

    def test_classify_llm_errors(self):
        assert StreamErrorHandler.classify_error(
            BadStatusError("HTTP 500", status_code=500)
        ) is ErrorKind.BAD_STATUS
        assert StreamErrorHandler.classify_error(
            StreamDecodeError("bad")
        ) is ErrorKind.DECODE_ERROR

    def test_classify_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            _Strict.model_validate({"value": "nope"})
        assert StreamErrorHandler.classify_error(exc_info.value) is ErrorKind.DECODE_ERROR

    def test_classify_json_error(self):
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("{")
        assert StreamErrorHandler.classify_error(exc_info.value) is ErrorKind.DECODE_ERROR

    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("refused"),
            httpx.ReadTimeout("slow"),
            httpx.RemoteProtocolError("peer closed"),
            TimeoutError("timed out"),
            ConnectionResetError("reset"),
            OSError("Network unreachable"),
        ],
    )
    def test_classify_network_errors(self, error):
        assert StreamErrorHandler.classify_error(error) is ErrorKind.NETWORK_ERROR

    def test_classify_unknown_error(self):
        assert StreamErrorHandler.classify_error(RuntimeError("bug")) is None

    def test_describe_falls_back_to_type_name(self):
        assert StreamErrorHandler.describe(httpx.ReadTimeout("")) == "ReadTimeout"
        assert StreamErrorHandler.describe(ValueError("boom")) == "boom"


class RecordingLogger:
    """Stand-in for the module logger that keeps every event."""

    def __init__(self, events: list | None = None, context: dict | None = None):
        self.events = [] if events is None else events
        self.context = context or {}

    def bind(self, **context):
        return RecordingLogger(self.events, {**self.context, **context})

    def info(self, event, **fields):
        self.events.append(("info", event, {**self.context, **fields}))

    def error(self, event, **fields):
        self.events.append(("error", event, {**self.context, **fields}))


@pytest.fixture
def recorded(monkeypatch):
    recorder = RecordingLogger()
    monkeypatch.setattr(logging_utils, "logger", recorder)
    return recorder.events


class TestDecorators:
    """Test logging decorators and context managers."""

    @pytest.mark.asyncio
    async def test_log_operation_success(self, recorded):

        @log_operation("test_operation", summarize=len, context={"model": "gpt-4o"})
        async def successful_function():
            return "success"

        assert await successful_function() == "success"

        (_, started, start_fields), (level, finished, fields) = recorded
        assert started == "Operation started"
        assert start_fields["function"] == "successful_function"
        assert level == "info"
        assert finished == "Operation completed successfully"
        assert fields["result"] == 7
        assert fields["model"] == "gpt-4o"
        assert fields["duration_ms"] >= 0

    @pytest.mark.asyncio
    async def test_log_operation_with_error(self, recorded):

        @log_operation("test_operation")
        async def failing_function(value):
            raise httpx.ConnectError(f"refused {value}")

        with pytest.raises(httpx.ConnectError, match="refused 3"):
            await failing_function(3)

        level, event, fields = recorded[-1]
        assert (level, event) == ("error", "Operation failed")
        assert fields["error_type"] == "ConnectError"
        assert fields["error_kind"] == "network_error"
        assert "result" not in fields

    @pytest.mark.asyncio
    async def test_operation_context_logs_completion(self, recorded):
        async with operation_context("ctx", context={"session_id": "abc"}) as op_logger:
            assert op_logger is not None

        level, event, fields = recorded[-1]
        assert event == "Operation completed successfully"
        assert fields["session_id"] == "abc"

    @pytest.mark.asyncio
    async def test_operation_context_reraises(self, recorded):
        with pytest.raises(KeyError):
            async with operation_context("ctx"):
                raise KeyError("missing")

        level, event, fields = recorded[-1]
        assert (level, event) == ("error", "Operation failed")
        assert fields["error_type"] == "KeyError"
        assert fields["error_kind"] is None


class TestContextualLogger:

    def test_bind_merges_context(self):
        base = ContextualLogger({"session_id": "s1"})
        bound = base.bind(model="gpt-4o")
        assert bound.base_context == {"session_id": "s1", "model": "gpt-4o"}
        assert base.base_context == {"session_id": "s1"}
        bound.info("message", extra_field=1)
        bound.debug("debug")
        bound.warning("warning")
        bound.error("error")


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError, match="Unknown logging level"):
        configure_logging("LOUD")
