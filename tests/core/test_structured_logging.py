"""Tests for structured logging with trace propagation."""

from __future__ import annotations

import io
import json

import pytest

from marketfeed.core.logging import LogConfig, StructuredLogger, configure_logging, get_logger, log_context


def _read_records(stream: io.StringIO) -> list[dict[str, object]]:
    stream.seek(0)
    lines = [line for line in stream.getvalue().splitlines() if line.strip()]
    return [json.loads(line) for line in lines]


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    configure_logging("WARNING")


def test_symbol_and_source_are_top_level_fields() -> None:
    buffer = io.StringIO()
    logger = StructuredLogger(LogConfig(console_stream=buffer))

    with logger.context(trace_id="trace-123", symbol="BBCA", source="yahoo", relay="corsproxy"):
        logger.logger.info("attempt failed")

    records = _read_records(buffer)
    assert len(records) == 1
    record = records[0]
    assert record["trace_id"] == "trace-123"
    assert record["symbol"] == "BBCA"
    assert record["source"] == "yahoo"
    assert record["level"] == "INFO"
    assert record["message"] == "attempt failed"
    assert record["context"]["relay"] == "corsproxy"


def test_trace_id_propagates_within_context() -> None:
    buffer = io.StringIO()
    logger = StructuredLogger(LogConfig(console_stream=buffer))

    with logger.context() as trace_id:
        logger.logger.info("first event")
        logger.logger.info("second event")

    logger.logger.info("outside context")

    records = _read_records(buffer)
    assert len(records) == 3
    assert records[0]["trace_id"] == records[1]["trace_id"] == trace_id
    assert records[2]["trace_id"] != trace_id


def test_nested_context_merges_fields() -> None:
    buffer = io.StringIO()
    configure_logging("DEBUG", console_stream=buffer)
    log = get_logger("marketfeed.tests")

    with log_context(symbol="TLKM"):
        with log_context(source="sectors"):
            log.debug("inner")
        log.debug("outer")

    inner, outer = _read_records(buffer)
    assert inner["symbol"] == "TLKM"
    assert inner["source"] == "sectors"
    assert inner["context"]["logger_name"] == "marketfeed.tests"
    assert outer["symbol"] == "TLKM"
    assert outer["source"] is None


def test_level_filters_records() -> None:
    buffer = io.StringIO()
    configure_logging("WARNING", console_stream=buffer)

    get_logger().info("hidden")
    get_logger().warning("shown")

    records = _read_records(buffer)
    assert [record["message"] for record in records] == ["shown"]


def test_file_sink_appends_json_lines(tmp_path) -> None:
    path = tmp_path / "logs" / "marketfeed.jsonl"
    configure_logging("INFO", console_output=False, file_output=True, file_path=str(path))

    get_logger().info("to file")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["message"] == "to file"
