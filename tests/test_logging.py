from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from mailrelay.core.logging import configure_logging, format_peer, get_logger, new_correlation_id


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        yield
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)


def test_configure_logging_writes_text_and_json(tmp_path: Path, restore_root_logger) -> None:  # noqa: ANN001
    configure_logging(tmp_path, correlation_id="process-1")

    get_logger("mailrelay.smtp", "session-42", peer="10.0.0.7:40001").info("Accepted connection")
    logging.getLogger("mailrelay.relay").info("Relay started")
    for handler in logging.getLogger().handlers:
        handler.flush()

    text_log = next(tmp_path.glob("mailrelay-*.log")).read_text(encoding="utf-8")
    assert "[session-42 10.0.0.7:40001] mailrelay.smtp: Accepted connection" in text_log
    assert "[process-1 -] mailrelay.relay: Relay started" in text_log

    json_lines = [json.loads(line) for line in next(tmp_path.glob("mailrelay-*.jsonl")).read_text().splitlines()]
    assert [entry["correlation_id"] for entry in json_lines] == ["session-42", "process-1"]
    assert [entry["peer"] for entry in json_lines] == ["10.0.0.7:40001", "-"]


def test_new_correlation_id_is_unique() -> None:
    assert new_correlation_id() != new_correlation_id()


def test_format_peer() -> None:
    assert format_peer(("127.0.0.1", 2525)) == "127.0.0.1:2525"
    assert format_peer(("::1", 25, 0, 0)) == "[::1]:25"
