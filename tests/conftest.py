from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mailrelay.config import Settings
from mailrelay.smtp.session import Envelope

RELAY_ENV_VARS = [
    "RELAY_HOME",
    "RELAY_BIND_ADDRESS",
    "RELAY_DOMAIN",
    "RELAY_ENDPOINT",
    "RELAY_ACCESS_KEY",
    "RELAY_SPOOL_DIR",
    "RELAY_LOG_DIR",
    "RELAY_LOG_LEVEL",
    "RELAY_DELIVERY_TIMEOUT_SEC",
]


class RecordingHandler:
    def __init__(self) -> None:
        self.envelopes: list[Envelope] = []

    def handle_mail(self, envelope: Envelope) -> None:
        self.envelopes.append(envelope)


@pytest.fixture(autouse=True)
def clean_relay_env(monkeypatch) -> None:  # noqa: ANN001
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    root = tmp_path / "project"
    root.mkdir(parents=True, exist_ok=True)
    s = Settings.load(base_dir=root)
    s.ensure_directories()
    return s


@pytest.fixture()
def recording_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def test_logger() -> logging.Logger:
    logger = logging.getLogger("mailrelay-test")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.INFO)
    return logger
