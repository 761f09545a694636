from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_BIND_ADDRESS = "127.0.0.1:25"
DEFAULT_DOMAIN = "smtp.domain.com"


def parse_bind_address(value: str) -> tuple[str, int]:
    host, sep, port_raw = value.strip().rpartition(":")
    if not sep or not host or not port_raw.isdigit():
        raise ValueError(f"Invalid bind address (expected host:port): {value!r}")
    port = int(port_raw)
    if port > 65535:
        raise ValueError(f"Invalid port in bind address: {value!r}")
    return host.strip("[]"), port


@dataclass(slots=True)
class Settings:
    root_dir: Path
    logs_dir: Path
    bind_address: str = DEFAULT_BIND_ADDRESS
    domain: str = DEFAULT_DOMAIN
    endpoint: str | None = None
    access_key: str | None = None
    spool_dir: Path | None = None
    log_level: int = logging.INFO
    delivery_timeout_sec: float | None = None

    @classmethod
    def load(cls, base_dir: Path | None = None) -> Settings:
        load_dotenv(override=False)

        root_env = os.getenv("RELAY_HOME")
        root_dir = Path(root_env).expanduser().resolve() if root_env else (base_dir or Path.cwd()).resolve()
        logs_dir = Path(os.getenv("RELAY_LOG_DIR", root_dir / "logs")).expanduser().resolve()

        spool_env = os.getenv("RELAY_SPOOL_DIR")
        spool_dir = Path(spool_env).expanduser().resolve() if spool_env else None

        level_name = os.getenv("RELAY_LOG_LEVEL", "INFO").upper()
        log_level = logging.getLevelName(level_name)
        if not isinstance(log_level, int):
            raise ValueError(f"Unknown RELAY_LOG_LEVEL: {level_name}")

        timeout_env = os.getenv("RELAY_DELIVERY_TIMEOUT_SEC")
        delivery_timeout_sec = float(timeout_env) if timeout_env else None

        return cls(
            root_dir=root_dir,
            logs_dir=logs_dir,
            bind_address=os.getenv("RELAY_BIND_ADDRESS", DEFAULT_BIND_ADDRESS),
            domain=os.getenv("RELAY_DOMAIN", DEFAULT_DOMAIN),
            endpoint=os.getenv("RELAY_ENDPOINT") or None,
            access_key=os.getenv("RELAY_ACCESS_KEY") or None,
            spool_dir=spool_dir,
            log_level=log_level,
            delivery_timeout_sec=delivery_timeout_sec,
        )

    @property
    def delivery_enabled(self) -> bool:
        return bool(self.endpoint and self.access_key)

    def listen_address(self) -> tuple[str, int]:
        return parse_bind_address(self.bind_address)

    def ensure_directories(self) -> None:
        for path in [self.root_dir, self.logs_dir, self.spool_dir]:
            if path is not None:
                path.mkdir(parents=True, exist_ok=True)
