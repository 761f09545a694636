from __future__ import annotations

import platform
import sys

from mailrelay.config import Settings, parse_bind_address
from mailrelay.core.signing import SigningError, build_request_url, decode_access_key


def run_doctor_checks(settings: Settings) -> list[dict[str, str]]:
    checks: list[dict[str, str]] = []

    checks.append(
        {
            "check": "python_version",
            "status": "ok" if sys.version_info >= (3, 11) else "warn",
            "detail": platform.python_version(),
        }
    )

    try:
        host, port = parse_bind_address(settings.bind_address)
        checks.append({"check": "bind_address", "status": "ok", "detail": f"{host}:{port}"})
    except ValueError as exc:
        checks.append({"check": "bind_address", "status": "error", "detail": str(exc)})

    checks.append({"check": "domain", "status": "ok" if settings.domain else "warn", "detail": settings.domain})

    if settings.endpoint:
        try:
            url, _, _ = build_request_url(settings.endpoint)
            checks.append({"check": "endpoint", "status": "ok", "detail": url})
        except SigningError as exc:
            checks.append({"check": "endpoint", "status": "error", "detail": str(exc)})
    else:
        checks.append({"check": "endpoint", "status": "warn", "detail": "RELAY_ENDPOINT is not set"})

    if settings.access_key:
        try:
            key = decode_access_key(settings.access_key)
            checks.append({"check": "access_key", "status": "ok", "detail": f"{len(key)} bytes"})
        except SigningError as exc:
            checks.append({"check": "access_key", "status": "error", "detail": str(exc)})
    else:
        checks.append({"check": "access_key", "status": "warn", "detail": "RELAY_ACCESS_KEY is not set"})

    if settings.spool_dir is not None:
        checks.append(
            {
                "check": "spool_dir",
                "status": "ok" if settings.spool_dir.is_dir() else "warn",
                "detail": str(settings.spool_dir),
            }
        )

    if not settings.delivery_enabled and settings.spool_dir is None:
        checks.append(
            {
                "check": "sink",
                "status": "warn",
                "detail": "Neither delivery nor spooling is configured, received mail will be dropped",
            }
        )

    return checks
