"""HMAC-SHA256 request signing for the mail-sending API.

The remote side recomputes the same string-to-sign from the request it
receives, so every piece below has to match byte for byte:

    POST\\n<path?query>\\n<x-ms-date>;<host>;<x-ms-content-sha256>
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from urllib.parse import urlsplit, urlunsplit

API_VERSION_QUERY = "api-version=2023-03-31"
SIGNED_HEADERS = "x-ms-date;host;x-ms-content-sha256"
AUTH_SCHEME = "HMAC-SHA256"


class SigningError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class SigningContext:
    url: str
    path_and_query: str
    host: str
    date: str
    content_hash: str
    string_to_sign: str
    signature: str
    request_id: str

    @property
    def authorization(self) -> str:
        return f"{AUTH_SCHEME} SignedHeaders={SIGNED_HEADERS}&Signature={self.signature}"

    def headers(self) -> dict[str, str]:
        return {
            "Authorization": self.authorization,
            "x-ms-date": self.date,
            "x-ms-content-sha256": self.content_hash,
            "Repeatability-Request-Id": self.request_id,
            "Repeatability-First-Sent": self.date,
            "Content-Type": "application/json",
        }


def format_http_date(moment: datetime | None = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def build_request_url(endpoint: str) -> tuple[str, str, str]:
    """Return ``(url, path_and_query, host)`` for an API endpoint."""
    try:
        parts = urlsplit(endpoint.strip())
        host = parts.hostname
    except ValueError as exc:
        raise SigningError(f"Invalid endpoint URL {endpoint!r}: {exc}") from exc

    if not parts.scheme or not parts.netloc:
        raise SigningError(f"Invalid endpoint URL {endpoint!r}: relative URL without a base")
    if not host:
        raise SigningError("Unable to parse host")

    path = parts.path or "/"
    url = urlunsplit((parts.scheme, parts.netloc, path, API_VERSION_QUERY, ""))
    return url, f"{path}?{API_VERSION_QUERY}", host


def compute_content_hash(body: bytes) -> str:
    return base64.b64encode(hashlib.sha256(body).digest()).decode("ascii")


def build_string_to_sign(path_and_query: str, date: str, host: str, content_hash: str) -> str:
    return f"POST\n{path_and_query}\n{date};{host};{content_hash}"


def decode_access_key(access_key: str) -> bytes:
    try:
        return base64.b64decode(access_key, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SigningError(f"Access key is not valid base64: {exc}") from exc


def compute_signature(access_key: str, string_to_sign: str) -> str:
    key = decode_access_key(access_key)
    digest = hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def sign_request(
    endpoint: str,
    access_key: str,
    body: bytes,
    *,
    date: str | None = None,
    request_id: str | None = None,
) -> SigningContext:
    url, path_and_query, host = build_request_url(endpoint)
    date = date or format_http_date()
    content_hash = compute_content_hash(body)
    string_to_sign = build_string_to_sign(path_and_query, date, host, content_hash)
    signature = compute_signature(access_key, string_to_sign)
    return SigningContext(
        url=url,
        path_and_query=path_and_query,
        host=host,
        date=date,
        content_hash=content_hash,
        string_to_sign=string_to_sign,
        signature=signature,
        request_id=request_id or str(uuid.uuid4()),
    )
