from __future__ import annotations

import email
import re
from collections.abc import Sequence
from email.header import decode_header
from email.message import Message

from mailrelay.delivery.models import MailAddress, MailContent, MailMessage, MailRecipients
from mailrelay.errors import ConversionError

from .body import decode_part_payload, find_body

UNSUPPORTED_CONTENT_MARKER = "Unsupported Content Type\r\n\r\n"

_FOLD_PATTERN = re.compile(r"\r?\n(?=[ \t])")
_HEADER_END_PATTERN = re.compile(rb"\r?\n\r?\n")


def _decode_8bit(value: str) -> str:
    # Raw 8-bit header bytes arrive surrogate-escaped from the bytes parser.
    try:
        return value.encode("ascii", "surrogateescape").decode("utf-8", errors="replace")
    except UnicodeEncodeError:
        return value


def decode_header_value(value: str | None) -> str:
    if not value:
        return ""
    unfolded = _FOLD_PATTERN.sub("", _decode_8bit(str(value)))
    parts: list[str] = []
    for chunk, encoding in decode_header(unfolded):
        if isinstance(chunk, bytes):
            try:
                parts.append(chunk.decode(encoding or "utf-8", errors="replace"))
            except LookupError:
                parts.append(chunk.decode("utf-8", errors="replace"))
        else:
            parts.append(chunk)
    return "".join(parts)


def parse_message(raw: bytes) -> Message:
    if not isinstance(raw, (bytes, bytearray)):
        raise ConversionError(f"Unable to parse message: expected bytes, got {type(raw).__name__}")
    try:
        return email.message_from_bytes(raw)
    except Exception as exc:  # noqa: BLE001
        raise ConversionError(f"Unable to parse message: {exc.__class__.__name__}: {exc}") from exc


def extract_headers(message: Message) -> dict[str, str]:
    headers: dict[str, str] = {}
    for key, value in message.raw_items():
        headers[key] = decode_header_value(value)
    return headers


def _raw_body_text(raw: bytes) -> str:
    match = _HEADER_END_PATTERN.search(raw)
    body = raw[match.end():] if match else b""
    return body.decode("utf-8", errors="replace")


def _root_body(message: Message, raw: bytes) -> str:
    if message.is_multipart():
        return _raw_body_text(raw)
    return decode_part_payload(message)


def convert_mime(sender_address: str, recipients: Sequence[str], raw: bytes) -> MailMessage:
    message = parse_message(raw)

    try:
        headers = extract_headers(message)
        html = find_body(message, "text/html") or None
        plain_text = find_body(message, "text/plain") or None
        if html is None and plain_text is None:
            plain_text = UNSUPPORTED_CONTENT_MARKER + _root_body(message, raw)
    except Exception as exc:  # noqa: BLE001
        raise ConversionError(f"Unable to read message content: {exc.__class__.__name__}: {exc}") from exc

    return MailMessage(
        sender_address=sender_address,
        headers=headers,
        recipients=MailRecipients(to=tuple(MailAddress(address) for address in recipients)),
        reply_to=None,
        content=MailContent(
            subject=headers.get("Subject", ""),
            plain_text=plain_text,
            html=html,
        ),
    )
