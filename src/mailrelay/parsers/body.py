from __future__ import annotations

from collections.abc import Iterator
from email.message import Message


def decode_part_payload(part: Message) -> str:
    if part.is_multipart():
        return ""
    payload = part.get_payload(decode=True)
    if payload is None:
        return ""
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def iter_subparts(part: Message) -> Iterator[Message]:
    if not part.is_multipart():
        return
    for child in part.get_payload():
        if isinstance(child, Message):
            yield child


def find_body(part: Message, content_type: str) -> str:
    """Depth-first, pre-order search for the first non-empty body of ``content_type``.

    Returns an empty string when no part matches; callers treat that as absent.
    """
    if part.get_content_type() == content_type:
        body = decode_part_payload(part)
        if body:
            return body

    for child in iter_subparts(part):
        body = find_body(child, content_type)
        if body:
            return body

    return ""
