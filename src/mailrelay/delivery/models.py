from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class MailAddress:
    address: str
    display_name: str | None = None

    @classmethod
    def with_display_name(cls, address: str, display_name: str) -> MailAddress:
        return cls(address=address, display_name=display_name)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"address": self.address}
        if self.display_name is not None:
            payload["displayName"] = self.display_name
        return payload


@dataclass(frozen=True, slots=True)
class MailRecipients:
    to: tuple[MailAddress, ...]
    cc: tuple[MailAddress, ...] | None = None
    bcc: tuple[MailAddress, ...] | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"to": [item.to_payload() for item in self.to]}
        if self.cc is not None:
            payload["cc"] = [item.to_payload() for item in self.cc]
        if self.bcc is not None:
            payload["bcc"] = [item.to_payload() for item in self.bcc]
        return payload


@dataclass(frozen=True, slots=True)
class MailContent:
    subject: str
    plain_text: str | None = None
    html: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"subject": self.subject}
        if self.plain_text is not None:
            payload["plainText"] = self.plain_text
        if self.html is not None:
            payload["html"] = self.html
        return payload


@dataclass(frozen=True, slots=True)
class MailMessage:
    sender_address: str
    recipients: MailRecipients
    content: MailContent
    headers: dict[str, str] | None = None
    reply_to: MailAddress | None = None

    def to_payload(self) -> dict[str, Any]:
        # Key order follows the API's documented request body.
        payload: dict[str, Any] = {"senderAddress": self.sender_address}
        if self.headers is not None:
            payload["headers"] = dict(self.headers)
        payload["recipients"] = self.recipients.to_payload()
        if self.reply_to is not None:
            payload["replyTo"] = self.reply_to.to_payload()
        payload["content"] = self.content.to_payload()
        return payload
