"""Line-oriented SMTP session state machine.

One ``SmtpSession`` serves one connection. Commands that are unknown or
arrive in the wrong state get no reply at all (zero bytes) instead of an
SMTP error code; strict clients may stall on them.
"""

from __future__ import annotations

import enum
import logging
import re
import socket
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol

HELLO = b"220 Simple SMTP Relay Server\r\n"
OK = b"250 OK\r\n"
AUTH_OK = b"235 OK\r\n"
SEND_DATA = b"354 End data with <CR><LF>.<CR><LF>\r\n"
BYE = b"221 Bye\r\n"
EMPTY = b""

_TOKEN_SPLIT = re.compile(r"[\s:]+")
_NOOP_COMMANDS = frozenset({"noop", "help", "info", "vrfy", "expn"})


class SmtpState(enum.Enum):
    FRESH = "fresh"
    GREETED = "greeted"
    RCPT = "rcpt"
    DATA = "data"


@dataclass(slots=True)
class Envelope:
    mail_from: str = ""
    rcpt_tos: list[str] = field(default_factory=list)
    data: list[str] = field(default_factory=list)

    @property
    def content(self) -> str:
        return "".join(self.data)


class MailHandler(Protocol):
    def handle_mail(self, envelope: Envelope) -> object: ...


def tokenize(line: str) -> list[str]:
    return [token for token in _TOKEN_SPLIT.split(line) if token]


def extract_address(tokens: list[str]) -> str:
    address = tokens[2].lower() if len(tokens) > 2 else ""
    if address.startswith("<") and address.endswith(">"):
        address = address[1:-1]
    return address.strip()


class SmtpSession:
    def __init__(
        self,
        domain: str,
        handler: MailHandler,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.domain = domain
        self.handler = handler
        self.logger = logger or logging.getLogger(__name__)
        self.state = SmtpState.FRESH
        self.envelope = Envelope()
        self._ehlo_greeting = f"250-{domain} Hello {domain}\r\n250 AUTH PLAIN LOGIN\r\n".encode()

    def handle_line(self, line: str) -> bytes:
        tokens = tokenize(line)
        command = tokens[0].lower() if tokens else ""
        state = self.state

        if command == "helo" and state is SmtpState.FRESH:
            self.logger.debug("Got HELO")
            self.state = SmtpState.GREETED
            return OK

        if command == "ehlo" and state is SmtpState.FRESH:
            self.logger.debug("Got EHLO")
            self.state = SmtpState.GREETED
            return self._ehlo_greeting

        if command in _NOOP_COMMANDS:
            self.logger.debug("Got command: %s", command)
            return OK

        if command == "rset":
            self.logger.debug("Resetting")
            self.reset()
            return OK

        if command == "auth":
            self.logger.debug("Acknowledging AUTH")
            return AUTH_OK

        if command == "mail" and state is SmtpState.GREETED:
            address = extract_address(tokens)
            if not address:
                self.logger.error("Received empty FROM address")
                return EMPTY
            self.logger.debug("Mail from: %s", address)
            self.envelope.mail_from = address
            self.state = SmtpState.RCPT
            return OK

        if command == "rcpt" and state is SmtpState.RCPT:
            address = extract_address(tokens)
            if not address:
                self.logger.error("Received empty TO address")
                return EMPTY
            self.logger.debug("Mail to: %s", address)
            self.envelope.rcpt_tos.append(address)
            return OK

        if command == "data" and state is SmtpState.RCPT:
            self.logger.debug("Awaiting data")
            self.state = SmtpState.DATA
            return SEND_DATA

        if state is SmtpState.DATA:
            if tokens == ["."]:
                self.logger.debug("Data end")
                self.complete()
                return OK
            if command == "quit":
                self.logger.debug("Got QUIT")
                self.complete()
                return BYE
            self.envelope.data.append(line)
            return EMPTY

        if command == "quit":
            self.logger.debug("Got QUIT")
            return BYE

        self.logger.warning("Unexpected command: %s", command)
        return EMPTY

    def reset(self) -> None:
        self.state = SmtpState.FRESH
        self.envelope = Envelope()

    def complete(self) -> None:
        envelope = self.envelope
        self.reset()
        self.handler.handle_mail(envelope)

    def run(self, connection: socket.socket) -> None:
        reader: BinaryIO = connection.makefile("rb")
        writer: BinaryIO = connection.makefile("wb")
        try:
            self.serve(reader, writer, connection)
        finally:
            reader.close()
            writer.close()

    def serve(self, reader: BinaryIO, writer: BinaryIO, connection: socket.socket | None = None) -> None:
        writer.write(HELLO)
        writer.flush()

        while True:
            raw = reader.readline()
            if not raw:
                self.logger.debug("Client disconnected (or EOF)")
                break

            line = raw.decode("utf-8", errors="replace")
            reply = self.handle_line(line)

            if reply == BYE:
                writer.write(reply)
                writer.flush()
                if connection is not None:
                    connection.shutdown(socket.SHUT_RDWR)
                break

            if reply:
                writer.write(reply)
                writer.flush()
