from __future__ import annotations

import base64
import logging
from pathlib import Path
from types import SimpleNamespace

from mailrelay.delivery import MailClient
from mailrelay.errors import ConversionError, DeliveryError
from mailrelay.services import MailSpooler, RelayService
from mailrelay.smtp.session import OK, Envelope, SmtpSession, SmtpState


class StubClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.messages = []

    def send_mail(self, message):  # noqa: ANN001, ANN201
        if self.error is not None:
            raise self.error
        self.messages.append(message)
        return SimpleNamespace(status_code=202)


def _envelope() -> Envelope:
    return Envelope(
        mail_from="a@b",
        rcpt_tos=["c@d", "e@f"],
        data=["Subject: hello\r\n", "\r\n", "body line\r\n"],
    )


def test_relay_converts_and_delivers(settings, test_logger) -> None:  # noqa: ANN001
    client = StubClient()
    service = RelayService(settings=settings, logger=test_logger, client=client)

    result = service.handle_mail(_envelope())

    assert result.delivered is True
    assert result.status_code == 202
    assert result.error is None
    message = client.messages[0]
    assert message.sender_address == "a@b"
    assert [r.address for r in message.recipients.to] == ["c@d", "e@f"]
    assert message.content.subject == "hello"
    assert message.content.plain_text == "body line\r\n"


def test_relay_delivery_failure_is_reported_not_raised(settings, test_logger) -> None:  # noqa: ANN001
    service = RelayService(settings=settings, logger=test_logger, client=StubClient(DeliveryError("boom")))

    result = service.handle_mail(_envelope())

    assert result.delivered is False
    assert result.error == "delivery: boom"


def test_relay_spools_before_delivery(settings, test_logger, tmp_path: Path) -> None:  # noqa: ANN001
    spooler = MailSpooler(tmp_path / "spool")
    client = StubClient(DeliveryError("down"))
    service = RelayService(settings=settings, logger=test_logger, client=client, spooler=spooler)

    result = service.handle_mail(_envelope())

    assert result.spool_path is not None
    assert result.spool_path.suffix == ".mail"
    assert result.spool_path.read_bytes() == (
        b"FROM: a@b\r\nTO: c@d,e@f\r\n\r\nSubject: hello\r\n\r\nbody line\r\n"
    )
    assert result.error == "delivery: down"


def test_relay_without_sinks_drops_mail(settings, test_logger) -> None:  # noqa: ANN001
    service = RelayService(settings=settings, logger=test_logger)

    result = service.handle_mail(_envelope())

    assert service.client is None
    assert service.spooler is None
    assert result.delivered is False
    assert result.spool_path is None


def test_relay_builds_client_and_spooler_from_settings(settings, test_logger, tmp_path: Path) -> None:  # noqa: ANN001
    settings.endpoint = "https://relay-api.example.com/emails:send"
    settings.access_key = base64.b64encode(b"key").decode("ascii")
    settings.spool_dir = tmp_path / "configured-spool"

    service = RelayService(settings=settings, logger=test_logger)

    assert isinstance(service.client, MailClient)
    assert service.client.endpoint == settings.endpoint
    assert isinstance(service.spooler, MailSpooler)
    assert settings.spool_dir.is_dir()


def _deeply_nested_message(depth: int) -> list[str]:
    lines = ["Subject: nested\r\n"]
    for level in range(depth):
        lines.append(f'Content-Type: multipart/mixed; boundary="b{level}"\r\n')
        lines.append("\r\n")
        lines.append(f"--b{level}\r\n")
    lines.append("Content-Type: text/plain\r\n")
    lines.append("\r\n")
    lines.append("innermost\r\n")
    for level in reversed(range(depth)):
        lines.append(f"--b{level}--\r\n")
    return lines


def test_relay_conversion_failure_is_reported_not_raised(settings, test_logger, monkeypatch, caplog) -> None:  # noqa: ANN001
    def failing_convert(sender, recipients, raw):  # noqa: ANN001, ANN202
        raise ConversionError("Unable to parse message: broken")

    monkeypatch.setattr("mailrelay.services.relay.convert_mime", failing_convert)
    client = StubClient()
    service = RelayService(settings=settings, logger=test_logger, client=client)

    with caplog.at_level(logging.ERROR, logger="mailrelay-test"):
        result = service.handle_mail(_envelope())

    assert result.delivered is False
    assert result.error == "conversion: Unable to parse message: broken"
    assert client.messages == []
    assert "Unable to convert mail" in caplog.text


def test_session_survives_unconvertible_message(settings, test_logger, caplog) -> None:  # noqa: ANN001
    client = StubClient()
    service = RelayService(settings=settings, logger=test_logger, client=client)
    session = SmtpSession("relay.example.com", service)

    for line in ["HELO x\r\n", "MAIL FROM:<a@b>\r\n", "RCPT TO:<c@d>\r\n", "DATA\r\n"]:
        session.handle_line(line)
    for line in _deeply_nested_message(3000):
        session.handle_line(line)

    with caplog.at_level(logging.ERROR, logger="mailrelay-test"):
        assert session.handle_line(".\r\n") == OK

    assert session.state is SmtpState.FRESH
    assert client.messages == []
    assert "Unable to convert mail" in caplog.text

    for line in ["HELO x\r\n", "MAIL FROM:<a@b>\r\n", "RCPT TO:<c@d>\r\n", "DATA\r\n", "hello\r\n"]:
        session.handle_line(line)
    assert session.handle_line(".\r\n") == OK
    assert len(client.messages) == 1
