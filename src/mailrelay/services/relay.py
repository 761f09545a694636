from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from mailrelay.config import Settings
from mailrelay.delivery import MailClient
from mailrelay.errors import ConversionError, DeliveryError
from mailrelay.parsers import convert_mime
from mailrelay.smtp.session import Envelope

from .spool import MailSpooler


@dataclass(slots=True)
class RelayResult:
    spool_path: Path | None = None
    delivered: bool = False
    status_code: int | None = None
    error: str | None = None


class RelayService:
    """Completion handler for SMTP sessions: spool, convert, deliver.

    Failures are logged and reported in the returned ``RelayResult``; they
    never propagate into the session, so the connection keeps accepting mail.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger | logging.LoggerAdapter,
        client: MailClient | None = None,
        spooler: MailSpooler | None = None,
    ):
        self.settings = settings
        self.logger = logger
        if client is None and settings.delivery_enabled:
            client = MailClient(
                settings.endpoint,
                settings.access_key,
                timeout_sec=settings.delivery_timeout_sec,
                logger=logger,
            )
        if spooler is None and settings.spool_dir is not None:
            spooler = MailSpooler(settings.spool_dir)
        self.client = client
        self.spooler = spooler

    def handle_mail(self, envelope: Envelope) -> RelayResult:
        self.logger.info("Received mail FROM: %s TO: %s", envelope.mail_from, ",".join(envelope.rcpt_tos))
        result = RelayResult()

        if self.spooler is not None:
            try:
                result.spool_path = self.spooler.write(envelope)
                self.logger.info("Mail spooled to %s", result.spool_path)
            except OSError as exc:
                self.logger.error("Unable to spool mail: %s", exc)
                result.error = f"spool: {exc}"

        if self.client is None:
            if self.spooler is None:
                self.logger.warning("No delivery endpoint or spool directory configured, mail dropped")
            return result

        try:
            message = convert_mime(envelope.mail_from, envelope.rcpt_tos, envelope.content.encode("utf-8"))
        except ConversionError as exc:
            self.logger.error("Unable to convert mail: %s", exc)
            result.error = f"conversion: {exc}"
            return result

        try:
            response = self.client.send_mail(message)
        except DeliveryError as exc:
            self.logger.error("Unable to deliver mail: %s", exc)
            result.error = f"delivery: {exc}"
            return result

        result.delivered = True
        result.status_code = response.status_code
        return result
