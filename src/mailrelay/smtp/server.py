from __future__ import annotations

import logging
import socket
import socketserver

from mailrelay.core.logging import format_peer, get_logger, new_correlation_id

from .session import MailHandler, SmtpSession


class SmtpRequestHandler(socketserver.BaseRequestHandler):
    server: SmtpRelayServer  # type: ignore[assignment]

    def handle(self) -> None:
        sock: socket.socket = self.request
        correlation_id = new_correlation_id()
        peer = format_peer(self.client_address)
        logger = get_logger("mailrelay.smtp", correlation_id, peer=peer)
        logger.info("Accepted connection from %s", peer)

        session = SmtpSession(self.server.domain, self.server.mail_handler, logger=logger)
        session.run(sock)
        logger.info("Connection from %s closed", peer)


class SmtpRelayServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        server_address: tuple[str, int],
        domain: str,
        mail_handler: MailHandler,
        handler_class: type[socketserver.BaseRequestHandler] = SmtpRequestHandler,
    ) -> None:
        self.domain = domain
        self.mail_handler = mail_handler
        self.logger = logging.getLogger("mailrelay.smtp")
        super().__init__(server_address, handler_class)

    def handle_error(self, request, client_address) -> None:  # noqa: ANN001
        self.logger.exception("Session with %s terminated with an error", client_address)
