from __future__ import annotations

import socket
import threading

from mailrelay.smtp import SmtpRelayServer
from mailrelay.smtp.session import BYE, HELLO, OK, SEND_DATA


def _read_until_closed(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def test_server_relays_each_connection_independently(recording_handler) -> None:  # noqa: ANN001
    server = SmtpRelayServer(("127.0.0.1", 0), "relay.example.com", recording_handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        host, port = server.server_address[:2]
        replies = []
        for index in range(2):
            with socket.create_connection((host, port), timeout=5) as client:
                client.sendall(
                    b"HELO client\r\n"
                    + f"MAIL FROM:<sender{index}@example.com>\r\n".encode()
                    + b"RCPT TO:<rcpt@example.com>\r\n"
                    b"DATA\r\n"
                    b"Subject: hi\r\n"
                    b"\r\n"
                    b"hello\r\n"
                    b"QUIT\r\n"
                )
                replies.append(_read_until_closed(client))
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)

    assert replies == [HELLO + OK + OK + OK + SEND_DATA + BYE] * 2
    assert sorted(e.mail_from for e in recording_handler.envelopes) == [
        "sender0@example.com",
        "sender1@example.com",
    ]
    assert all(e.content == "Subject: hi\r\n\r\nhello\r\n" for e in recording_handler.envelopes)
