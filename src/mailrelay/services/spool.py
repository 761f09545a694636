from __future__ import annotations

import uuid
from pathlib import Path

from mailrelay.smtp.session import Envelope


class MailSpooler:
    def __init__(self, spool_dir: Path):
        self.spool_dir = spool_dir
        self.spool_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def render(envelope: Envelope) -> str:
        return (
            f"FROM: {envelope.mail_from}\r\n"
            f"TO: {','.join(envelope.rcpt_tos)}\r\n"
            f"\r\n{envelope.content}"
        )

    def write(self, envelope: Envelope) -> Path:
        path = self.spool_dir / f"{uuid.uuid4()}.mail"
        with path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(self.render(envelope))
        return path
