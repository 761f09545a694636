from .server import SmtpRelayServer, SmtpRequestHandler
from .session import Envelope, MailHandler, SmtpSession, SmtpState

__all__ = [
    "Envelope",
    "MailHandler",
    "SmtpRelayServer",
    "SmtpRequestHandler",
    "SmtpSession",
    "SmtpState",
]
