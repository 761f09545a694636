from .client import MailClient, serialize_message
from .models import MailAddress, MailContent, MailMessage, MailRecipients

__all__ = [
    "MailAddress",
    "MailClient",
    "MailContent",
    "MailMessage",
    "MailRecipients",
    "serialize_message",
]
