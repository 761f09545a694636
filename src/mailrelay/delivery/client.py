from __future__ import annotations

import json
import logging

import requests

from mailrelay.core.signing import SigningContext, SigningError, sign_request
from mailrelay.errors import DeliveryError

from .models import MailMessage


def serialize_message(message: MailMessage) -> bytes:
    try:
        body = json.dumps(message.to_payload(), ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise DeliveryError(f"Unable to serialize message: {exc}") from exc
    return body.encode("utf-8")


class MailClient:
    def __init__(
        self,
        endpoint: str,
        access_key: str,
        *,
        timeout_sec: float | None = None,
        session: requests.Session | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.endpoint = endpoint
        self._access_key = access_key
        self.timeout_sec = timeout_sec
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def __repr__(self) -> str:
        return f"MailClient(endpoint={self.endpoint!r})"

    def sign(self, body: bytes) -> SigningContext:
        try:
            return sign_request(self.endpoint, self._access_key, body)
        except SigningError as exc:
            raise DeliveryError(str(exc)) from exc

    def send_mail(self, message: MailMessage) -> requests.Response:
        body = serialize_message(message)
        context = self.sign(body)

        self.logger.debug("URL: %s", context.url)
        self.logger.debug("Host: %s", context.host)
        self.logger.debug("Path & Query: %s", context.path_and_query)
        self.logger.debug("Date: %s", context.date)
        self.logger.debug("String to sign: %r", context.string_to_sign)
        self.logger.debug("Repeatability-Request-Id: %s", context.request_id)

        try:
            response = self.session.post(
                context.url,
                data=body,
                headers=context.headers(),
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise DeliveryError(f"{exc.__class__.__name__}: {exc}") from exc

        # Any completed exchange counts as delivered; the status is informational.
        self.logger.info("Response status: %s", response.status_code)
        self.logger.debug("Response text: %s", response.text)
        return response
