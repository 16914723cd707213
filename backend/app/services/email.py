"""Email transports used by the notification dispatcher."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from app.core.config import Settings, settings
from app.core.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class EmailTransport:
    """Hands a rendered email to a provider."""

    def deliver(self, to: str, subject: str, html: str) -> None:
        raise NotImplementedError


class LogTransport(EmailTransport):
    """Development transport: writes the message to the log instead of sending it."""

    def deliver(self, to: str, subject: str, html: str) -> None:
        logger.info(f"[email:log] to={to} subject={subject!r} ({len(html)} bytes)")


class _HttpApiTransport(EmailTransport):
    url: str = ""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self._client = client

    def _payload(self, to: str, subject: str, html: str) -> dict:
        raise NotImplementedError

    def deliver(self, to: str, subject: str, html: str) -> None:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = self._payload(to, subject, html)
        try:
            if self._client is not None:
                response = self._client.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            else:
                response = httpx.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DeliveryError(
                f"{type(self).__name__} rejected message to {to}: "
                f"{exc.response.status_code} {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DeliveryError(f"{type(self).__name__} request failed: {exc}") from exc


class SendGridTransport(_HttpApiTransport):
    url = "https://api.sendgrid.com/v3/mail/send"

    def _payload(self, to: str, subject: str, html: str) -> dict:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.from_email, "name": self.from_name},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }


class ResendTransport(_HttpApiTransport):
    url = "https://api.resend.com/emails"

    def _payload(self, to: str, subject: str, html: str) -> dict:
        return {
            "from": f"{self.from_name} <{self.from_email}>",
            "to": [to],
            "subject": subject,
            "html": html,
        }


_PROVIDERS = {
    "sendgrid": SendGridTransport,
    "resend": ResendTransport,
}


def build_transport(config: Settings = settings) -> EmailTransport:
    """Pick the transport named by ``EMAIL_PROVIDER``."""
    provider = config.EMAIL_PROVIDER
    if provider == "log":
        return LogTransport()

    transport_cls = _PROVIDERS.get(provider)
    if transport_cls is None:
        raise ValueError(f"Unknown EMAIL_PROVIDER: {provider}")
    if not config.EMAIL_API_KEY:
        logger.warning(f"EMAIL_API_KEY is not set, falling back to log transport for {provider}")
        return LogTransport()

    return transport_cls(
        api_key=config.EMAIL_API_KEY,
        from_email=config.EMAIL_FROM,
        from_name=config.EMAIL_FROM_NAME,
        timeout=config.EMAIL_TIMEOUT_SECONDS,
    )
