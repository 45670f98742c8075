"""
Outbound mail transports.

A transport takes a single message and reports whether the provider accepted it.
Transports never raise for a rejected message, the error text is returned in the
:class:`.SendResult` instead.
"""

from typing import Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel

from sendlater.config import MailConfig, get_config
from sendlater.logging import init_logger


class SendResult(BaseModel):
    success: bool
    error: Optional[str] = None


@runtime_checkable
class Transport(Protocol):
    async def send(self, to: str, subject: str, body: str) -> SendResult: ...


class SendGridTransport:
    """
    Send through the sendgrid v3 ``mail/send`` endpoint.

    The body is sent as both the plain text and html content of the message.
    """

    def __init__(self, config: Optional[MailConfig] = None, client: Optional[httpx.AsyncClient] = None):
        if config is None:
            config = get_config().mail
        if config.sendgrid_api_key is None:
            raise ValueError("A sendgrid api key is needed to use the sendgrid transport")
        self.config = config
        self._client = client
        self.logger = init_logger("services.transport")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    def payload(self, to: str, subject: str, body: str) -> dict:
        return {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": str(self.config.from_email)},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": body},
                {"type": "text/html", "value": body},
            ],
        }

    async def send(self, to: str, subject: str, body: str) -> SendResult:
        try:
            res = await self.client.post(
                self.config.sendgrid_url,
                json=self.payload(to, subject, body),
                headers={
                    "Authorization": f"Bearer {self.config.sendgrid_api_key.get_secret_value()}"
                },
            )
            res.raise_for_status()
        except httpx.HTTPStatusError as e:
            error = _sendgrid_error(e.response) or str(e)
            self.logger.warning("sendgrid rejected message to %s: %s", to, error)
            return SendResult(success=False, error=error)
        except httpx.HTTPError as e:
            self.logger.warning("Could not reach sendgrid: %s", e)
            return SendResult(success=False, error=str(e) or e.__class__.__name__)

        self.logger.debug("sendgrid accepted message to %s", to)
        return SendResult(success=True)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _sendgrid_error(response: httpx.Response) -> Optional[str]:
    """First error message in a sendgrid error body, if there is one"""
    try:
        errors = response.json().get("errors", [])
    except ValueError:
        return None
    if errors and isinstance(errors[0], dict):
        return errors[0].get("message")
    return None


class LogTransport:
    """Log messages instead of sending them. Always succeeds."""

    def __init__(self):
        self.logger = init_logger("services.transport")

    async def send(self, to: str, subject: str, body: str) -> SendResult:
        self.logger.info("Sending email to %s - %s\n%s", to, subject, body)
        return SendResult(success=True)

    async def close(self) -> None:
        pass


def get_transport(config: Optional[MailConfig] = None) -> SendGridTransport | LogTransport:
    """Transport selected by ``mail.transport``"""
    if config is None:
        config = get_config().mail
    if config.transport == "sendgrid":
        return SendGridTransport(config)
    return LogTransport()
