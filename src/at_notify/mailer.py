"""Mailer: hands rendered mail to the mail relay over HTTP.

POST {MAIL_API_URL}
    Authorization: Bearer {MAIL_API_KEY}
    {"from": ..., "to": ..., "subject": ..., "html": ...}
"""

import logging

import httpx

from config.settings import settings

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = settings.MAIL_API_URL if api_url is None else api_url
        self._api_key = settings.MAIL_API_KEY if api_key is None else api_key
        self._sender = sender or settings.MAIL_FROM
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self._api_url)

    async def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one mail. Raises httpx.HTTPError on transport or relay failure."""
        if not self.enabled:
            logger.info("Mail relay not configured; dropping %r to %s", subject, to)
            return
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}
        async with httpx.AsyncClient(
            timeout=settings.MAIL_TIMEOUT_SECONDS, transport=self._transport
        ) as client:
            response = await client.post(
                self._api_url,
                json={"from": self._sender, "to": to, "subject": subject, "html": html},
                headers=headers,
            )
            response.raise_for_status()
