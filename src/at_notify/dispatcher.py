"""NotificationDispatcher: fire-and-forget mail side effects.

notify() schedules a task and returns at once. The task renders the
template and hands it to the mailer; every failure is logged and dropped.
Notifications sit outside the transactional boundary of bidding and
sweeping, so callers dispatch only after their transaction committed.
"""

import asyncio
import logging
from typing import Any

from src.at_notify.mailer import Mailer
from src.at_notify.templates import render

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, mailer: Mailer | None = None) -> None:
        self._mailer = mailer or Mailer()
        self._tasks: set[asyncio.Task[None]] = set()

    def notify(
        self, recipient: str | None, template_name: str, data: dict[str, Any]
    ) -> None:
        """Schedule a mail. Never raises."""
        if not recipient:
            logger.warning("No recipient for %s notification; skipped", template_name)
            return
        try:
            task = asyncio.get_running_loop().create_task(
                self._deliver(recipient, template_name, data)
            )
        except RuntimeError:
            logger.exception("Could not schedule %s notification", template_name)
            return
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, recipient: str, template_name: str, data: dict[str, Any]) -> None:
        try:
            mail = render(template_name, data)
            await self._mailer.send(recipient, mail.subject, mail.html)
        except Exception:
            logger.exception("Failed to send %s notification to %s", template_name, recipient)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for in-flight notifications (shutdown, tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    global _dispatcher  # noqa: PLW0603
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
