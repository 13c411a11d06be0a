"""Falcon resource that receives webhook deliveries.

Only ``POST`` is routed; Falcon answers other methods with 405. Failures are
raised as :mod:`ghbot.errors` exceptions and mapped to responses by the
handlers in :mod:`ghbot.api.errors`.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import typing as typ
from http import HTTPStatus

from ghbot.decode import EVENT_HEADER
from ghbot.errors import DispatchTimeoutError

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from ghbot.bot import Bot

__all__ = ["WebhookResource"]


class WebhookResource:
    """Hand each delivery to a :class:`~ghbot.bot.Bot`.

    When the bot is configured with ``dispatch_timeout_s`` the whole
    delivery runs under :func:`asyncio.timeout`; a hook still running at the
    deadline is cancelled.

    """

    def __init__(self, bot: Bot) -> None:
        """Bind the resource to the bot that dispatches deliveries."""
        self._bot = bot

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST deliveries.

        Parameters
        ----------
        req
            Falcon request carrying the raw body and GitHub headers.
        resp
            Falcon response set to 200 when every hook succeeded.

        """
        received_at = dt.datetime.now(dt.UTC)
        body = await req.stream.read()
        timeout_s = self._bot.config.dispatch_timeout_s

        try:
            async with asyncio.timeout(timeout_s):
                context = await self._bot.process_delivery(
                    body, req.headers, received_at=received_at
                )
        except TimeoutError as exc:
            if timeout_s is None:
                raise
            discriminator = req.get_header(EVENT_HEADER) or ""
            raise DispatchTimeoutError(discriminator, timeout_s) from exc

        resp.status = HTTPStatus.OK
        resp.media = {"status": "ok", "delivery": context.delivery_id}
