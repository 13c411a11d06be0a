"""Application factory for the bot's Falcon ASGI application.

Usage
-----
Serve a bot::

    from ghbot.api.app import create_app

    app = create_app(bot)

The webhook route comes from ``bot.config.webhook_path`` unless
``webhook_path`` is given explicitly.

"""

from __future__ import annotations

import typing as typ

import falcon.asgi

from ghbot.api.errors import register_error_handlers
from ghbot.api.health.resources import HealthResource, ReadyResource
from ghbot.api.webhook import WebhookResource

if typ.TYPE_CHECKING:
    from ghbot.bot import Bot

__all__ = ["create_app"]


def create_app(bot: Bot, *, webhook_path: str | None = None) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    bot
        Bot that verifies, decodes, and dispatches deliveries.
    webhook_path
        Optional override for the delivery route.

    Returns
    -------
    falcon.asgi.App
        App exposing the webhook route, ``/health``, and ``/ready``.

    """
    app = falcon.asgi.App()

    app.add_route(webhook_path or bot.config.webhook_path, WebhookResource(bot))
    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(bot.registry))

    register_error_handlers(app)

    return app
