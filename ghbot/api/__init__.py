"""HTTP transport for the bot.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application that receives webhook deliveries and maps dispatch
failures to HTTP status codes.

Usage
-----
Create the application for a bot::

    from ghbot.api import create_app

    app = create_app(bot)
"""

from ghbot.api.app import create_app

__all__ = ["create_app"]
