"""GitHub webhook bot with ordered, per-event-kind hooks.

Usage
-----
Build a bot, register hooks, and serve it::

    from ghbot import Bot, BotConfig, EventKind

    bot = Bot(BotConfig(webhook_secret="s3cret"))

    @bot.on(EventKind.ISSUES)
    async def triage(context, event):
        ...

    app = bot.asgi_app()
"""

from __future__ import annotations

from .bot import Bot
from .config import BotConfig
from .errors import (
    DispatchTimeoutError,
    EventDecodeError,
    GhbotError,
    HookError,
    SignatureVerificationError,
    UnsupportedEventKindError,
)
from .events import EventKind, WebhookEvent
from .observability import (
    EventLogger,
    FemtoEventLogger,
    NullEventLogger,
    TriggerLogRecord,
)
from .registry import DeliveryContext, Hook, HookRegistry

__all__ = [
    "Bot",
    "BotConfig",
    "DeliveryContext",
    "DispatchTimeoutError",
    "EventDecodeError",
    "EventKind",
    "EventLogger",
    "FemtoEventLogger",
    "GhbotError",
    "Hook",
    "HookError",
    "HookRegistry",
    "NullEventLogger",
    "SignatureVerificationError",
    "TriggerLogRecord",
    "UnsupportedEventKindError",
    "WebhookEvent",
]
