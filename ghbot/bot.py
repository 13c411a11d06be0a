"""The webhook bot: hook registration and event dispatch.

A :class:`Bot` is built once at startup, wired with hooks, and handed to the
HTTP transport. Each delivery is verified, decoded, logged once, and then
passed to the hooks registered for its kind, in registration order. The
first hook that raises stops the chain and fails the delivery.

Usage
-----
Register hooks and serve the bot::

    from ghbot import Bot, BotConfig, EventKind

    bot = Bot(BotConfig(webhook_secret="s3cret"))

    @bot.on(EventKind.PUSH)
    async def audit_push(context, event):
        ...

    app = bot.asgi_app()

"""

from __future__ import annotations

import datetime as dt
import inspect
import threading
import typing as typ

from ghbot.config import BotConfig
from ghbot.decode import (
    DELIVERY_HEADER,
    EVENT_HEADER,
    MsgspecEventDecoder,
    extract_json_body,
)
from ghbot.errors import (
    EventDecodeError,
    HookError,
    SignatureVerificationError,
    UnsupportedEventKindError,
)
from ghbot.events import EventKind, event_type_for, parse_event_kind
from ghbot.observability import (
    NullEventLogger,
    TriggerLogRecord,
    report_logger_failure,
)
from ghbot.registry import DeliveryContext, HookRegistry
from ghbot.verify import HmacSignatureVerifier, select_signature

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import falcon.asgi

    from ghbot.decode import EventDecoder
    from ghbot.events import WebhookEvent
    from ghbot.observability import EventLogger
    from ghbot.registry import Hook
    from ghbot.verify import SignatureVerifier

HookT = typ.TypeVar("HookT", bound="Hook")


class Bot:
    """Own the hook registry, the shared secret, and the event logger.

    Registration and logger swaps share one lock, held only while the
    registry or logger reference is touched, never while a hook runs.
    """

    def __init__(
        self,
        config: BotConfig | None = None,
        *,
        verifier: SignatureVerifier | None = None,
        decoder: EventDecoder | None = None,
        event_logger: EventLogger | None = None,
    ) -> None:
        """Create a bot with no hooks.

        Parameters
        ----------
        config
            Process settings. The secret cannot change afterwards.
        verifier
            Signature check; defaults to :class:`HmacSignatureVerifier`.
        decoder
            Body decoder; defaults to :class:`MsgspecEventDecoder`.
        event_logger
            Dispatch log sink; defaults to :class:`NullEventLogger`.

        """
        self._config = config if config is not None else BotConfig()
        self._secret = self._config.secret_bytes
        self._lock = threading.Lock()
        self._registry = HookRegistry(self._lock)
        self._verifier = verifier if verifier is not None else HmacSignatureVerifier()
        self._decoder = decoder if decoder is not None else MsgspecEventDecoder()
        self._event_logger: EventLogger = (
            event_logger if event_logger is not None else NullEventLogger()
        )

    @property
    def config(self) -> BotConfig:
        """Return the settings the bot was built with."""
        return self._config

    @property
    def registry(self) -> HookRegistry:
        """Return the hook registry."""
        return self._registry

    @property
    def event_logger(self) -> EventLogger:
        """Return the current dispatch log sink."""
        with self._lock:
            return self._event_logger

    def set_logger(self, event_logger: EventLogger) -> None:
        """Replace the dispatch log sink for subsequent deliveries."""
        with self._lock:
            self._event_logger = event_logger

    def register(self, kind: EventKind | str, hook: Hook) -> None:
        """Append ``hook`` to the chain for ``kind``.

        Registration returns nothing and cannot fail for an
        :class:`EventKind`. A plain string is coerced first.

        Raises
        ------
        ValueError
            If ``kind`` is a string that names no :class:`EventKind`.

        """
        self._registry.register(EventKind(kind), hook)

    def on(self, kind: EventKind | str) -> cabc.Callable[[HookT], HookT]:
        """Return a decorator that registers a hook for ``kind``.

        Coercion happens here, so an unknown string raises ``ValueError``
        before any hook is decorated. The decorator itself cannot fail.
        """
        event_kind = EventKind(kind)

        def _decorator(hook: HookT) -> HookT:
            self._registry.register(event_kind, hook)
            return hook

        return _decorator

    async def handle(
        self,
        context: DeliveryContext,
        discriminator: str,
        event: WebhookEvent,
    ) -> None:
        """Log one decoded delivery and run its hooks in order.

        Raises
        ------
        UnsupportedEventKindError
            If ``discriminator`` is not a known kind or ``event`` is not that
            kind's variant. No hook runs.
        HookError
            If a hook raises. Hooks after it do not run.

        """
        event_logger = self.event_logger
        kind = parse_event_kind(discriminator)
        if kind is None:
            self._emit(event_logger, "log_unsupported", discriminator)
            raise UnsupportedEventKindError(discriminator)
        if not isinstance(event, event_type_for(kind)):
            self._emit(event_logger, "log_unsupported", discriminator)
            raise UnsupportedEventKindError.mismatched(
                discriminator, type(event).__name__
            )

        record = TriggerLogRecord.from_event(discriminator, event)
        self._emit(event_logger, "log_trigger", record)

        for index, hook in enumerate(self._registry.handlers_for(kind), start=1):
            try:
                outcome = hook(context, event)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as exc:
                self._emit(event_logger, "log_hook_failed", kind, index, exc)
                raise HookError(kind, index, exc) from exc

    async def process_delivery(
        self,
        body: bytes,
        headers: cabc.Mapping[str, str],
        *,
        received_at: dt.datetime | None = None,
    ) -> DeliveryContext:
        """Verify, decode, and dispatch one raw delivery.

        Parameters
        ----------
        body
            Raw request body exactly as received.
        headers
            Request headers; names are matched case-insensitively.
        received_at
            When the transport accepted the request. Defaults to now.

        Returns
        -------
        DeliveryContext
            The context the hooks received.

        Raises
        ------
        SignatureVerificationError
            If the signature does not match the shared secret.
        EventDecodeError
            If the event header is missing or the body does not decode.

        """
        lowered = {name.lower(): value for name, value in headers.items()}
        signature = select_signature(lowered)
        if not self._verifier.verify(body, signature, self._secret):
            if signature is None:
                raise SignatureVerificationError.missing_signature()
            raise SignatureVerificationError.mismatch()

        discriminator = lowered.get(EVENT_HEADER.lower(), "").strip()
        if not discriminator:
            raise EventDecodeError.missing_event_header()

        document = extract_json_body(lowered.get("content-type"), body)
        kind, event = self._decoder.decode(discriminator, document)

        context = DeliveryContext(
            delivery_id=lowered.get(DELIVERY_HEADER.lower()),
            discriminator=discriminator,
            kind=kind,
            received_at=received_at or dt.datetime.now(dt.UTC),
        )
        await self.handle(context, discriminator, event)
        return context

    def asgi_app(self) -> falcon.asgi.App:
        """Build the Falcon ASGI application serving this bot."""
        from ghbot.api.app import create_app

        return create_app(self)

    @staticmethod
    def _emit(event_logger: EventLogger, method: str, *args: object) -> None:
        try:
            getattr(event_logger, method)(*args)
        except Exception as exc:  # noqa: BLE001 - a broken sink must not fail dispatch
            report_logger_failure(event_logger, exc)


__all__ = ["Bot"]
