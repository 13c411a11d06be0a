"""Append-only registry of hooks per event kind.

Registration order is invocation order. Hooks are never removed or reordered,
and duplicates are kept. Each kind's hooks are stored as an immutable tuple
that is replaced on every append, so a dispatch can iterate its snapshot
without holding the lock.

Usage
-----
>>> registry = HookRegistry()
>>> registry.register(EventKind.PUSH, audit_push)
>>> registry.handlers_for(EventKind.PUSH)
(<function audit_push ...>,)

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import threading
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ghbot.events import EventKind, WebhookEvent


@dc.dataclass(frozen=True, slots=True)
class DeliveryContext:
    """Per-delivery values passed to every hook.

    Attributes
    ----------
    delivery_id
        ``X-GitHub-Delivery`` GUID, or ``None`` when the sender omitted it.
    discriminator
        Raw ``X-GitHub-Event`` value.
    kind
        Decoded event kind, or ``None`` when a caller dispatches without one.
    received_at
        When the transport accepted the request, or when the context was
        built if the caller did not say.

    """

    delivery_id: str | None = None
    discriminator: str = ""
    kind: EventKind | None = None
    received_at: dt.datetime = dc.field(default_factory=lambda: dt.datetime.now(dt.UTC))


Hook = typ.Callable[
    [DeliveryContext, "WebhookEvent"],
    "cabc.Awaitable[None] | None",
]


class HookRegistry:
    """Ordered hook lists keyed by :class:`~ghbot.events.EventKind`."""

    def __init__(self, lock: threading.Lock | None = None) -> None:
        """Create an empty registry guarded by ``lock`` (or a private one)."""
        self._lock = lock if lock is not None else threading.Lock()
        self._hooks: dict[EventKind, tuple[Hook, ...]] = {}

    def register(self, kind: EventKind, hook: Hook) -> None:
        """Append ``hook`` to the chain for ``kind``."""
        with self._lock:
            self._hooks[kind] = (*self._hooks.get(kind, ()), hook)

    def handlers_for(self, kind: EventKind) -> tuple[Hook, ...]:
        """Return the current chain for ``kind`` in registration order."""
        with self._lock:
            return self._hooks.get(kind, ())

    def count(self, kind: EventKind) -> int:
        """Return how many hooks are registered for ``kind``."""
        return len(self.handlers_for(kind))

    def kinds(self) -> frozenset[EventKind]:
        """Return the kinds that have at least one hook."""
        with self._lock:
            return frozenset(self._hooks)


__all__ = ["DeliveryContext", "Hook", "HookRegistry"]
