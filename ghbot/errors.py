"""Failure taxonomy for webhook deliveries.

Each failure is local to one delivery. Client errors
(:class:`SignatureVerificationError`, :class:`EventDecodeError`) are raised
before any hook runs; server errors (:class:`UnsupportedEventKindError`,
:class:`HookError`) are raised by the dispatcher. The HTTP layer alone decides
the status code.
"""

from __future__ import annotations

import enum


class GhbotError(Exception):
    """Base class for delivery failures."""


class SignatureVerificationError(GhbotError):
    """Raised when a delivery's signature does not match the shared secret."""

    def __init__(self, message: str = "payload signature check failed") -> None:
        """Initialise with a message that never echoes the payload."""
        super().__init__(message)

    @classmethod
    def missing_signature(cls) -> SignatureVerificationError:
        """Return an error for deliveries without a signature header."""
        return cls("missing signature header")

    @classmethod
    def mismatch(cls) -> SignatureVerificationError:
        """Return an error for a signature that does not verify."""
        return cls()


class DecodeFailureReason(enum.StrEnum):
    """Machine-readable reasons for :class:`EventDecodeError`."""

    MISSING_EVENT_HEADER = "missing_event_header"
    UNKNOWN_EVENT = "unknown_event"
    INVALID_JSON = "invalid_json"
    INVALID_PAYLOAD = "invalid_payload"
    UNSUPPORTED_CONTENT_TYPE = "unsupported_content_type"


class EventDecodeError(GhbotError):
    """Raised when a delivery cannot be turned into a typed event."""

    def __init__(self, message: str, reason: DecodeFailureReason) -> None:
        """Store the reason alongside the message."""
        super().__init__(message)
        self.reason = reason

    @classmethod
    def missing_event_header(cls) -> EventDecodeError:
        """Return an error for deliveries without an event type header."""
        return cls(
            "missing X-GitHub-Event header",
            DecodeFailureReason.MISSING_EVENT_HEADER,
        )

    @classmethod
    def unknown_event(cls, discriminator: str) -> EventDecodeError:
        """Return an error for an event type the decoder does not know."""
        return cls(
            f"unknown X-GitHub-Event in message: {discriminator}",
            DecodeFailureReason.UNKNOWN_EVENT,
        )

    @classmethod
    def invalid_json(cls, detail: str) -> EventDecodeError:
        """Return an error for a body that is not a JSON object."""
        return cls(f"malformed payload: {detail}", DecodeFailureReason.INVALID_JSON)

    @classmethod
    def unsupported_content_type(cls, content_type: str) -> EventDecodeError:
        """Return an error for a body encoding GitHub does not send."""
        return cls(
            f"unsupported Content-Type: {content_type}",
            DecodeFailureReason.UNSUPPORTED_CONTENT_TYPE,
        )

    @classmethod
    def invalid_payload(cls, discriminator: str, detail: str) -> EventDecodeError:
        """Return an error for JSON that does not match the event shape."""
        return cls(
            f"invalid {discriminator} payload: {detail}",
            DecodeFailureReason.INVALID_PAYLOAD,
        )


class UnsupportedEventKindError(GhbotError):
    """Raised when the dispatcher has no concept of a delivery's kind."""

    def __init__(self, discriminator: str, message: str | None = None) -> None:
        """Initialise with the offending discriminator."""
        self.discriminator = discriminator
        super().__init__(message or f"unsupported event type: {discriminator}")

    @classmethod
    def mismatched(cls, discriminator: str, variant: str) -> UnsupportedEventKindError:
        """Return an error for an event whose variant disagrees with its tag."""
        return cls(
            discriminator,
            f"unsupported event type: {discriminator} (decoded as {variant})",
        )


class DispatchTimeoutError(GhbotError):
    """Raised by the transport when a delivery outlives its dispatch timeout."""

    def __init__(self, discriminator: str, timeout_s: float) -> None:
        """Initialise with the delivery kind and the exceeded limit."""
        self.discriminator = discriminator
        self.timeout_s = timeout_s
        super().__init__(
            f"dispatch of {discriminator} exceeded {timeout_s:g}s timeout"
        )


class HookError(GhbotError):
    """Raised when a registered hook fails; later hooks were not invoked.

    Attributes
    ----------
    kind
        Event kind whose hook chain was running.
    hook_index
        One-based position of the failing hook in registration order.
    cause
        The exception raised by the hook. Also available as ``__cause__``.

    """

    def __init__(self, kind: str, hook_index: int, cause: BaseException) -> None:
        """Wrap ``cause`` with the kind and position of the failing hook."""
        self.kind = kind
        self.hook_index = hook_index
        self.cause = cause
        super().__init__(f"error on hook: {cause}")


__all__ = [
    "DecodeFailureReason",
    "DispatchTimeoutError",
    "EventDecodeError",
    "GhbotError",
    "HookError",
    "SignatureVerificationError",
    "UnsupportedEventKindError",
]
