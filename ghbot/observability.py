"""Trigger logging for webhook dispatch.

Every delivery that reaches the dispatcher produces exactly one trigger line
before any hook runs. The line is a compact JSON object holding the event
type and, when the event variant reports them and the delivery carries them,
the sender login, organisation, and repository name::

    {"type":"push","sender":"octocat","repo":"hello-world"}

Usage
-----
>>> event_logger = FemtoEventLogger()
>>> event_logger.log_trigger(TriggerLogRecord(type="ping"))

"""

from __future__ import annotations

import enum
import typing as typ

import msgspec

from ghbot.events import TriggerField
from ghbot.logging import get_logger, log_error, log_info, log_warning

if typ.TYPE_CHECKING:
    from ghbot.events import WebhookEvent

logger = get_logger(__name__)


class DispatchEventType(enum.StrEnum):
    """Structured log event types for dispatch."""

    TRIGGERED = "dispatch.triggered"
    HOOK_FAILED = "dispatch.hook.failed"
    UNSUPPORTED = "dispatch.unsupported"
    LOGGER_FAILED = "dispatch.logger.failed"


class TriggerLogRecord(msgspec.Struct, frozen=True, kw_only=True, omit_defaults=True):
    """Who triggered a delivery, built fresh per delivery and never stored."""

    type: str
    sender: str | None = None
    org: str | None = None
    repo: str | None = None

    @classmethod
    def from_event(cls, discriminator: str, event: WebhookEvent) -> TriggerLogRecord:
        """Build a record from the fields ``event`` reports and carries.

        Absent nested objects and absent names are omitted rather than
        treated as errors.
        """
        fields = event.trigger_fields
        return cls(
            type=discriminator,
            sender=event.sender_login if TriggerField.SENDER in fields else None,
            org=event.org_login if TriggerField.ORG in fields else None,
            repo=event.repo_name if TriggerField.REPO in fields else None,
        )

    def to_line(self) -> str:
        """Return the record as a single JSON line."""
        return msgspec.json.encode(self).decode("utf-8")


@typ.runtime_checkable
class EventLogger(typ.Protocol):
    """Sink for dispatch log lines.

    Implementations should not raise; the dispatcher reports and discards
    any exception a sink raises.
    """

    def log_trigger(self, record: TriggerLogRecord) -> None:
        """Record that a delivery is about to be dispatched."""
        ...

    def log_hook_failed(
        self, kind: str, hook_index: int, error: BaseException
    ) -> None:
        """Record the hook failure that stopped a delivery."""
        ...

    def log_unsupported(self, discriminator: str) -> None:
        """Record a delivery whose kind the dispatcher does not support."""
        ...


class NullEventLogger:
    """Accept and discard every line. The bot's default sink."""

    def log_trigger(self, record: TriggerLogRecord) -> None:
        """Discard the trigger record."""
        del record

    def log_hook_failed(
        self, kind: str, hook_index: int, error: BaseException
    ) -> None:
        """Discard the hook failure."""
        del kind, hook_index, error

    def log_unsupported(self, discriminator: str) -> None:
        """Discard the unsupported delivery."""
        del discriminator


class FemtoEventLogger:
    """Emit dispatch lines through femtologging."""

    def log_trigger(self, record: TriggerLogRecord) -> None:
        """Log the trigger line at INFO."""
        log_info(logger, "[%s] %s", DispatchEventType.TRIGGERED, record.to_line())

    def log_hook_failed(
        self, kind: str, hook_index: int, error: BaseException
    ) -> None:
        """Log the failing hook and its error at ERROR."""
        log_error(
            logger,
            "[%s] kind=%s hook_index=%d error_type=%s error_message=%s",
            DispatchEventType.HOOK_FAILED,
            kind,
            hook_index,
            type(error).__name__,
            str(error),
            exc_info=error,
        )

    def log_unsupported(self, discriminator: str) -> None:
        """Log the unsupported discriminator at WARNING."""
        log_warning(
            logger,
            "[%s] unsupported event type: %s",
            DispatchEventType.UNSUPPORTED,
            discriminator,
        )


def report_logger_failure(sink: object, error: Exception) -> None:
    """Report an exception raised by a pluggable event logger."""
    log_warning(
        logger,
        "[%s] sink=%s error_type=%s error_message=%s",
        DispatchEventType.LOGGER_FAILED,
        type(sink).__name__,
        type(error).__name__,
        str(error),
        exc_info=error,
    )


__all__ = [
    "DispatchEventType",
    "EventLogger",
    "FemtoEventLogger",
    "NullEventLogger",
    "TriggerLogRecord",
    "report_logger_failure",
]
