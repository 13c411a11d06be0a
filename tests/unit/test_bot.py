"""Unit tests for hook registration and dispatch on :class:`ghbot.Bot`."""

from __future__ import annotations

import asyncio
import datetime as dt
import typing as typ

import msgspec
import pytest

from ghbot import Bot, BotConfig, DeliveryContext, EventKind, HookError
from ghbot.errors import (
    DecodeFailureReason,
    EventDecodeError,
    SignatureVerificationError,
    UnsupportedEventKindError,
)
from ghbot.events import Actor, RepositoryRef
from ghbot.events.models import PushEvent, StarEvent
from ghbot.observability import TriggerLogRecord
from tests.helpers.deliveries import (
    SECRET,
    push_payload,
    signed_delivery,
    star_payload,
)
from tests.helpers.recording import HookRecorder, RecordingEventLogger

if typ.TYPE_CHECKING:
    from ghbot.observability import EventLogger


def _context(discriminator: str = "push") -> DeliveryContext:
    return DeliveryContext(delivery_id="d-1", discriminator=discriminator)


def _push() -> PushEvent:
    return PushEvent(
        ref="refs/heads/main",
        sender=Actor(login="octocat"),
        repository=RepositoryRef(name="hello-world"),
    )


class _RaisingEventLogger:
    """Event logger whose every method raises."""

    def log_trigger(self, record: TriggerLogRecord) -> None:
        raise OSError("sink unavailable")

    def log_hook_failed(
        self, kind: str, hook_index: int, error: BaseException
    ) -> None:
        raise OSError("sink unavailable")

    def log_unsupported(self, discriminator: str) -> None:
        raise OSError("sink unavailable")


class TestRegistration:
    """Tests for Bot.register and Bot.on."""

    def test_register_accepts_string_kinds(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """String discriminators are coerced to EventKind."""
        bot.register("push", recorder.succeeding("A"))

        assert bot.registry.count(EventKind.PUSH) == 1

    def test_register_rejects_unknown_kinds(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Registration is limited to the closed set of kinds."""
        with pytest.raises(ValueError, match="not_a_real_kind"):
            bot.register("not_a_real_kind", recorder.succeeding("A"))

    @pytest.mark.parametrize("kind", list(EventKind))
    def test_register_never_fails_for_event_kinds(
        self, bot: Bot, recorder: HookRecorder, kind: EventKind
    ) -> None:
        """Every EventKind registers with no return value."""
        assert bot.register(kind, recorder.succeeding("A")) is None
        assert bot.registry.count(kind) == 1

    def test_on_decorator_returns_hook_unchanged(self, bot: Bot) -> None:
        """The decorator registers and hands back the original function."""

        async def audit(context: DeliveryContext, event: object) -> None:
            del context, event

        decorated = bot.on(EventKind.STAR)(audit)

        assert decorated is audit
        assert bot.registry.handlers_for(EventKind.STAR) == (audit,)


class TestDispatch:
    """Tests for Bot.handle."""

    @pytest.mark.asyncio
    async def test_zero_hooks_succeeds_with_one_trigger_line(
        self, bot: Bot, event_logger: RecordingEventLogger
    ) -> None:
        """A kind with no hooks still logs once and succeeds."""
        await bot.handle(_context("star"), "star", StarEvent())

        assert event_logger.lines == [("trigger", TriggerLogRecord(type="star"))]

    @pytest.mark.asyncio
    async def test_hooks_run_in_registration_order(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Hooks A, B, C run exactly once each, in order."""
        for name in ("A", "B", "C"):
            bot.register(EventKind.PUSH, recorder.succeeding(name))

        await bot.handle(_context(), "push", _push())

        assert recorder.names == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_hooks_receive_context_and_event(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Each hook is passed the delivery context and the decoded event."""
        bot.register(EventKind.PUSH, recorder.succeeding("A"))
        context = _context()
        event = _push()

        await bot.handle(context, "push", event)

        assert recorder.calls[0].context is context
        assert recorder.calls[0].event is event

    @pytest.mark.asyncio
    async def test_trigger_line_precedes_hooks(
        self,
        bot: Bot,
        recorder: HookRecorder,
        event_logger: RecordingEventLogger,
    ) -> None:
        """The trigger line is written before the first hook runs."""
        bot.register(EventKind.PUSH, recorder.succeeding("A"))

        await bot.handle(_context(), "push", _push())

        assert [name for name, _ in event_logger.lines] == ["trigger", "hook"]
        assert event_logger.triggers == [
            TriggerLogRecord(type="push", sender="octocat", repo="hello-world")
        ]

    @pytest.mark.asyncio
    async def test_first_failure_stops_the_chain(
        self,
        bot: Bot,
        recorder: HookRecorder,
        event_logger: RecordingEventLogger,
    ) -> None:
        """H1 succeeds, H2 fails with boom, H3 never runs."""
        bot.register(EventKind.PUSH, recorder.succeeding("H1"))
        bot.register(EventKind.PUSH, recorder.failing("H2", "boom"))
        bot.register(EventKind.PUSH, recorder.succeeding("H3"))

        with pytest.raises(HookError) as excinfo:
            await bot.handle(_context(), "push", _push())

        error = excinfo.value
        assert recorder.names == ["H1", "H2"]
        assert error.kind == EventKind.PUSH
        assert error.hook_index == 2
        assert isinstance(error.__cause__, RuntimeError)
        assert error.cause is error.__cause__
        assert str(error) == "error on hook: boom"
        assert event_logger.lines[-1] == ("hook_failed", ("push", 2, error.cause))

    @pytest.mark.asyncio
    async def test_sync_hooks_are_supported(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Plain functions and coroutines can share one chain."""
        bot.register(EventKind.PUSH, recorder.sync_succeeding("sync"))
        bot.register(EventKind.PUSH, recorder.succeeding("async"))

        await bot.handle(_context(), "push", _push())

        assert recorder.names == ["sync", "async"]

    @pytest.mark.asyncio
    async def test_unknown_discriminator_is_unsupported(
        self,
        bot: Bot,
        recorder: HookRecorder,
        event_logger: RecordingEventLogger,
    ) -> None:
        """An unknown kind fails without running any hook."""
        bot.register(EventKind.PUSH, recorder.succeeding("A"))

        with pytest.raises(UnsupportedEventKindError) as excinfo:
            await bot.handle(_context("not_a_real_kind"), "not_a_real_kind", _push())

        assert str(excinfo.value) == "unsupported event type: not_a_real_kind"
        assert recorder.names == []
        assert event_logger.lines == [("unsupported", "not_a_real_kind")]

    @pytest.mark.asyncio
    async def test_mismatched_variant_is_unsupported(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """A star discriminator carrying a push event runs no hooks."""
        bot.register(EventKind.STAR, recorder.succeeding("A"))

        with pytest.raises(UnsupportedEventKindError) as excinfo:
            await bot.handle(_context("star"), "star", _push())

        assert excinfo.value.discriminator == "star"
        assert "PushEvent" in str(excinfo.value)
        assert recorder.names == []

    @pytest.mark.asyncio
    async def test_other_kinds_hooks_do_not_run(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Only the delivery kind's chain is invoked."""
        bot.register(EventKind.STAR, recorder.succeeding("star-hook"))
        bot.register(EventKind.PUSH, recorder.succeeding("push-hook"))

        await bot.handle(_context(), "push", _push())

        assert recorder.names == ["push-hook"]

    @pytest.mark.asyncio
    async def test_cancellation_is_not_wrapped(self, bot: Bot) -> None:
        """Cancellation propagates instead of becoming a HookError."""

        async def cancelled(context: DeliveryContext, event: object) -> None:
            raise asyncio.CancelledError

        bot.register(EventKind.PUSH, cancelled)

        with pytest.raises(asyncio.CancelledError):
            await bot.handle(_context(), "push", _push())

    @pytest.mark.asyncio
    async def test_hooks_may_register_and_swap_logger_mid_dispatch(
        self,
        bot: Bot,
        recorder: HookRecorder,
        event_logger: RecordingEventLogger,
    ) -> None:
        """The lock is free while hooks run; changes apply from the next delivery."""
        replacement = RecordingEventLogger()
        record_first = recorder.succeeding("first")
        late = recorder.succeeding("late")

        async def first(context: DeliveryContext, event: object) -> None:
            await record_first(context, event)
            bot.register(EventKind.PUSH, late)
            bot.set_logger(replacement)

        bot.register(EventKind.PUSH, first)

        await asyncio.wait_for(bot.handle(_context(), "push", _push()), timeout=2)
        assert recorder.names == ["first"], "late hook joined the running chain"

        await asyncio.wait_for(bot.handle(_context(), "push", _push()), timeout=2)
        assert recorder.names == ["first", "first", "late"]
        assert len(event_logger.triggers) == 1, "first delivery logs to old sink"
        assert len(replacement.triggers) == 1, "second delivery logs to new sink"


class TestEventLoggerSwap:
    """Tests for Bot.set_logger."""

    @pytest.mark.asyncio
    async def test_default_logger_is_silent(self) -> None:
        """A bot built without a logger dispatches without error."""
        bot = Bot()

        await bot.handle(_context(), "push", _push())

    @pytest.mark.asyncio
    async def test_set_logger_affects_later_deliveries(
        self, bot: Bot, event_logger: RecordingEventLogger
    ) -> None:
        """Lines go to whichever logger is installed at dispatch time."""
        replacement = RecordingEventLogger()

        await bot.handle(_context(), "push", _push())
        bot.set_logger(replacement)
        await bot.handle(_context("star"), "star", StarEvent())

        assert [r.type for r in event_logger.triggers] == ["push"]
        assert [r.type for r in replacement.triggers] == ["star"]
        assert bot.event_logger is replacement

    @pytest.mark.asyncio
    async def test_failing_logger_does_not_abort_dispatch(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """An exception from the sink is reported and hooks still run."""
        sink: EventLogger = _RaisingEventLogger()
        bot.set_logger(sink)
        bot.register(EventKind.PUSH, recorder.succeeding("A"))

        await bot.handle(_context(), "push", _push())

        assert recorder.names == ["A"]


class TestProcessDelivery:
    """Tests for Bot.process_delivery."""

    @pytest.mark.asyncio
    async def test_signed_delivery_reaches_hooks(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """A correctly signed push is decoded and dispatched."""
        bot.register(EventKind.PUSH, recorder.succeeding("A"))
        delivery = signed_delivery("push", push_payload(), delivery_id="abc-123")

        context = await bot.process_delivery(delivery.body, delivery.headers)

        assert context.delivery_id == "abc-123"
        assert context.discriminator == "push"
        assert context.kind is EventKind.PUSH
        event = recorder.calls[0].event
        assert isinstance(event, PushEvent)
        assert event.ref == "refs/heads/main"

    @pytest.mark.asyncio
    async def test_receive_time_comes_from_caller(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Hooks see the time the transport accepted the request."""
        bot.register(EventKind.PUSH, recorder.succeeding("A"))
        delivery = signed_delivery("push", push_payload())
        accepted = dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.UTC)

        context = await bot.process_delivery(
            delivery.body, delivery.headers, received_at=accepted
        )

        assert context.received_at == accepted
        assert recorder.calls[0].context.received_at == accepted

    @pytest.mark.asyncio
    async def test_headers_are_case_insensitive(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Lower-cased header names are accepted."""
        bot.register(EventKind.STAR, recorder.succeeding("A"))
        delivery = signed_delivery("star", star_payload())
        headers = {name.lower(): value for name, value in delivery.headers.items()}

        await bot.process_delivery(delivery.body, headers)

        assert recorder.names == ["A"]

    @pytest.mark.asyncio
    async def test_bad_signature_runs_nothing(
        self,
        bot: Bot,
        recorder: HookRecorder,
        event_logger: RecordingEventLogger,
    ) -> None:
        """A delivery signed with another secret is rejected before dispatch."""
        bot.register(EventKind.PUSH, recorder.succeeding("A"))
        delivery = signed_delivery("push", push_payload(), secret="wrong")

        with pytest.raises(SignatureVerificationError):
            await bot.process_delivery(delivery.body, delivery.headers)

        assert recorder.names == []
        assert event_logger.lines == []

    @pytest.mark.asyncio
    async def test_missing_signature(self, bot: Bot) -> None:
        """Unsigned deliveries are rejected when a secret is configured."""
        body = msgspec.json.encode(push_payload())

        with pytest.raises(SignatureVerificationError, match="missing signature"):
            await bot.process_delivery(body, {"X-GitHub-Event": "push"})

    @pytest.mark.asyncio
    async def test_empty_secret_accepts_unsigned(self, recorder: HookRecorder) -> None:
        """Without a secret, unsigned deliveries are dispatched."""
        bot = Bot(BotConfig(webhook_secret=""))
        bot.register(EventKind.PUSH, recorder.succeeding("A"))
        body = msgspec.json.encode(push_payload())

        await bot.process_delivery(body, {"X-GitHub-Event": "push"})

        assert recorder.names == ["A"]

    @pytest.mark.asyncio
    async def test_missing_event_header(self, bot: Bot) -> None:
        """A signed body without X-GitHub-Event cannot be decoded."""
        delivery = signed_delivery("push", push_payload())
        headers = {k: v for k, v in delivery.headers.items() if k != "X-GitHub-Event"}

        with pytest.raises(EventDecodeError) as excinfo:
            await bot.process_delivery(delivery.body, headers)

        assert excinfo.value.reason is DecodeFailureReason.MISSING_EVENT_HEADER

    @pytest.mark.asyncio
    async def test_unknown_event_header(
        self, bot: Bot, event_logger: RecordingEventLogger
    ) -> None:
        """Unknown kinds on the wire are decode failures, not dispatches."""
        delivery = signed_delivery("not_a_real_kind", {})

        with pytest.raises(EventDecodeError) as excinfo:
            await bot.process_delivery(delivery.body, delivery.headers)

        assert excinfo.value.reason is DecodeFailureReason.UNKNOWN_EVENT
        assert event_logger.lines == []

    @pytest.mark.asyncio
    async def test_hook_failure_propagates(
        self, bot: Bot, recorder: HookRecorder
    ) -> None:
        """Hook failures surface from process_delivery as HookError."""
        bot.register(EventKind.PUSH, recorder.failing("A"))
        delivery = signed_delivery("push", push_payload())

        with pytest.raises(HookError):
            await bot.process_delivery(delivery.body, delivery.headers)

    def test_secret_is_fixed_at_construction(self) -> None:
        """The configuration is exposed read-only."""
        bot = Bot(BotConfig(webhook_secret=SECRET))

        assert bot.config.secret_bytes == SECRET.encode("utf-8")
