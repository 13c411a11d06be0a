"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import typing as typ

import pytest

from ghbot import Bot, BotConfig
from tests.helpers.deliveries import SECRET
from tests.helpers.recording import HookRecorder, RecordingEventLogger


@pytest.fixture
def event_logger() -> RecordingEventLogger:
    """Return an in-memory event logger."""
    return RecordingEventLogger()


@pytest.fixture
def bot(event_logger: RecordingEventLogger) -> Bot:
    """Return a bot using the test secret and the in-memory event logger."""
    return Bot(BotConfig(webhook_secret=SECRET), event_logger=event_logger)


@pytest.fixture
def recorder(event_logger: RecordingEventLogger) -> HookRecorder:
    """Return a hook recorder sharing its journal with the event logger."""
    return HookRecorder(typ.cast("list[object]", event_logger.lines))
