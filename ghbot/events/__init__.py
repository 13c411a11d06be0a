"""Event kinds and the typed webhook event variants they decode into."""

from __future__ import annotations

from .kinds import EventKind, parse_event_kind
from .models import (
    EVENT_TYPES,
    Actor,
    InstallationRef,
    Organization,
    RepositoryRef,
    TriggerField,
    WebhookEvent,
    event_type_for,
)

__all__ = [
    "EVENT_TYPES",
    "Actor",
    "EventKind",
    "InstallationRef",
    "Organization",
    "RepositoryRef",
    "TriggerField",
    "WebhookEvent",
    "event_type_for",
    "parse_event_kind",
]
