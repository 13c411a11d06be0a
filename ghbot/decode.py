"""Decode delivery bodies into typed webhook events.

The decoder trusts nothing about the body: the discriminator must name a known
:class:`~ghbot.events.EventKind`, the body must be a JSON object, and the
object must convert into that kind's struct. Any failure raises
:class:`~ghbot.errors.EventDecodeError`.
"""

from __future__ import annotations

import typing as typ
import urllib.parse

import msgspec

from ghbot.errors import EventDecodeError
from ghbot.events import EventKind, WebhookEvent, event_type_for, parse_event_kind

EVENT_HEADER = "X-GitHub-Event"
DELIVERY_HEADER = "X-GitHub-Delivery"

_JSON_MEDIA_TYPE = "application/json"
_FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


@typ.runtime_checkable
class EventDecoder(typ.Protocol):
    """Turn a discriminator and a JSON body into one typed event."""

    def decode(
        self, discriminator: str, body: bytes
    ) -> tuple[EventKind, WebhookEvent]:
        """Return the event kind and its decoded variant.

        Raises
        ------
        EventDecodeError
            If the discriminator is unknown or the body does not parse.

        """
        ...


def extract_json_body(content_type: str | None, body: bytes) -> bytes:
    """Return the JSON document carried by a delivery body.

    GitHub sends either raw JSON or a form body whose ``payload`` field holds
    the JSON. A missing content type is treated as JSON.

    Raises
    ------
    EventDecodeError
        For other content types or a form body without ``payload``.

    """
    media_type = (content_type or _JSON_MEDIA_TYPE).split(";", 1)[0].strip().lower()
    if media_type == _JSON_MEDIA_TYPE:
        return body
    if media_type != _FORM_MEDIA_TYPE:
        raise EventDecodeError.unsupported_content_type(media_type)

    try:
        form = urllib.parse.parse_qs(body.decode("utf-8"), keep_blank_values=True)
    except UnicodeDecodeError as exc:
        raise EventDecodeError.invalid_json(str(exc)) from exc
    values = form.get("payload")
    if not values:
        msg = "form body has no payload field"
        raise EventDecodeError.invalid_json(msg)
    return values[0].encode("utf-8")


class MsgspecEventDecoder:
    """Decode webhook JSON with msgspec into :mod:`ghbot.events` structs."""

    def decode(
        self, discriminator: str, body: bytes
    ) -> tuple[EventKind, WebhookEvent]:
        """Return the event kind and its decoded variant."""
        kind = parse_event_kind(discriminator)
        if kind is None:
            raise EventDecodeError.unknown_event(discriminator)

        try:
            document = msgspec.json.decode(body)
        except msgspec.DecodeError as exc:
            raise EventDecodeError.invalid_json(str(exc)) from exc
        if not isinstance(document, dict):
            msg = f"expected a JSON object, got {type(document).__name__}"
            raise EventDecodeError.invalid_json(msg)

        try:
            event = msgspec.convert(document, type=event_type_for(kind))
        except msgspec.ValidationError as exc:
            raise EventDecodeError.invalid_payload(kind, str(exc)) from exc

        return kind, msgspec.structs.replace(event, payload=document)


__all__ = [
    "DELIVERY_HEADER",
    "EVENT_HEADER",
    "EventDecoder",
    "MsgspecEventDecoder",
    "extract_json_body",
]
