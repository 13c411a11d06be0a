"""Falcon error handlers for delivery failures.

Client errors (bad signature, undecodable payload) map to 400. Dispatch
errors (unsupported kind, failing hook, timeout) map to 500. Bodies never
echo the payload or a hook's own error message.

Usage
-----
Register the handlers on a Falcon app::

    from ghbot.api.errors import register_error_handlers

    register_error_handlers(app)

"""

from __future__ import annotations

import typing as typ

import falcon

from ghbot.decode import DELIVERY_HEADER
from ghbot.errors import (
    DispatchTimeoutError,
    EventDecodeError,
    HookError,
    SignatureVerificationError,
    UnsupportedEventKindError,
)
from ghbot.logging import get_logger, log_error, log_warning

if typ.TYPE_CHECKING:
    from falcon.asgi import App, Request, Response

__all__ = [
    "handle_decode_error",
    "handle_dispatch_timeout",
    "handle_hook_error",
    "handle_signature_error",
    "handle_unsupported_kind",
    "register_error_handlers",
]

logger = get_logger(__name__)


def _delivery_id(req: Request) -> str:
    return req.get_header(DELIVERY_HEADER) or "-"


async def handle_signature_error(
    req: Request,
    resp: Response,
    ex: SignatureVerificationError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``SignatureVerificationError`` to HTTP 400.

    Nothing from the untrusted body is logged.
    """
    log_warning(logger, "Rejected delivery %s: %s", _delivery_id(req), ex)
    resp.status = falcon.HTTP_400
    resp.media = {"title": "Invalid signature", "description": str(ex)}


async def handle_decode_error(
    req: Request,
    resp: Response,
    ex: EventDecodeError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``EventDecodeError`` to HTTP 400 with its machine-readable reason."""
    log_warning(
        logger,
        "Undecodable delivery %s: reason=%s %s",
        _delivery_id(req),
        ex.reason,
        ex,
    )
    resp.status = falcon.HTTP_400
    resp.media = {
        "title": "Invalid payload",
        "description": str(ex),
        "reason": str(ex.reason),
    }


async def handle_unsupported_kind(
    _req: Request,
    resp: Response,
    ex: UnsupportedEventKindError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``UnsupportedEventKindError`` to HTTP 500."""
    resp.status = falcon.HTTP_500
    resp.media = {"title": "Unsupported event", "description": str(ex)}


async def handle_hook_error(
    req: Request,
    resp: Response,
    ex: HookError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``HookError`` to HTTP 500 naming the failing hook position."""
    log_error(
        logger,
        "Delivery %s failed on hook %d of %s",
        _delivery_id(req),
        ex.hook_index,
        ex.kind,
    )
    resp.status = falcon.HTTP_500
    resp.media = {
        "title": "Hook failed",
        "description": f"error on hook {ex.hook_index} for {ex.kind}",
    }


async def handle_dispatch_timeout(
    req: Request,
    resp: Response,
    ex: DispatchTimeoutError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``DispatchTimeoutError`` to HTTP 500."""
    log_error(logger, "Delivery %s timed out: %s", _delivery_id(req), ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "Dispatch timed out", "description": str(ex)}


def register_error_handlers(app: App) -> None:
    """Attach every delivery error handler to ``app``."""
    app.add_error_handler(SignatureVerificationError, handle_signature_error)
    app.add_error_handler(EventDecodeError, handle_decode_error)
    app.add_error_handler(UnsupportedEventKindError, handle_unsupported_kind)
    app.add_error_handler(HookError, handle_hook_error)
    app.add_error_handler(DispatchTimeoutError, handle_dispatch_timeout)
