"""Liveness and readiness probe resources.

``/health`` answers as long as the process serves requests. ``/ready``
additionally reports which event kinds currently have hooks, so a deployment
can tell a bot that booted without its hook installer.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from ghbot.registry import HookRegistry

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe listing the kinds with registered hooks."""

    def __init__(self, registry: HookRegistry) -> None:
        """Bind the probe to the registry it reports on."""
        self._registry = registry

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status and the sorted
            list of hooked kinds.

        """
        resp.media = {
            "status": "ready",
            "hooked_kinds": sorted(str(kind) for kind in self._registry.kinds()),
        }
        resp.status = HTTPStatus.OK
