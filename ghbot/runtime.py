"""ghbot runtime entrypoint.

This module builds a bot from the environment and serves it with Granian.
The ``ghbot.runtime:create_app`` factory is the stable Granian target.

Hooks are installed at boot by an optional installer callable named in
``GHBOT_HOOKS`` as ``package.module:function``; it receives the bot and
registers hooks on it.

Configuration is driven by environment variables:

- ``GHBOT_HOST``: Bind address (default ``0.0.0.0``)
- ``GHBOT_PORT``: Listen port (default ``8080``)
- ``GHBOT_LOG_LEVEL``: Log level (default ``INFO``)
- ``GHBOT_HOOKS``: Hook installer (optional)
- ``GHBOT_WEBHOOK_SECRET``, ``GHBOT_WEBHOOK_PATH``,
  ``GHBOT_DISPATCH_TIMEOUT_S``: see :class:`ghbot.config.BotConfig`

Run the service directly with ``python -m ghbot.runtime``.
"""

from __future__ import annotations

import importlib
import os
import typing as typ

from ghbot.bot import Bot
from ghbot.config import BotConfig
from ghbot.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_exception,
    log_info,
    log_warning,
)
from ghbot.observability import FemtoEventLogger

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["build_bot", "create_app", "load_hook_installer", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535

HookInstaller = typ.Callable[[Bot], object]


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid GHBOT_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def load_hook_installer(spec: str) -> HookInstaller:
    """Resolve a ``module:function`` reference to a hook installer.

    Raises
    ------
    ValueError
        If ``spec`` is not of the form ``module:function`` or the target is
        not callable.

    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        msg = f"GHBOT_HOOKS must look like 'module:function', got: {spec!r}"
        raise ValueError(msg)

    module = importlib.import_module(module_name)
    installer = getattr(module, attr, None)
    if not callable(installer):
        msg = f"GHBOT_HOOKS target {spec!r} is not callable"
        raise ValueError(msg)
    return typ.cast("HookInstaller", installer)


def build_bot(config: BotConfig | None = None) -> Bot:
    """Build a bot from ``config`` (or the environment) and install hooks."""
    bot = Bot(
        config if config is not None else BotConfig.from_env(),
        event_logger=FemtoEventLogger(),
    )
    if not bot.config.webhook_secret:
        log_warning(
            logger,
            "GHBOT_WEBHOOK_SECRET is empty; signature verification is disabled",
        )

    installer_spec = os.environ.get("GHBOT_HOOKS", "").strip()
    if installer_spec:
        try:
            load_hook_installer(installer_spec)(bot)
        except Exception as exc:
            log_exception(
                logger, f"Failed to install hooks from {installer_spec}", exc
            )
            raise
        log_info(
            logger,
            "Installed hooks from %s for %d event kinds",
            installer_spec,
            len(bot.registry.kinds()),
        )
    return bot


def create_app() -> falcon.asgi.App:
    """Create the Falcon ASGI application for the environment's bot."""
    return build_bot().asgi_app()


def main() -> None:
    """Start the ghbot server using Granian.

    Reads ``GHBOT_HOST``, ``GHBOT_PORT``, and ``GHBOT_LOG_LEVEL`` from the
    environment and starts the ASGI server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("GHBOT_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("GHBOT_PORT", "8080"))
    log_level_str = os.environ.get("GHBOT_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid GHBOT_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting ghbot on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "ghbot.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
