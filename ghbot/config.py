"""Bot configuration.

Usage
-----
Create a configuration directly:

>>> config = BotConfig(webhook_secret="s3cret")
>>> config.webhook_path
'/webhook/github'

Or load it from environment variables:

>>> import os
>>> os.environ["GHBOT_WEBHOOK_SECRET"] = "s3cret"
>>> BotConfig.from_env().secret_bytes
b's3cret'

"""

from __future__ import annotations

import dataclasses as dc
import os

_DEFAULT_WEBHOOK_PATH = "/webhook/github"


@dc.dataclass(frozen=True, slots=True)
class BotConfig:
    """Process-wide settings supplied once when the bot is built.

    Attributes
    ----------
    webhook_secret
        Secret shared with GitHub for signing deliveries. An empty secret
        disables signature verification.
    webhook_path
        Route that receives deliveries.
    dispatch_timeout_s
        Optional limit on how long the transport waits for one delivery's
        hooks. ``None`` waits indefinitely.

    """

    webhook_secret: str = dc.field(default="", repr=False)
    webhook_path: str = _DEFAULT_WEBHOOK_PATH
    dispatch_timeout_s: float | None = None

    def __post_init__(self) -> None:
        """Validate the route and the timeout."""
        if not self.webhook_path.startswith("/"):
            msg = f"webhook_path must start with '/', got: {self.webhook_path!r}"
            raise ValueError(msg)
        if self.dispatch_timeout_s is not None and self.dispatch_timeout_s <= 0:
            msg = f"dispatch_timeout_s must be positive, got: {self.dispatch_timeout_s}"
            raise ValueError(msg)

    @property
    def secret_bytes(self) -> bytes:
        """Return the secret encoded for HMAC computation."""
        return self.webhook_secret.encode("utf-8")

    @staticmethod
    def _parse_timeout(env_var: str) -> float | None:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return None
        try:
            return float(raw)
        except ValueError as exc:
            msg = f"{env_var} must be a number, got: {raw!r}"
            raise ValueError(msg) from exc

    @classmethod
    def from_env(cls) -> BotConfig:
        """Create configuration from environment variables.

        Reads the following environment variables:

        - ``GHBOT_WEBHOOK_SECRET``: Shared webhook secret. Defaults to empty.
        - ``GHBOT_WEBHOOK_PATH``: Delivery route. Defaults to
          ``/webhook/github``.
        - ``GHBOT_DISPATCH_TIMEOUT_S``: Optional positive number of seconds.

        Returns
        -------
        BotConfig
            Configuration instance with values from environment or defaults.

        Raises
        ------
        ValueError
            If the path or timeout is invalid.

        """
        webhook_path = os.environ.get("GHBOT_WEBHOOK_PATH", "").strip()
        return cls(
            webhook_secret=os.environ.get("GHBOT_WEBHOOK_SECRET", ""),
            webhook_path=webhook_path or _DEFAULT_WEBHOOK_PATH,
            dispatch_timeout_s=cls._parse_timeout("GHBOT_DISPATCH_TIMEOUT_S"),
        )


__all__ = ["BotConfig"]
