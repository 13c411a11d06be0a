"""Webhook signature verification.

GitHub signs each delivery body with the shared secret and sends the digest
as ``<algorithm>=<hexdigest>`` in ``X-Hub-Signature-256`` (SHA-256) and, for
older hooks, ``X-Hub-Signature`` (SHA-1).

Usage
-----
>>> verifier = HmacSignatureVerifier()
>>> verifier.verify(b"{}", "sha256=...", b"s3cret")
False

"""

from __future__ import annotations

import hashlib
import hmac
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

SIGNATURE_256_HEADER = "X-Hub-Signature-256"
SIGNATURE_HEADER = "X-Hub-Signature"

_DIGESTS: dict[str, str] = {
    "sha1": "sha1",
    "sha256": "sha256",
    "sha512": "sha512",
}


@typ.runtime_checkable
class SignatureVerifier(typ.Protocol):
    """Decide whether a delivery body was signed with the shared secret."""

    def verify(self, body: bytes, signature: str | None, secret: bytes) -> bool:
        """Return ``True`` to accept the delivery and ``False`` to reject it."""
        ...


def compute_signature(body: bytes, secret: bytes, algorithm: str = "sha256") -> str:
    """Return the ``<algorithm>=<hexdigest>`` header value for ``body``."""
    digest = hmac.new(secret, body, _DIGESTS[algorithm]).hexdigest()
    return f"{algorithm}={digest}"


def select_signature(headers: cabc.Mapping[str, str]) -> str | None:
    """Pick the strongest signature header present in ``headers``.

    Header lookup is case-insensitive.
    """
    lowered = {name.lower(): value for name, value in headers.items()}
    for name in (SIGNATURE_256_HEADER, SIGNATURE_HEADER):
        value = lowered.get(name.lower())
        if value:
            return value
    return None


class HmacSignatureVerifier:
    """Verify ``<algorithm>=<hexdigest>`` HMAC signatures.

    An empty secret disables verification and every delivery is accepted.
    """

    def verify(self, body: bytes, signature: str | None, secret: bytes) -> bool:
        """Return whether ``signature`` matches the HMAC of ``body``."""
        if not secret:
            return True
        if not signature:
            return False

        algorithm, sep, received = signature.partition("=")
        if not sep or algorithm not in _DIGESTS or not received:
            return False

        expected = compute_signature(body, secret, algorithm)
        return hmac.compare_digest(expected, f"{algorithm}={received.lower()}")


__all__ = [
    "SIGNATURE_256_HEADER",
    "SIGNATURE_HEADER",
    "HmacSignatureVerifier",
    "SignatureVerifier",
    "compute_signature",
    "select_signature",
]
