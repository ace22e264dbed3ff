"""
HTTP Basic authentication gate for the admin pages and write endpoints.

The gate is framework-neutral: callers pass the request path and the raw
``Authorization`` header, and return ``challenge()`` when ``check`` fails.
Both username and password are compared in constant time, and an
unconfigured gate denies everything.
"""

from __future__ import annotations

import base64
import binascii
import hmac
import logging

from pressroom.core.config import AdminCredentials

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/admin", "/api/")
REALM = "Secure Area"


def parse_basic_header(header: str | None) -> tuple[str, str] | None:
    """Decode ``Basic <base64(user:password)>``.

    Returns:
        (username, password), or None if the header is absent or malformed
    """
    if not header:
        return None
    scheme, _, encoded = header.strip().partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


class BasicAuthGate:
    """Pass/fail gate in front of the mutating entry points."""

    def __init__(
        self,
        credentials: AdminCredentials,
        protected_prefixes: tuple[str, ...] = PROTECTED_PREFIXES,
    ):
        self.credentials = credentials
        self.protected_prefixes = protected_prefixes

    def is_protected(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.protected_prefixes)

    def check(self, header: str | None) -> bool:
        """True if *header* carries the configured admin credentials."""
        if not self.credentials.is_configured:
            logger.warning("Admin credentials are not configured; denying access")
            return False
        parsed = parse_basic_header(header)
        if parsed is None:
            return False
        username, password = parsed
        user_ok = hmac.compare_digest(username.encode("utf-8"), self.credentials.username.encode("utf-8"))
        pass_ok = hmac.compare_digest(password.encode("utf-8"), self.credentials.password.encode("utf-8"))
        return user_ok and pass_ok

    def allows(self, path: str, header: str | None) -> bool:
        """True if *path* is public or *header* passes the check."""
        return not self.is_protected(path) or self.check(header)

    @staticmethod
    def challenge() -> tuple[int, dict[str, str], str]:
        """Status, headers and body of the 401 response."""
        return 401, {"WWW-Authenticate": f'Basic realm="{REALM}"'}, "Authentication required"
