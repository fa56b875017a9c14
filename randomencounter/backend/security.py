"""GM identity for chat senders.

The host surface has no player accounts. A sender is treated as the GM when
the request carries the configured GM token; everyone else is a player and
only gets the commands open to players.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass


GM_TOKEN_BYTES = 24


def generate_gm_token() -> str:
    """Generate a value for ``RANDOMENCOUNTER_GM_TOKEN``."""
    return secrets.token_urlsafe(GM_TOKEN_BYTES)


def hash_token(token: str, server_salt: str) -> str:
    payload = f"{token}{server_salt}".encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


@dataclass(frozen=True)
class GmIdentity:
    """Holds only the salted hash of the GM token, never the token itself."""

    token_hash: str
    server_salt: str

    @classmethod
    def from_token(cls, gm_token: str, server_salt: str) -> "GmIdentity":
        return cls(token_hash=hash_token(gm_token, server_salt), server_salt=server_salt)

    def is_gm(self, presented_token: str | None) -> bool:
        if not presented_token:
            return False
        return hmac.compare_digest(hash_token(presented_token, self.server_salt), self.token_hash)
