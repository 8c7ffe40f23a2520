"""
Temporary access ("capability") URLs.

A capability URL embeds an object key, an expiry in unix seconds and an HMAC
token over ``"<key>:<expires>"``. Anyone holding the URL can read the object
until it expires; nothing is persisted, so the same key and expiry always
yield the same token.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Callable
from urllib.parse import quote

from cdn_gateway.core.security import TokenCodec, now_unix

# Characters encodeURIComponent leaves alone besides alphanumerics and "-_."
_KEY_SAFE_CHARS = "!~*'()"

_INTEGER = re.compile(r"-?[0-9]+")


class AccessOutcome(str, enum.Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class CapabilityUrl:
    key: str
    expires: int
    token: str
    url: str


def canonical_payload(key: str, expires: int | str) -> str:
    return f"{key}:{expires}"


def encode_key(key: str) -> str:
    return quote(key, safe=_KEY_SAFE_CHARS)


class CapabilityURLService:
    def __init__(self, codec: TokenCodec, clock: Callable[[], int] = now_unix) -> None:
        self._codec = codec
        self._clock = clock

    def now(self) -> int:
        return int(self._clock())

    def issue(self, key: str, ttl_seconds: int, base_url: str, now: int | None = None) -> CapabilityUrl:
        expires = (self.now() if now is None else now) + int(ttl_seconds)
        token = self._codec.sign(canonical_payload(key, expires))
        url = f"{base_url.rstrip('/')}/temp/{encode_key(key)}?expires={expires}&token={token}"
        return CapabilityUrl(key=key, expires=expires, token=token, url=url)

    def mint(self, key: str, ttl_seconds: int, base_url: str, now: int | None = None) -> str:
        return self.issue(key, ttl_seconds, base_url, now=now).url

    def verify(
        self,
        key: str,
        expires: str | None,
        token: str | None,
        now: int | None = None,
    ) -> AccessOutcome:
        """Check presence, then integer parse, then expiry, then signature."""
        if not expires or not token:
            return AccessOutcome.MALFORMED
        if not _INTEGER.fullmatch(expires):
            return AccessOutcome.MALFORMED
        expires_at = int(expires)

        current = self.now() if now is None else now
        if expires_at < current:
            return AccessOutcome.EXPIRED

        # Payload uses the parameter text as received, not the parsed integer.
        if not self._codec.verify(canonical_payload(key, expires), token):
            return AccessOutcome.INVALID
        return AccessOutcome.VALID
