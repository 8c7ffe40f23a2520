import base64
import hashlib
import hmac
import time


def now_unix() -> int:
    return int(time.time())


def urlsafe_b64encode_nopad(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


class TokenCodec:
    """HMAC-SHA256 signer for opaque string payloads.

    Tokens are the URL-safe base64 encoding of the digest with padding stripped,
    so the same payload and secret always produce the same token.
    """

    def __init__(self, secret: str) -> None:
        self._key = secret.encode("utf-8")

    def sign(self, payload: str) -> str:
        digest = hmac.new(self._key, payload.encode("utf-8"), hashlib.sha256).digest()
        return urlsafe_b64encode_nopad(digest)

    def verify(self, payload: str, token: str) -> bool:
        if not isinstance(token, str):
            return False
        expected = self.sign(payload)
        # compare_digest only accepts ASCII str; anything else cannot be one of our tokens
        if not token.isascii():
            return False
        return hmac.compare_digest(expected, token)
