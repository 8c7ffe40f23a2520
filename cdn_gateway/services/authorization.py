from typing import Protocol

UPLOAD = "upload"
DELETE = "delete"


class Authorizer(Protocol):
    def authorize(self, operation: str, key: str) -> bool: ...


class AllowAllAuthorizer:
    """Open policy: any caller may upload or delete any key."""

    def authorize(self, operation: str, key: str) -> bool:
        return True
