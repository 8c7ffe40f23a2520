def error_content(message: str) -> dict[str, str]:
    return {"error": message}


class ApiError(Exception):
    """Request-level failure; rendered as ``{"error": message}`` with ``status_code``."""

    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = str(code)
        self.message = message
        super().__init__(message)

    def to_content(self) -> dict[str, str]:
        return error_content(self.message)
