class ErrorCode:
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    LINK_EXPIRED = "LINK_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    FORBIDDEN = "FORBIDDEN"
    UPSTREAM_FETCH_FAILED = "UPSTREAM_FETCH_FAILED"
