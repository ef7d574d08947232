from __future__ import annotations


class ConsoleError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class TransportError(ConsoleError):
    """Network-level failure: socket or HTTP connection problems, timeouts."""


class FetchError(ConsoleError):
    """The backend answered, but not with success."""

    def __init__(self, detail: str = "", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(detail)


class AuthError(ConsoleError):
    pass


class ParseError(ConsoleError):
    """Malformed payload from the transport or a REST response."""


class ValidationError(ConsoleError):
    pass


class NotFoundError(ConsoleError):
    pass


# Failures that send a history load down the fallback path.
LOAD_FAILURES = (FetchError, TransportError, ParseError)
