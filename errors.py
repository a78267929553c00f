from typing import Optional


class ThemeManagerError(Exception):
    """Base class for every failure the theme manager absorbs at its boundary."""


class TransportError(ThemeManagerError):
    """Timeout, DNS failure, refused connection or any other network problem."""


class UnexpectedStatusError(ThemeManagerError):
    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        message = f"Unexpected HTTP status {status_code}"
        if url:
            message += f" from {url}"
        super().__init__(message)


class MalformedResponseError(ThemeManagerError):
    """Body could not be decoded or lacks a required field."""
