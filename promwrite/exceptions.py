"""Error taxonomy for encoding and pushing remote-write requests."""
from typing import Optional


class PromWriteError(Exception):
    """Base class for every error raised by promwrite."""
    retryable = False


class EncodingError(PromWriteError):
    """The write request could not be built or serialized."""


class TransportError(PromWriteError):
    """The request never produced a response (unreachable, timed out, reset)."""
    retryable = True


class ResponseError(PromWriteError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: Optional[str], body: str):
        self.status_code = status_code
        self.reason = reason or ""
        self.body = body
        status = f"{status_code} {self.reason}".rstrip()
        super().__init__(f"server returned HTTP status {status}: {body}")


class ServerError(ResponseError):
    """A 5xx response. The caller may retry."""
    retryable = True
