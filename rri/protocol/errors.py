from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .messages import Response


class ErrorKind(StrEnum):
    """Discriminates a broken exchange from a rejected query."""

    CONNECTION = "connection"
    FRAMING = "framing"
    PROTOCOL = "protocol"
    QUERY_FAILED = "query_failed"
    DOCUMENT = "document"


FATAL_KINDS = frozenset({ErrorKind.CONNECTION, ErrorKind.FRAMING, ErrorKind.PROTOCOL})


class RRIError(Exception):
    """Base error carrying the error kind and a human readable message."""

    kind: ErrorKind = ErrorKind.PROTOCOL

    def __init__(self, message: str = "", kind: Optional[ErrorKind] = None) -> None:
        if kind is not None:
            self.kind = kind
        self.message = message
        super().__init__(message)

    @property
    def is_fatal(self) -> bool:
        """True when the session can no longer be trusted and should be closed."""
        return self.kind in FATAL_KINDS

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class NetworkError(RRIError):
    """Dial, write, read or timeout failure on the TCP connection."""

    kind = ErrorKind.CONNECTION


class FramingError(RRIError):
    """Invalid length prefix or a stream closed in the middle of a frame."""

    kind = ErrorKind.FRAMING


class ProtocolError(RRIError):
    """Frame payload that does not form a well-formed query or response."""

    kind = ErrorKind.PROTOCOL


class QueryFailed(RRIError):
    """The server answered with a valid response that reports a failure."""

    kind = ErrorKind.QUERY_FAILED

    def __init__(self, response: "Response") -> None:
        self.response = response
        super().__init__(response.error_message or "unknown error")


class DocumentParseError(RRIError):
    """A query document contains a block that is not a valid query."""

    kind = ErrorKind.DOCUMENT

    def __init__(self, index: int, message: str) -> None:
        self.index = index
        super().__init__(f"query block {index}: {message}")


__all__ = [
    "ErrorKind",
    "RRIError",
    "NetworkError",
    "FramingError",
    "ProtocolError",
    "QueryFailed",
    "DocumentParseError",
]
