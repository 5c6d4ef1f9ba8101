"""Error taxonomy for the request/response pipeline."""

from enum import Enum


class HttpServerError(Exception):
    """Base class for errors raised while servicing a connection."""


class ReadError(HttpServerError):
    """The stream ended or faulted before a complete frame was assembled."""


class ParseErrorKind(Enum):
    """Structural failures detected by the request parser."""

    BAD_START_LINE = "bad_start_line"
    BAD_HEADER = "bad_header"


class ParseError(HttpServerError):
    """Raised when a frame does not have the structure of an HTTP request."""

    def __init__(self, kind: ParseErrorKind, line: str) -> None:
        super().__init__(f"{kind.value}: {line!r}")
        self.kind = kind
        self.line = line


class RouteNotFound(HttpServerError):
    """No route in the routing table matched the request."""


class FileStorageError(HttpServerError):
    """Base class for failures of the file storage collaborator."""


class FileOpenError(FileStorageError):
    """The file could not be opened for reading."""


class FileReadError(FileStorageError):
    """The file was opened but could not be read."""


class FileCreateError(FileStorageError):
    """The file could not be created or truncated for writing."""


class FileWriteError(FileStorageError):
    """The file was created but the payload could not be written."""
