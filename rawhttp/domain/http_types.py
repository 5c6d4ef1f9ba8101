"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

HTTP_VERSION = "HTTP/1.1"

STATUS_REASONS: Mapping[int, str] = MappingProxyType(
    {
        200: "OK",
        201: "No Content",
        400: "Bad Request",
        404: "Not Found",
        500: "Internal Server Error",
    }
)


def reason_phrase(status: int) -> str:
    """Return the reason phrase for ``status``, or an empty string if unknown."""
    return STATUS_REASONS.get(status, "")


@dataclass(frozen=True)
class Request:
    """Represents a parsed HTTP request."""

    method: str
    path: str
    version: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass(frozen=True)
class Response:
    """Represents an HTTP response to be sent to a client."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def status_line(self) -> str:
        return f"{HTTP_VERSION} {self.status} {reason_phrase(self.status)}"
