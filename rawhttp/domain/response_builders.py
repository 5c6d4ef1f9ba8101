"""Pure HTTP response builders."""

from typing import Optional

from rawhttp.domain.http_types import Response

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


def new_response(
    status: int, content: bytes, headers: Optional[dict[str, str]] = None
) -> Response:
    """Wrap ``content`` in a response, deriving Content-Length when non-empty."""
    merged = dict(headers or {})
    if content:
        merged["Content-Length"] = str(len(content))
    return Response(status, merged, content)


def empty_response(status: int) -> Response:
    """Return a response with no headers and no body."""
    return Response(status, {}, b"")


def ok_response() -> Response:
    return empty_response(200)


def created_response() -> Response:
    return empty_response(201)


def bad_request_response() -> Response:
    return empty_response(400)


def not_found_response() -> Response:
    return empty_response(404)


def internal_error_response() -> Response:
    return empty_response(500)


def text_response(message: str) -> Response:
    """Return a 200 text/plain response carrying ``message``."""
    return new_response(
        200, message.encode("iso-8859-1"), {"Content-Type": TEXT_PLAIN}
    )


def octet_stream_response(payload: bytes) -> Response:
    """Return a 200 response carrying raw file bytes."""
    return new_response(200, payload, {"Content-Type": OCTET_STREAM})
