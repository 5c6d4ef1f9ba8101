"""HTTP Input/Output operations."""

import logging
import socket
from typing import Optional

from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.http_types import Request, Response
from rawhttp.pipeline.framing import DEFAULT_MAX_FRAME_BYTES, ByteStream, read_frame
from rawhttp.pipeline.parsing import parse_request

IO_LOGGER = get_logger("pipeline.io")

CRLF = b"\r\n"


def receive_request(
    stream: ByteStream, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES
) -> Optional[Request]:
    """Read one request frame from ``stream`` and parse it.

    Returns ``None`` when the peer closed without sending anything.
    """
    frame = read_frame(stream, max_frame_bytes=max_frame_bytes)
    if frame is None:
        return None
    request = parse_request(frame)
    if IO_LOGGER.logger.isEnabledFor(logging.DEBUG):
        IO_LOGGER.debug(
            "Parsed request",
            extra={
                "event": "request_parsed",
                "method": request.method,
                "route": request.path,
                "bytes_in": len(frame),
            },
        )
    return request


def serialize_response(response: Response) -> bytes:
    """Render ``response`` as wire bytes.

    Headers keep their insertion order. When a body is present its byte length
    replaces any Content-Length the caller supplied.
    """
    headers = dict(response.headers)
    if response.body:
        headers["Content-Length"] = str(len(response.body))
    lines = [response.status_line.encode("ascii")]
    lines.extend(
        f"{name}: {value}".encode("iso-8859-1") for name, value in headers.items()
    )
    return CRLF.join(lines) + CRLF + CRLF + response.body


def send_response(client_socket: socket.socket, response: Response) -> None:
    """Serialize and send the HTTP response over the socket."""
    payload = serialize_response(response)
    client_socket.sendall(payload)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status_code": response.status,
            "bytes_out": len(payload),
        },
    )
