"""Assembly of raw request frames from a byte stream."""

from typing import Optional, Protocol

from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.errors import ReadError
from rawhttp.pipeline.parsing import HEADER_DELIMITER, declared_content_length

FRAME_LOGGER = get_logger("pipeline.framing")

DEFAULT_CHUNK_SIZE = 4096
DEFAULT_MAX_FRAME_BYTES = 5 * 1024 * 1024


class ByteStream(Protocol):
    """The part of a socket the frame reader depends on."""

    def recv(self, bufsize: int) -> bytes: ...


class FrameBuffer:
    """Growable buffer that knows how many more bytes a frame needs."""

    def __init__(self) -> None:
        self._data = bytearray()
        self._header_end = -1
        self._body_length = 0

    def __len__(self) -> int:
        return len(self._data)

    def feed(self, chunk: bytes) -> None:
        """Append ``chunk`` and update the frame boundaries."""
        search_from = max(0, len(self._data) - len(HEADER_DELIMITER) + 1)
        self._data.extend(chunk)
        if self._header_end < 0:
            index = self._data.find(HEADER_DELIMITER, search_from)
            if index >= 0:
                self._header_end = index + len(HEADER_DELIMITER)
                self._body_length = declared_content_length(bytes(self._data[:index]))

    @property
    def headers_complete(self) -> bool:
        return self._header_end >= 0

    def missing(self) -> int:
        """Return the number of bytes still needed.

        Before the header terminator has been seen the total size is unknown,
        so at least one more byte is requested.
        """
        if not self.headers_complete:
            return 1
        return max(0, self._header_end + self._body_length - len(self._data))

    def expected_size(self) -> int:
        """Return the frame size if known, otherwise the bytes buffered so far."""
        if not self.headers_complete:
            return len(self._data)
        return self._header_end + self._body_length

    def frame(self) -> bytes:
        """Return the complete frame, dropping any bytes past the body."""
        if self.missing():
            raise ReadError("frame is incomplete")
        return bytes(self._data[: self._header_end + self._body_length])


def read_frame(
    stream: ByteStream,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
) -> Optional[bytes]:
    """Read from ``stream`` until a full request frame is buffered.

    Returns ``None`` when the stream ends before sending anything. Raises
    ``ReadError`` when it ends, times out or faults part-way through a frame.
    """
    buffer = FrameBuffer()
    while buffer.missing():
        try:
            chunk = stream.recv(chunk_size)
        except OSError as exc:
            raise ReadError(f"stream failed after {len(buffer)} bytes") from exc
        if not chunk:
            if not buffer:
                return None
            stage = "body" if buffer.headers_complete else "headers"
            raise ReadError(f"stream ended while reading {stage}")
        buffer.feed(chunk)
        if buffer.expected_size() > max_frame_bytes:
            FRAME_LOGGER.warning(
                "Request frame exceeded limit",
                extra={"event": "frame_too_large", "limit": max_frame_bytes},
            )
            raise ReadError("frame exceeds size limit")
    return buffer.frame()
