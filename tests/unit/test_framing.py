"""Unit tests for request frame assembly."""

import pytest

from rawhttp.domain.errors import ReadError
from rawhttp.pipeline.framing import FrameBuffer, read_frame
from rawhttp.pipeline.io import receive_request


class FakeSocket:
    """Minimal socket stub that returns predefined chunks sequentially."""

    def __init__(self, chunks):
        self._chunks = [
            chunk if isinstance(chunk, bytes) else chunk.encode() for chunk in chunks
        ]
        self.recv_calls = 0

    def recv(self, _):
        """Return the next chunk or an empty bytes object when exhausted."""

        self.recv_calls += 1
        if self._chunks:
            return self._chunks.pop(0)
        return b""


class FailingSocket(FakeSocket):
    """Socket stub whose recv fails after the scripted chunks run out."""

    def __init__(self, chunks, error):
        super().__init__(chunks)
        self._error = error

    def recv(self, size):
        if not self._chunks:
            raise self._error
        return super().recv(size)


def test_read_frame_handles_byte_at_a_time_reads():
    """Short reads must not be mistaken for the end of the stream."""

    raw = b"POST /files/a HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello"
    client = FakeSocket([raw[i : i + 1] for i in range(len(raw))])
    assert read_frame(client) == raw


def test_read_frame_finds_delimiter_split_across_chunks():
    """The blank-line boundary may straddle two reads."""

    client = FakeSocket([b"GET / HTTP/1.1\r\n\r", b"\n"])
    assert read_frame(client) == b"GET / HTTP/1.1\r\n\r\n"


def test_read_frame_drops_bytes_beyond_declared_body():
    """Only headers plus the declared body are returned."""

    client = FakeSocket([b"POST /x HTTP/1.1\r\nContent-Length: 2\r\n\r\nabEXTRA"])
    assert read_frame(client) == b"POST /x HTTP/1.1\r\nContent-Length: 2\r\n\r\nab"


def test_read_frame_stops_reading_once_complete():
    """No further recv happens after the frame is assembled."""

    client = FakeSocket([b"GET / HTTP/1.1\r\n\r\n", b"never read"])
    read_frame(client)
    assert client.recv_calls == 1


def test_read_frame_returns_none_when_nothing_was_sent():
    """An immediately closed stream is 'no data', not an error."""

    assert read_frame(FakeSocket([])) is None


def test_read_frame_raises_when_stream_ends_in_headers():
    """Ending before the blank line is a read failure."""

    with pytest.raises(ReadError, match="headers"):
        read_frame(FakeSocket([b"GET / HTTP/1.1\r\n"]))


def test_read_frame_raises_when_body_is_short():
    """Ending before the declared body arrives is a read failure."""

    client = FakeSocket([b"POST /x HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc"])
    with pytest.raises(ReadError, match="body"):
        read_frame(client)


def test_read_frame_wraps_socket_errors():
    """Timeouts and resets mid-frame become ReadError."""

    client = FailingSocket([b"GET / HTTP"], TimeoutError("timed out"))
    with pytest.raises(ReadError) as excinfo:
        read_frame(client)
    assert isinstance(excinfo.value.__cause__, TimeoutError)


def test_read_frame_enforces_size_limit():
    """A declared body past the limit is refused before it is read."""

    client = FakeSocket([b"POST /x HTTP/1.1\r\nContent-Length: 100\r\n\r\n"])
    with pytest.raises(ReadError, match="limit"):
        read_frame(client, max_frame_bytes=64)


def test_frame_buffer_reports_missing_bytes():
    """The buffer knows how much body is still outstanding."""

    buffer = FrameBuffer()
    assert buffer.missing() == 1
    buffer.feed(b"POST /x HTTP/1.1\r\nContent-Length: 4\r\n\r\n")
    assert buffer.headers_complete
    assert buffer.missing() == 4
    buffer.feed(b"ab")
    assert buffer.missing() == 2
    with pytest.raises(ReadError):
        buffer.frame()
    buffer.feed(b"cd")
    assert buffer.missing() == 0
    assert buffer.frame().endswith(b"\r\n\r\nabcd")


def test_repeated_content_length_reads_up_to_the_last_value():
    """The frame length follows the Content-Length the header map keeps."""

    raw = b"POST /files/x HTTP/1.1\r\nContent-Length: 2\r\nContent-Length: 5\r\n\r\n"
    client = FakeSocket([raw, b"abc", b"de"])

    request = receive_request(client, max_frame_bytes=1024)

    assert request.headers == {"Content-Length": "5"}
    assert request.body == b"abcde"
