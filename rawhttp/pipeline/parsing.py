"""HTTP request parsing."""

from typing import Iterable, Iterator, Optional

from rawhttp.domain.errors import ParseError, ParseErrorKind
from rawhttp.domain.http_types import Request

HEADER_DELIMITER = b"\r\n\r\n"
LINE_TERMINATOR = "\r\n"
HEADER_SEPARATOR = ": "
HEADER_ENCODING = "iso-8859-1"
CONTENT_LENGTH = "content-length"


def parse_start_line(line: str) -> tuple[str, str, str]:
    """Split the start-line into method, path and version."""
    tokens = line.split(" ")
    if len(tokens) != 3 or not all(tokens):
        raise ParseError(ParseErrorKind.BAD_START_LINE, line)
    method, path, version = tokens
    return method, path, version


def parse_header_line(line: str) -> tuple[str, str]:
    """Split a header line on ``": "``; it must yield exactly two parts."""
    parts = line.split(HEADER_SEPARATOR)
    if len(parts) != 2:
        raise ParseError(ParseErrorKind.BAD_HEADER, line)
    name, value = parts
    return name, value


def parse_headers(lines: list[str]) -> dict[str, str]:
    """Convert raw header lines into a dictionary keyed by name as received."""
    headers: dict[str, str] = {}
    for line in lines:
        if not line:
            continue
        name, value = parse_header_line(line)
        headers[name] = value
    return headers


def _parse_length(value: Optional[str]) -> int:
    if value is None:
        return 0
    try:
        length = int(value.strip())
    except ValueError:
        return 0
    return max(length, 0)


def _last_declared_length(pairs: Iterable[tuple[str, str]]) -> int:
    """Return the length named by the last Content-Length pair."""
    declared: Optional[str] = None
    for name, value in pairs:
        if name.lower() == CONTENT_LENGTH:
            declared = value
    return _parse_length(declared)


def content_length(headers: dict[str, str]) -> int:
    """Return the declared body length, or 0 when absent or unparsable."""
    return _last_declared_length(headers.items())


def _header_pairs(header_block: bytes) -> Iterator[tuple[str, str]]:
    for raw_line in header_block.split(LINE_TERMINATOR.encode())[1:]:
        name, sep, value = raw_line.partition(HEADER_SEPARATOR.encode())
        if sep:
            yield name.decode(HEADER_ENCODING), value.decode(HEADER_ENCODING)


def declared_content_length(header_block: bytes) -> int:
    """Scan a raw header block for Content-Length without validating it.

    Used while a frame is still being assembled; structural errors are left
    for ``parse_request`` to report. When the header is repeated the last
    line wins, as it does in the parsed header map, so the frame reader and
    the parser always agree on the body length.
    """
    return _last_declared_length(_header_pairs(header_block))


def parse_request(frame: bytes) -> Request:
    """Parse a complete request frame into a ``Request``."""
    header_block, _, remainder = frame.partition(HEADER_DELIMITER)
    lines = header_block.decode(HEADER_ENCODING).split(LINE_TERMINATOR)
    method, path, version = parse_start_line(lines[0])
    headers = parse_headers(lines[1:])
    body = remainder[: declared_content_length(header_block)]
    return Request(method, path, version, headers, body)
