"""File serving handlers."""

from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.errors import (
    FileCreateError,
    FileOpenError,
    FileReadError,
    FileWriteError,
)
from rawhttp.domain.http_types import Request, Response
from rawhttp.domain.response_builders import (
    bad_request_response,
    created_response,
    internal_error_response,
    not_found_response,
    octet_stream_response,
)
from rawhttp.domain.storage import FileStorage

FILE_LOGGER = get_logger("handlers.file")

FILES_SEGMENT = "/files"
FILES_PREFIX = "/files/"


def file_name_from_path(path: str) -> str:
    """Return the text after the ``/files/`` segment, or ``""`` if absent."""
    index = path.find(FILES_PREFIX)
    if index < 0:
        return ""
    return path[index + len(FILES_PREFIX) :]


def _read_file(request: Request, storage: FileStorage, name: str) -> Response:
    try:
        data = storage.read(name)
    except (FileOpenError, FileReadError) as error:
        FILE_LOGGER.info(
            "File not readable",
            extra={
                "event": "file_not_found",
                "route": request.path,
                "error_type": type(error).__name__,
            },
        )
        return not_found_response()
    FILE_LOGGER.info(
        "File read operation complete",
        extra={"event": "file_read_complete", "route": request.path},
    )
    return octet_stream_response(data)


def _write_file(request: Request, storage: FileStorage, name: str) -> Response:
    try:
        storage.write(name, request.body)
    except FileCreateError:
        FILE_LOGGER.warning(
            "File could not be created",
            extra={"event": "file_create_failed", "route": request.path},
        )
        return bad_request_response()
    except FileWriteError:
        FILE_LOGGER.error(
            "File write failed",
            extra={"event": "file_write_failed", "route": request.path},
        )
        return internal_error_response()
    FILE_LOGGER.info(
        "File write complete",
        extra={
            "event": "file_write_complete",
            "route": request.path,
            "bytes_in": len(request.body),
        },
    )
    return created_response()


def handle_files(request: Request, storage: FileStorage) -> Response:
    """Serve or write a file based on the HTTP method."""
    name = file_name_from_path(request.path)
    if request.method == "GET":
        return _read_file(request, storage, name)
    if request.method == "POST":
        return _write_file(request, storage, name)
    FILE_LOGGER.warning(
        "Unsupported method",
        extra={
            "event": "method_not_supported",
            "route": request.path,
            "method": request.method,
        },
    )
    return not_found_response()
