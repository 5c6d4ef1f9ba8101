"""Handlers for the index, echo and user-agent routes."""

import logging

from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.http_types import Request, Response
from rawhttp.domain.response_builders import ok_response, text_response
from rawhttp.domain.storage import FileStorage

SYSTEM_LOGGER = get_logger("handlers.system")

ECHO_SEGMENT = "echo/"
USER_AGENT_HEADER = "User-Agent"


def handle_index(_request: Request, _storage: FileStorage) -> Response:
    """Answer ``/`` with an empty 200."""
    return ok_response()


def handle_echo(request: Request, _storage: FileStorage) -> Response:
    """Return the raw path text following the first ``echo/`` segment."""
    index = request.path.index(ECHO_SEGMENT)
    content = request.path[index + len(ECHO_SEGMENT) :]
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "bytes_out": len(content)},
        )
    return text_response(content)


def handle_user_agent(request: Request, _storage: FileStorage) -> Response:
    """Return the User-Agent header, or an empty body when it is missing."""
    agent = request.headers.get(USER_AGENT_HEADER, "")
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "User-agent request processed", extra={"event": "user_agent_request"}
        )
    return text_response(agent)
