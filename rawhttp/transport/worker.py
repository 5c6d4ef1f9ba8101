"""Per-connection driver: read, parse, route, respond, close."""

import logging
import socket
import time
from enum import Enum
from typing import Optional

from rawhttp.domain.connection_id import (
    clear_connection_id,
    generate_connection_id,
    get_logger,
    set_connection_id,
)
from rawhttp.domain.errors import ParseError, ReadError
from rawhttp.domain.http_types import Request, Response
from rawhttp.domain.response_builders import (
    bad_request_response,
    internal_error_response,
)
from rawhttp.pipeline.io import receive_request, send_response
from rawhttp.pipeline.router import route_request
from rawhttp.transport.context import WorkerContext

WORKER_LOGGER = get_logger("transport.worker")


class ConnectionState(Enum):
    """Stages a connection passes through while it is being served."""

    ACCEPTED = "accepted"
    READING = "reading"
    PARSED = "parsed"
    ROUTED = "routed"
    RESPONDING = "responding"
    ERROR_RESPONDING = "error_responding"
    CLOSED = "closed"


# CLOSED is reachable from every state and is not listed here.
TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.ACCEPTED: frozenset({ConnectionState.READING}),
    ConnectionState.READING: frozenset(
        {ConnectionState.PARSED, ConnectionState.ERROR_RESPONDING}
    ),
    ConnectionState.PARSED: frozenset(
        {ConnectionState.ROUTED, ConnectionState.ERROR_RESPONDING}
    ),
    ConnectionState.ROUTED: frozenset({ConnectionState.RESPONDING}),
    ConnectionState.RESPONDING: frozenset(),
    ConnectionState.ERROR_RESPONDING: frozenset(),
    ConnectionState.CLOSED: frozenset(),
}


class ConnectionDriver:
    """Serves exactly one request on one accepted socket.

    Every failure is converted into a best-effort response and a close on
    this connection only; nothing is re-raised to the accept loop.
    """

    def __init__(
        self,
        client_socket: socket.socket,
        client_address: tuple[str, int],
        context: WorkerContext,
    ) -> None:
        self.client_socket = client_socket
        self.client = f"{client_address[0]}:{client_address[1]}"
        self.context = context
        self.state = ConnectionState.ACCEPTED
        self.history: list[ConnectionState] = [self.state]

    def _transition(self, new_state: ConnectionState) -> None:
        allowed = TRANSITIONS[self.state]
        if new_state is not ConnectionState.CLOSED and new_state not in allowed:
            raise RuntimeError(
                f"illegal connection transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        self.history.append(new_state)
        if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
            WORKER_LOGGER.debug(
                "Connection state changed",
                extra={
                    "event": "state_changed",
                    "state": new_state.value,
                    "client": self.client,
                },
            )

    def _apply_timeout(self) -> None:
        timeout = self.context.config.socket_timeout
        self.client_socket.settimeout(timeout if timeout > 0 else None)

    def _read_request(self) -> Optional[Request]:
        """Return the parsed request, or None once the error path has run."""
        self._transition(ConnectionState.READING)
        try:
            request = receive_request(
                self.client_socket, self.context.config.max_frame_bytes
            )
        except ReadError as error:
            WORKER_LOGGER.warning(
                "Incomplete request received: %s",
                error,
                extra={
                    "event": "read_error",
                    "client": self.client,
                    "error_type": type(error).__name__,
                },
            )
            self._respond_with_error(bad_request_response())
            return None
        except ParseError as error:
            WORKER_LOGGER.warning(
                "Malformed request received",
                extra={
                    "event": "malformed_request",
                    "client": self.client,
                    "parse_error": error.kind.value,
                },
            )
            self._respond_with_error(bad_request_response())
            return None

        if request is None:
            if WORKER_LOGGER.logger.isEnabledFor(logging.DEBUG):
                WORKER_LOGGER.debug(
                    "Client closed without sending a request",
                    extra={"event": "client_disconnected", "client": self.client},
                )
            return None
        self._transition(ConnectionState.PARSED)
        return request

    def _route(self, request: Request) -> Optional[Response]:
        try:
            response = route_request(request, self.context.storage)
        except Exception as error:  # pylint: disable=broad-except
            WORKER_LOGGER.error(
                "Handler failed",
                extra={
                    "event": "handler_error",
                    "client": self.client,
                    "route": request.path,
                    "error_type": type(error).__name__,
                },
                exc_info=True,
            )
            self._respond_with_error(internal_error_response())
            return None
        self._transition(ConnectionState.ROUTED)
        return response

    def _respond_with_error(self, response: Response) -> None:
        self._transition(ConnectionState.ERROR_RESPONDING)
        try:
            send_response(self.client_socket, response)
        except OSError as error:
            WORKER_LOGGER.debug(
                "Error response not delivered",
                extra={
                    "event": "error_response_failed",
                    "client": self.client,
                    "error_type": type(error).__name__,
                },
            )

    def _serve(self) -> None:
        self._apply_timeout()
        request = self._read_request()
        if request is None:
            return
        response = self._route(request)
        if response is None:
            return
        self._transition(ConnectionState.RESPONDING)
        send_response(self.client_socket, response)
        WORKER_LOGGER.info(
            "Request served",
            extra={
                "event": "request_complete",
                "client": self.client,
                "method": request.method,
                "route": request.path,
                "status_code": response.status,
            },
        )

    def _close(self) -> None:
        if self.state is ConnectionState.CLOSED:
            return
        try:
            self.client_socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass
        self.client_socket.close()
        self._transition(ConnectionState.CLOSED)

    def run(self) -> None:
        """Serve the connection and close it exactly once."""
        started = time.monotonic()
        try:
            self._serve()
        except (ConnectionError, TimeoutError, OSError) as error:
            WORKER_LOGGER.error(
                "Error handling client connection",
                extra={
                    "event": "connection_error",
                    "client": self.client,
                    "error_type": type(error).__name__,
                },
            )
        except Exception as error:  # pylint: disable=broad-except
            WORKER_LOGGER.error(
                "Unexpected error in worker",
                extra={
                    "event": "worker_error",
                    "client": self.client,
                    "error_type": type(error).__name__,
                },
                exc_info=True,
            )
        finally:
            self._close()
            WORKER_LOGGER.debug(
                "Socket closed",
                extra={
                    "event": "socket_closed",
                    "client": self.client,
                    "duration_ms": round((time.monotonic() - started) * 1000, 3),
                },
            )


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    context: WorkerContext,
) -> ConnectionDriver:
    """Serve one connection under a fresh connection ID."""
    set_connection_id(generate_connection_id())
    driver = ConnectionDriver(client_socket, client_address, context)
    try:
        driver.run()
    finally:
        clear_connection_id()
    return driver
