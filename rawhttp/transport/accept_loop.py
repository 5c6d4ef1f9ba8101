"""Main connection acceptance loop."""

import argparse
import socket
import time

from rawhttp.bootstrap.config import ServerConfig
from rawhttp.bootstrap.socket_factory import create_server_socket
from rawhttp.domain.connection_id import get_logger
from rawhttp.lifecycle.state import ServerLifecycle
from rawhttp.transport.context import WorkerContext
from rawhttp.transport.worker import handle_client

ACCEPT_LOGGER = get_logger("transport.accept")

# Pause after a failed accept so a persistent fault (e.g. EMFILE) does not spin.
ACCEPT_ERROR_BACKOFF_SECONDS = 0.1


def run_server(
    args: argparse.Namespace, config: ServerConfig, lifecycle: ServerLifecycle
) -> None:
    """Accept connections until shutdown, one worker thread per connection."""
    server_socket = create_server_socket(args.host, args.port)
    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": args.host,
            "port": args.port,
            "directory": config.directory,
        },
    )
    context = WorkerContext.from_config(config)

    try:
        while not lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                time.sleep(ACCEPT_ERROR_BACKOFF_SECONDS)
                continue

            ACCEPT_LOGGER.debug(
                "Client connection accepted",
                extra={
                    "event": "client_accepted",
                    "client": f"{client_address[0]}:{client_address[1]}",
                },
            )
            lifecycle.spawn_worker(handle_client, client_socket, client_address, context)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "shutdown_grace_seconds": config.shutdown_grace_seconds,
            },
        )
        lifecycle.wait_for_workers(config.shutdown_grace_seconds)
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
