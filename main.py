"""Raw socket HTTP/1.1 server serving echo, user-agent and file routes."""

import signal
import sys
from typing import Optional

from rawhttp.bootstrap.config import ServerConfig, parse_cli_args
from rawhttp.bootstrap.logging_setup import configure_logging
from rawhttp.domain.connection_id import get_logger
from rawhttp.lifecycle.state import ServerLifecycle
from rawhttp.transport.accept_loop import run_server

SERVER_LOGGER = get_logger("server")


def main(argv: Optional[list[str]] = None) -> None:
    """Start the HTTP server and serve until SIGINT or SIGTERM."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination)

    config = ServerConfig.from_args(args)
    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal", extra={"event": "signal", "signal": signum}
        )
        lifecycle.request_stop()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": args.host,
            "port": args.port,
            "directory": config.directory,
            "socket_timeout": config.socket_timeout,
            "shutdown_grace_seconds": config.shutdown_grace_seconds,
        },
    )
    run_server(args, config, lifecycle)


if __name__ == "__main__":
    main()
