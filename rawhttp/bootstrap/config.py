"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 4221
DEFAULT_SOCKET_TIMEOUT = _env_int("RAWHTTP_SOCKET_TIMEOUT", 60)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_int("RAWHTTP_SHUTDOWN_GRACE_SECONDS", 30)
DEFAULT_MAX_FRAME_BYTES = _env_int("RAWHTTP_MAX_FRAME_BYTES", 5 * 1024 * 1024)


@dataclass
class ServerConfig:
    """Runtime settings shared with every connection worker."""

    directory: Optional[str] = None
    socket_timeout: int = DEFAULT_SOCKET_TIMEOUT
    shutdown_grace_seconds: int = DEFAULT_SHUTDOWN_GRACE_SECONDS
    max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerConfig":
        return cls(
            directory=args.directory,
            socket_timeout=args.socket_timeout,
            shutdown_grace_seconds=args.shutdown_grace_seconds,
            max_frame_bytes=args.max_frame_bytes,
        )


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(description="Raw socket HTTP/1.1 server")
    parser.add_argument(
        "--directory",
        default=os.getenv("RAWHTTP_DIRECTORY"),
        help="Root directory for the /files route",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    default_log_level = os.getenv("RAWHTTP_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("RAWHTTP_LOG_DESTINATION", "stdout")
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--socket-timeout",
        type=int,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Per-connection socket timeout in seconds (0 to disable)",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=int,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period in seconds for graceful shutdown",
    )
    parser.add_argument(
        "--max-frame-bytes",
        type=int,
        default=DEFAULT_MAX_FRAME_BYTES,
        help="Largest request frame (headers and body) accepted",
    )
    return parser.parse_args(argv)
