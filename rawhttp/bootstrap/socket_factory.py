"""Listening socket creation."""

import socket

# accept() wakes at this interval so the loop can observe shutdown.
ACCEPT_POLL_SECONDS = 0.5


def create_server_socket(host: str, port: int) -> socket.socket:
    """Create the listening socket used by the accept loop."""
    server_socket = socket.create_server(
        (host, port), reuse_port=hasattr(socket, "SO_REUSEPORT")
    )
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    return server_socket
