"""Per-connection identifiers carried through logging via contextvars."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

LOGGER_ROOT = "rawhttp"

_connection_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)


def generate_connection_id() -> str:
    """Generate a new connection ID using UUID4."""
    return str(uuid.uuid4())


def get_connection_id() -> Optional[str]:
    """Retrieve the connection ID bound to the current context."""
    return _connection_id_var.get()


def set_connection_id(connection_id: str) -> None:
    """Bind a connection ID to the current context."""
    _connection_id_var.set(connection_id)


def clear_connection_id() -> None:
    """Remove the connection ID from the current context."""
    _connection_id_var.set(None)


class ConnectionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps records with connection ID and component."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        if "extra" not in kwargs:
            kwargs["extra"] = {}
        else:
            kwargs["extra"] = dict(kwargs["extra"])

        connection_id = get_connection_id()
        kwargs["extra"]["connection_id"] = (
            connection_id if connection_id is not None else "-"
        )

        logger_name = self.logger.name
        prefix = f"{LOGGER_ROOT}."
        if logger_name.startswith(prefix):
            component = logger_name[len(prefix) :]
        else:
            component = logger_name
        kwargs["extra"]["component"] = component

        return msg, kwargs


def get_logger(name: str) -> ConnectionLoggerAdapter:
    """Return an adapter for ``rawhttp.<name>``."""
    return ConnectionLoggerAdapter(logging.getLogger(f"{LOGGER_ROOT}.{name}"), {})
