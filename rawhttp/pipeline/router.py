"""Request routing logic."""

from dataclasses import dataclass
from typing import Callable, Optional

from rawhttp.domain.connection_id import get_logger
from rawhttp.domain.errors import RouteNotFound
from rawhttp.domain.http_types import Request, Response
from rawhttp.domain.response_builders import not_found_response
from rawhttp.domain.storage import FileStorage
from rawhttp.handlers.file_handler import FILES_SEGMENT, handle_files
from rawhttp.handlers.system_handlers import (
    ECHO_SEGMENT,
    handle_echo,
    handle_index,
    handle_user_agent,
)

ROUTER_LOGGER = get_logger("pipeline.router")

Handler = Callable[[Request, FileStorage], Response]


@dataclass(frozen=True)
class Route:
    """A named predicate over the request and the handler it selects."""

    name: str
    matches: Callable[[Request], bool]
    handler: Handler


ROUTES: tuple[Route, ...] = (
    Route("index", lambda request: request.path == "/", handle_index),
    Route("echo", lambda request: ECHO_SEGMENT in request.path, handle_echo),
    Route(
        "user_agent", lambda request: "/user-agent" in request.path, handle_user_agent
    ),
    Route("files", lambda request: FILES_SEGMENT in request.path, handle_files),
)


def match_route(request: Request, routes: tuple[Route, ...] = ROUTES) -> Route:
    """Return the first route whose predicate accepts ``request``."""
    for route in routes:
        if route.matches(request):
            return route
    raise RouteNotFound(request.path)


def route_request(
    request: Request,
    storage: FileStorage,
    routes: Optional[tuple[Route, ...]] = None,
) -> Response:
    """Route the request to the appropriate handler and return a response."""
    try:
        route = match_route(request, ROUTES if routes is None else routes)
    except RouteNotFound:
        ROUTER_LOGGER.info(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "route": request.path,
                "method": request.method,
            },
        )
        return not_found_response()

    ROUTER_LOGGER.debug(
        "Route matched", extra={"event": "route_matched", "route": route.name}
    )
    return route.handler(request, storage)
