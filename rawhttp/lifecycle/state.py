"""Server lifecycle state management."""

import threading
import time
from typing import Any, Callable

from rawhttp.domain.connection_id import get_logger

LIFECYCLE_LOGGER = get_logger("lifecycle")


class ServerLifecycle:
    """Tracks connection worker threads and the shutdown signal."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._workers: set[threading.Thread] = set()

    def should_stop(self) -> bool:
        """Check if the accept loop should stop taking connections."""
        return self._stop_event.is_set()

    def request_stop(self) -> None:
        """Ask the accept loop to stop; running workers finish normally."""
        if not self._stop_event.is_set():
            self._stop_event.set()
            LIFECYCLE_LOGGER.info(
                "Beginning graceful shutdown", extra={"event": "shutdown_requested"}
            )

    def spawn_worker(self, target: Callable[..., Any], *args: Any) -> threading.Thread:
        """Run ``target(*args)`` on a tracked non-daemon thread."""

        def run() -> None:
            try:
                target(*args)
            finally:
                self._discard(threading.current_thread())

        thread = threading.Thread(target=run, daemon=False)
        with self._lock:
            self._workers.add(thread)
        thread.start()
        return thread

    def _discard(self, thread: threading.Thread) -> None:
        with self._lock:
            self._workers.discard(thread)

    def active_worker_count(self) -> int:
        """Return the number of workers that have not finished yet."""
        with self._lock:
            return len(self._workers)

    def wait_for_workers(self, timeout: float) -> bool:
        """Wait for all worker threads to complete within the timeout."""
        deadline = time.monotonic() + timeout
        while True:
            with self._lock:
                active_workers = [w for w in self._workers if w.is_alive()]
            if not active_workers:
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                LIFECYCLE_LOGGER.warning(
                    "Shutdown timeout exceeded",
                    extra={
                        "event": "shutdown_timeout",
                        "remaining_workers": len(active_workers),
                    },
                )
                return False
            for worker in active_workers:
                worker.join(timeout=min(0.1, remaining))
                if time.monotonic() >= deadline:
                    break
