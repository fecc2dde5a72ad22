"""Best-effort background work with no delivery guarantee."""

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


def fire_and_forget(
    func: Callable[..., Any],
    *args: Any,
    description: str = "background task",
    **kwargs: Any,
) -> threading.Thread:
    """
    Run ``func`` on a daemon thread and return immediately.

    Failures are logged, never raised to the caller. Nothing waits for
    the thread, so the work may not run at all if the process exits.
    """
    def runner():
        try:
            func(*args, **kwargs)
        except Exception as e:
            logger.warning(f"{description} failed: {e}")

    thread = threading.Thread(target=runner, name=description, daemon=True)
    thread.start()
    return thread
