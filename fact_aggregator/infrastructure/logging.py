"""Logging setup: handlers run on a background thread behind a queue."""

import atexit
import logging
import logging.handlers
import queue
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_listener: Optional[logging.handlers.QueueListener] = None


def configure_logging(level: str = "INFO") -> None:
    """Route root logging through a QueueHandler.

    Log records are enqueued on the calling thread and written by a
    QueueListener thread, so slow sinks never block the event loop.
    Calling this again only updates the level.
    """
    global _listener

    root = logging.getLogger()
    root.setLevel(level)
    if _listener is not None:
        return

    log_queue: queue.SimpleQueue = queue.SimpleQueue()
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root.addHandler(logging.handlers.QueueHandler(log_queue))
    _listener = logging.handlers.QueueListener(log_queue, stream_handler, respect_handler_level=True)
    _listener.start()
    atexit.register(shutdown_logging)


def shutdown_logging() -> None:
    """Flush and stop the background log listener."""
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None
