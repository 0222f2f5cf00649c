"""Event sinks for provider observability.

LoggingEventSink writes events to the standard logging tree. QueuedEventSink
moves delivery onto a worker thread so a slow or failing backend never adds
latency to configuration reads.
"""

import logging
import queue
import threading
from typing import Any, Optional

from ..interfaces import IEventSink

logger = logging.getLogger(__name__)

event_logger = logging.getLogger("scmsettings.events")


class LoggingEventSink(IEventSink):
    """Event sink backed by a stdlib logger."""

    def __init__(self, event_log: Optional[logging.Logger] = None):
        self._log = event_log or event_logger

    def generic_event(self, site_name: str, message: str, **fields: Any) -> None:
        self._log.info(
            "%s: %s", site_name, message,
            extra={"site_name": site_name, "event_fields": fields},
        )

    def exception_event(
        self,
        site_name: str,
        method: str,
        message: str,
        error: BaseException,
        **fields: Any,
    ) -> None:
        self._log.error(
            "%s: %s [%s]", site_name, message, method,
            exc_info=(type(error), error, error.__traceback__),
            extra={"site_name": site_name, "method": method, "event_fields": fields},
        )


_STOP = object()


class QueuedEventSink(IEventSink):
    """Non-blocking wrapper that delivers events on a daemon thread.

    Events are queued with put_nowait; when the bounded queue is full the event
    is dropped and counted in ``dropped``. Errors raised by the wrapped sink are
    logged on the worker thread and never reach the caller.
    """

    def __init__(self, inner: IEventSink, maxsize: int = 1000):
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._inner = inner
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = 0
        self._dropped_lock = threading.Lock()
        self._worker = threading.Thread(
            target=self._run, name="scmsettings-events", daemon=True
        )
        self._worker.start()

    @property
    def inner(self) -> IEventSink:
        return self._inner

    def generic_event(self, site_name: str, message: str, **fields: Any) -> None:
        self._enqueue(self._inner.generic_event, (site_name, message), fields)

    def exception_event(
        self,
        site_name: str,
        method: str,
        message: str,
        error: BaseException,
        **fields: Any,
    ) -> None:
        self._enqueue(
            self._inner.exception_event, (site_name, method, message, error), fields
        )

    def _enqueue(self, target, args: tuple, fields: dict) -> None:
        if self._closed:
            self._count_dropped()
            return
        try:
            self._queue.put_nowait((target, args, fields))
        except queue.Full:
            self._count_dropped()

    def _count_dropped(self) -> None:
        with self._dropped_lock:
            self.dropped += 1

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                target, args, fields = item
                try:
                    target(*args, **fields)
                except Exception:
                    logger.exception("Event delivery failed")
            finally:
                self._queue.task_done()

    def flush(self) -> None:
        """Block until every queued event has been delivered."""
        self._queue.join()

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Deliver pending events and stop the worker thread."""
        if self._closed:
            return
        self._closed = True
        # Blocking put: the stop marker must not be dropped
        self._queue.put(_STOP)
        self._worker.join(timeout)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
