"""Event publishers.

``BackgroundEventPublisher`` decouples the caller from the sink: ``publish``
only enqueues, and a worker thread forwards events to the wrapped
publisher.  A failing sink is logged and never reaches the caller.
"""

from __future__ import annotations

import json
import queue
import threading
from pathlib import Path

import structlog

from stockroom.domain.events import DomainEvent, EventPublisher

logger = structlog.get_logger(__name__)


class LoggingEventPublisher(EventPublisher):
    """Emit each event as a structured log line."""

    def publish(self, event: DomainEvent) -> None:
        payload = event.to_payload()
        logger.info("Event published", event_name=event.name, data=payload["data"])


class JsonLinesEventPublisher(EventPublisher):
    """Append each event to an outbox file, one JSON document per line."""

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()

    def publish(self, event: DomainEvent) -> None:
        line = json.dumps(event.to_payload(), ensure_ascii=False)
        with self._lock:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._file_path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")


class FanOutEventPublisher(EventPublisher):
    """Deliver each event to every sink; one failing sink does not stop the rest."""

    def __init__(self, publishers: list[EventPublisher]) -> None:
        self._publishers = list(publishers)

    def publish(self, event: DomainEvent) -> None:
        for publisher in self._publishers:
            try:
                publisher.publish(event)
            except Exception:
                logger.exception(
                    "Event sink failed",
                    event_name=event.name,
                    sink=type(publisher).__name__,
                )


_STOP = object()


class BackgroundEventPublisher(EventPublisher):
    """Forward events to ``delegate`` from a worker thread."""

    def __init__(self, delegate: EventPublisher, max_queue: int = 1000) -> None:
        self._delegate = delegate
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue)
        self._worker = threading.Thread(
            target=self._run, name="event-publisher", daemon=True
        )
        self._worker.start()

    def publish(self, event: DomainEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            logger.warning("Event queue full, dropping event", event_name=event.name)

    def close(self, timeout: float = 5.0) -> None:
        """Deliver everything queued so far, then stop the worker."""
        self._queue.put(_STOP)
        self._worker.join(timeout)

    def _run(self) -> None:
        while True:
            event = self._queue.get()
            try:
                if event is _STOP:
                    return
                self._delegate.publish(event)
            except Exception:
                logger.exception(
                    "Event delivery failed",
                    event_name=getattr(event, "name", None),
                )
            finally:
                self._queue.task_done()
