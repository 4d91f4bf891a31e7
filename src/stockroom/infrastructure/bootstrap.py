"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from stockroom.infrastructure.config import Settings
from stockroom.infrastructure.events.publishers import (
    BackgroundEventPublisher,
    FanOutEventPublisher,
    JsonLinesEventPublisher,
    LoggingEventPublisher,
)
from stockroom.infrastructure.persistence.json_store import JsonStore, JsonUnitOfWork


@lru_cache(maxsize=None)
def settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=None)
def _store(data_dir: Path, lock_timeout: float) -> JsonStore:
    # One store per directory so every unit of work shares its locks.
    return JsonStore(data_dir, lock_timeout=lock_timeout)


def unit_of_work() -> JsonUnitOfWork:
    cfg = settings()
    return JsonUnitOfWork(_store(cfg.data_dir.resolve(), cfg.lock_timeout))


@lru_cache(maxsize=None)
def event_publisher() -> BackgroundEventPublisher:
    return BackgroundEventPublisher(
        FanOutEventPublisher(
            [LoggingEventPublisher(), JsonLinesEventPublisher(settings().events_file)]
        )
    )


def shutdown() -> None:
    """Flush pending events before the process exits."""
    if event_publisher.cache_info().currsize:
        event_publisher().close()
        event_publisher.cache_clear()
