"""Runtime settings, read from ``STOCKROOM_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LOG_FORMATS = ("console", "json")


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    events_file: Path
    lock_timeout: float = 5.0
    log_level: str = "INFO"
    log_format: str = "console"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        data_dir = Path(env.get("STOCKROOM_DATA_DIR", "data")).expanduser()
        events_file = Path(
            env.get("STOCKROOM_EVENTS_FILE", str(data_dir / "events.jsonl"))
        ).expanduser()

        raw_timeout = env.get("STOCKROOM_LOCK_TIMEOUT", "5.0")
        try:
            lock_timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(
                f"STOCKROOM_LOCK_TIMEOUT must be a number, got {raw_timeout!r}"
            ) from None
        if lock_timeout <= 0:
            raise ValueError("STOCKROOM_LOCK_TIMEOUT must be positive")

        log_level = env.get("STOCKROOM_LOG_LEVEL", "INFO").upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"STOCKROOM_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")

        log_format = env.get("STOCKROOM_LOG_FORMAT", "console").lower()
        if log_format not in _LOG_FORMATS:
            raise ValueError(f"STOCKROOM_LOG_FORMAT must be one of {', '.join(_LOG_FORMATS)}")

        return cls(
            data_dir=data_dir,
            events_file=events_file,
            lock_timeout=lock_timeout,
            log_level=log_level,
            log_format=log_format,
        )
