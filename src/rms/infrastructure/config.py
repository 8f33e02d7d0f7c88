"""Runtime configuration, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def _bool(val: str) -> bool:
    return val.strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    lock_timeout_seconds: float = 5.0
    upcoming_days: int = 7
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            data_dir=Path(os.getenv("RMS_DATA_DIR", str(DEFAULT_DATA_DIR))),
            lock_timeout_seconds=float(os.getenv("RMS_LOCK_TIMEOUT", "5")),
            upcoming_days=int(os.getenv("RMS_UPCOMING_DAYS", "7")),
            log_level=os.getenv("RMS_LOG_LEVEL", "INFO").upper(),
            log_json=_bool(os.getenv("RMS_LOG_JSON", "false")),
        )
