"""
Application configuration, read from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT_DEFAULT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class AppConfig:
    db_path: Path = Path("data") / "grind.db"
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    log_to_file: bool = True
    log_format: str = LOG_FORMAT_DEFAULT
    celebration_seconds: float = 5.0

    @property
    def log_file(self) -> Path:
        return self.log_dir / "grind.log"

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "AppConfig":
        env = os.environ if environ is None else environ
        errors = []

        level = env.get("GRIND_LOG_LEVEL", "INFO").upper()
        if level not in LOG_LEVELS:
            errors.append(f"GRIND_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

        raw_seconds = env.get("GRIND_CELEBRATION_SECONDS", "5")
        try:
            seconds = float(raw_seconds)
            if seconds <= 0:
                errors.append("GRIND_CELEBRATION_SECONDS must be positive")
        except ValueError:
            seconds = 0.0
            errors.append(f"GRIND_CELEBRATION_SECONDS is not a number: {raw_seconds!r}")

        if errors:
            raise ValueError("Invalid configuration:\n" + "\n".join(f"- {e}" for e in errors))

        return cls(
            db_path=Path(env.get("GRIND_DB_PATH", str(Path("data") / "grind.db"))),
            log_dir=Path(env.get("GRIND_LOG_DIR", "logs")),
            log_level=level,
            log_to_file=env.get("GRIND_LOG_TO_FILE", "true").lower() == "true",
            log_format=env.get("GRIND_LOG_FORMAT", LOG_FORMAT_DEFAULT),
            celebration_seconds=seconds,
        )
