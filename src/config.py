"""Configuration loaded from .env"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    anomaly_trailing_weeks: int = 4
    top_correlations: int = 5
    compare_to_baseline: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from IMPACT_* environment variables."""
        return cls(
            anomaly_trailing_weeks=max(0, _env_int("IMPACT_ANOMALY_TRAILING_WEEKS", 4)),
            top_correlations=max(1, _env_int("IMPACT_TOP_CORRELATIONS", 5)),
            compare_to_baseline=os.getenv("IMPACT_COMPARE_TO_BASELINE", "0").strip() == "1",
            log_level=(os.getenv("IMPACT_LOG_LEVEL") or "INFO").strip().upper(),
        )
