from __future__ import annotations

from dataclasses import dataclass
import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EngineSettings:
    money_precision: int
    zero_sum_tolerance: float
    strict: bool
    log_level: str

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            money_precision=int(os.getenv("GOLFBETS_MONEY_PRECISION", "2")),
            zero_sum_tolerance=float(os.getenv("GOLFBETS_ZERO_SUM_TOLERANCE", "1e-6")),
            strict=_env_flag("GOLFBETS_STRICT"),
            log_level=os.getenv("GOLFBETS_LOG_LEVEL", "INFO").upper(),
        )
