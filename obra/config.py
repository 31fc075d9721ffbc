from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache


CSV_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vQibGsEG6YpkTPGDi4O5mNYASLsPhMTQ93ZdujIzEQ30CjFRp5T_TIJ6mxoyRKVXfAuz9VCYczsw2-T"
    "/pub?gid=2133591064&single=true&output=csv"
)
FETCH_TIMEOUT_DEFAULT = 15.0
LOG_LEVEL_DEFAULT = "INFO"


@dataclass(frozen=True)
class DashboardConfig:
    csv_url: str = CSV_URL
    fetch_timeout: float = FETCH_TIMEOUT_DEFAULT
    log_level: str = LOG_LEVEL_DEFAULT


def _as_timeout(raw: object) -> float:
    try:
        out = float(raw)  # type: ignore[arg-type]
    except Exception:
        return FETCH_TIMEOUT_DEFAULT
    if out <= 0:
        return FETCH_TIMEOUT_DEFAULT
    return out


def config_from_env(env: dict | None = None) -> DashboardConfig:
    env = os.environ if env is None else env
    csv_url = (env.get("OBRA_CSV_URL") or "").strip() or CSV_URL
    timeout = _as_timeout(env.get("OBRA_FETCH_TIMEOUT", FETCH_TIMEOUT_DEFAULT))
    log_level = (env.get("OBRA_LOG_LEVEL") or LOG_LEVEL_DEFAULT).strip().upper()
    return DashboardConfig(csv_url=csv_url, fetch_timeout=timeout, log_level=log_level)


@lru_cache(maxsize=1)
def get_config() -> DashboardConfig:
    return config_from_env()


def configure_logging(level: str = LOG_LEVEL_DEFAULT) -> None:
    """Install a basic root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
