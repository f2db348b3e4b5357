"""Application-wide configuration defaults and helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pmi_insight.domain.models.financials import MAThresholds

# Base directory for resolving relative paths.
BASE_DIR = Path(__file__).resolve().parent

MAX_YEARS_BACK = 5
DEFAULT_RATE_LIMIT = 60


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse truthy environment values like '1' or 'true'."""
    if value is None:
        return default
    if not isinstance(value, str):
        value = str(value)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(value: Optional[str]) -> Optional[int]:
    """Safely parse an integer env var, returning None on failure."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _to_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(str(value).strip())
    except (TypeError, ValueError):
        return None


def _threshold(name: str, default: float) -> float:
    """Missing, zero and unparsable values all fall back to the default."""
    parsed = _to_float(os.getenv(name))
    return parsed if parsed else default


@dataclass
class Config:
    """Runtime configuration loaded from environment variables."""

    debug: bool = False
    database_path: Path = BASE_DIR / "data" / "pmi_insight.db"
    sqlite_echo: bool = False
    output_dir: Path = BASE_DIR / "reports"
    financial_data_provider: str = "mock"
    financial_data_years_back: int = 3
    rate_limit_per_minute: int = DEFAULT_RATE_LIMIT
    ma_revenue_threshold: float = 2_000_000
    ma_ebitda_margin_threshold: float = 0.10
    ma_ebitda_threshold: float = 200_000

    @classmethod
    def from_env(cls) -> "Config":
        """Build a configuration instance using environment overrides."""
        base = BASE_DIR
        db_path = Path(os.getenv("PMI_DATABASE_PATH", base / "data" / "pmi_insight.db"))
        output_dir = Path(os.getenv("OUTPUT_DIR", base / "reports"))

        years_back = _to_int(os.getenv("FINANCIAL_DATA_YEARS_BACK")) or 3
        rate_limit = _to_int(os.getenv("FINANCIAL_DATA_RATE_LIMIT")) or DEFAULT_RATE_LIMIT

        config = cls(
            debug=_to_bool(os.getenv("APP_DEBUG")),
            database_path=db_path,
            sqlite_echo=_to_bool(os.getenv("SQLITE_ECHO")),
            output_dir=output_dir,
            financial_data_provider=(os.getenv("FINANCIAL_DATA_PROVIDER") or "mock").strip().lower(),
            financial_data_years_back=max(1, min(years_back, MAX_YEARS_BACK)),
            rate_limit_per_minute=rate_limit,
            ma_revenue_threshold=_threshold("MA_REVENUE_THRESHOLD", 2_000_000),
            ma_ebitda_margin_threshold=_threshold("MA_EBITDA_MARGIN_THRESHOLD", 0.10),
            ma_ebitda_threshold=_threshold("MA_EBITDA_THRESHOLD", 200_000),
        )
        config.ensure_directories()
        return config

    @property
    def database_uri(self) -> str:
        return f"sqlite:///{self.database_path}"

    def ma_thresholds(self) -> MAThresholds:
        """Scorer thresholds; growth and score cutoffs are not environment-driven."""
        return MAThresholds(
            revenue_threshold=self.ma_revenue_threshold,
            ebitda_margin_threshold=self.ma_ebitda_margin_threshold,
            ebitda_threshold=self.ma_ebitda_threshold,
        )

    def ensure_directories(self) -> None:
        """Create directories needed for runtime artifacts."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)
