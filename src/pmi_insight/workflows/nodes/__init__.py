"""Convenience re-exports for workflow nodes."""
from __future__ import annotations

from . import (
    benchmark,
    data_load,
    kpis,
    ma_score,
    narrative,
    writing,
)

__all__ = [
    "benchmark",
    "data_load",
    "kpis",
    "ma_score",
    "narrative",
    "writing",
]
