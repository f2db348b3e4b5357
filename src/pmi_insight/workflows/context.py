"""Workflow dependency container."""
from __future__ import annotations

from dataclasses import dataclass

from config import Config
from pmi_insight.domain.services.benchmark import BenchmarkEngine
from pmi_insight.domain.services.ma_scoring import MAScorer
from pmi_insight.domain.services.narrative import NarrativeGenerator
from pmi_insight.domain.services.trends import TrendCalculator
from pmi_insight.infrastructure.data_providers.provider import FinancialDataProvider
from pmi_insight.infrastructure.db.sqlite import SQLiteRepository
from pmi_insight.reports.renderer import ReportRenderer


@dataclass
class WorkflowContext:
    """Holds the dependencies shared by LangGraph nodes."""

    config: Config
    repository: SQLiteRepository
    provider: FinancialDataProvider
    trend_calculator: TrendCalculator
    narrative_generator: NarrativeGenerator
    ma_scorer: MAScorer
    benchmark_engine: BenchmarkEngine
    renderer: ReportRenderer

    def close(self) -> None:
        """Release the database connection pool."""
        self.repository.engine.dispose()
