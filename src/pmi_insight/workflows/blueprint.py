"""Workflow blueprint describing analysis stages and their handlers."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, TYPE_CHECKING

from pmi_insight.workflows.nodes import (
    benchmark,
    data_load,
    kpis,
    ma_score,
    narrative,
    writing,
)

if TYPE_CHECKING:
    from pmi_insight.workflows.context import WorkflowContext
    from pmi_insight.workflows.state import AnalysisState


@dataclass
class StageSpec:
    """Single LangGraph stage definition."""

    key: str
    description: str
    handler: Callable[["AnalysisState", "WorkflowContext"], "AnalysisState"]
    depends_on: List[str] = field(default_factory=list)


def build_default_stages() -> List[StageSpec]:
    """Return the ordered stages for the company analysis workflow."""
    return [
        StageSpec(
            key="ingest_financials",
            description="Load statements from SQLite; fall back to the data provider and cache them.",
            handler=data_load.run,
        ),
        StageSpec(
            key="kpis",
            description="Extract latest-year KPIs and multi-year trends (pandas-based).",
            handler=kpis.run,
            depends_on=["ingest_financials"],
        ),
        StageSpec(
            key="narrative",
            description="Explain the latest fiscal year in plain Italian.",
            handler=narrative.run,
            depends_on=["ingest_financials"],
        ),
        StageSpec(
            key="ma_score",
            description="Score M&A attractiveness against the configured thresholds.",
            handler=ma_score.run,
            depends_on=["ingest_financials"],
        ),
        StageSpec(
            key="benchmark",
            description="Compare latest KPIs with competitors, when any are given.",
            handler=benchmark.run,
            depends_on=["ingest_financials"],
        ),
        StageSpec(
            key="writing",
            description="Render the Markdown report with all upstream outputs.",
            handler=writing.run,
            depends_on=["kpis", "narrative", "ma_score", "benchmark"],
        ),
    ]


def validate_stage_order(stages: List[StageSpec]) -> None:
    """Stages run sequentially, so every dependency must be declared earlier."""
    seen: List[str] = []
    for stage in stages:
        missing = [dep for dep in stage.depends_on if dep not in seen]
        if missing:
            raise RuntimeError(
                f"Stage {stage.key!r} depends on {', '.join(missing)}, which must run before it."
            )
        seen.append(stage.key)
