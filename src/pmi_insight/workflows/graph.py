"""LangGraph workflow assembly for the company analysis pipeline."""
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from langgraph.graph import END, StateGraph

from config import Config
from pmi_insight.domain.services.benchmark import BenchmarkEngine
from pmi_insight.domain.services.ma_scoring import MAScorer
from pmi_insight.domain.services.narrative import NarrativeGenerator
from pmi_insight.domain.services.trends import TrendCalculator
from pmi_insight.infrastructure.data_providers.provider import (
    FinancialDataProvider,
    get_financial_data_provider,
)
from pmi_insight.infrastructure.db.sqlite import SQLiteRepository
from pmi_insight.reports.renderer import ReportRenderer
from pmi_insight.workflows import context as context_module
from pmi_insight.workflows.blueprint import StageSpec, build_default_stages, validate_stage_order
from pmi_insight.workflows.state import AnalysisState


class AnalysisWorkflow:
    """Compose LangGraph nodes into a runnable company analysis."""

    def __init__(self, config: Config, *, provider: Optional[FinancialDataProvider] = None) -> None:
        self._config = config
        self._context = self._build_context(provider)
        self._stages: List[StageSpec] = build_default_stages()
        self._graph = self._build_graph()

    @property
    def context(self) -> context_module.WorkflowContext:
        return self._context

    def _build_context(self, provider: Optional[FinancialDataProvider]) -> context_module.WorkflowContext:
        repository = SQLiteRepository(
            database_uri=self._config.database_uri,
            echo=self._config.sqlite_echo,
        )
        return context_module.WorkflowContext(
            config=self._config,
            repository=repository,
            provider=provider or get_financial_data_provider(self._config),
            trend_calculator=TrendCalculator(),
            narrative_generator=NarrativeGenerator(),
            ma_scorer=MAScorer(self._config.ma_thresholds()),
            benchmark_engine=BenchmarkEngine(),
            renderer=ReportRenderer(),
        )

    def _build_graph(self):
        builder = StateGraph(dict)

        if not self._stages:
            raise RuntimeError("Workflow blueprint is empty; cannot build LangGraph.")
        validate_stage_order(self._stages)

        for stage in self._stages:
            builder.add_node(stage.key, self._wrap(stage.handler))

        # Serialize execution in declared stage order to avoid concurrent state writes.
        builder.set_entry_point(self._stages[0].key)
        for current, nxt in zip(self._stages, self._stages[1:]):
            builder.add_edge(current.key, nxt.key)
        builder.add_edge(self._stages[-1].key, END)

        return builder.compile(checkpointer=None)

    def _wrap(self, func: Callable[[AnalysisState, context_module.WorkflowContext], AnalysisState]):
        def wrapper(state: Dict[str, Any]) -> Dict[str, Any]:
            return func(state, self._context)

        return wrapper

    def run(
        self,
        company_id: str,
        competitor_ids: Optional[Sequence[str]] = None,
    ) -> AnalysisState:
        """Execute the workflow for a single company."""
        initial_state: AnalysisState = {
            "company_id": company_id,
            "competitor_ids": list(competitor_ids or []),
            "report_date": date.today().isoformat(),
            "logs": [],
            "errors": [],
            "stage_order": [stage.key for stage in self._stages],
        }
        result: AnalysisState = self._graph.invoke(initial_state)
        return result  # type: ignore[return-value]

    def persist_state(self, state: AnalysisState, path: Path) -> None:
        """Serialize the workflow state to disk for debugging or auditing."""
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(state, default=_json_serializer, indent=2, ensure_ascii=False)
        path.write_text(payload, encoding="utf-8")

    def persist_markdown(self, markdown: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(markdown, encoding="utf-8")

    def describe_stages(self) -> List[str]:
        """Return human-readable workflow stage descriptions."""
        return [f"{stage.key}: {stage.description}" for stage in self._stages]

    def close(self) -> None:
        self._context.close()


def _json_serializer(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if hasattr(value, "tolist"):
        return value.tolist()
    return str(value)
