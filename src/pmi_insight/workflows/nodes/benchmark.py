"""LangGraph node benchmarking the company against its competitors."""
from __future__ import annotations

from pmi_insight.domain.services.benchmark import benchmark_chart_data
from pmi_insight.workflows.context import WorkflowContext
from pmi_insight.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    statements = state.get("statements") or []
    competitors = state.get("competitors") or []

    if not competitors:
        logs.append("BenchmarkAgent skipped: no competitors selected.")
        return state
    if not statements:
        errors.append("BenchmarkAgent skipped because no statements were loaded.")
        return state

    logs.append(f"BenchmarkAgent -> compare against {len(competitors)} competitor(s)")
    try:
        result = context.benchmark_engine.create(statements[0], competitors)
    except (TypeError, ValueError) as exc:
        errors.append(f"Benchmark failed: {exc}")
        return state
    state["benchmark"] = result
    state["benchmark_chart"] = benchmark_chart_data(result)
    return state
