"""LangGraph node extracting latest-year KPIs and multi-year trends."""
from __future__ import annotations

from pmi_insight.domain.services.kpi import extract_kpis
from pmi_insight.workflows.context import WorkflowContext
from pmi_insight.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    statements = state.get("statements") or []

    if not statements:
        errors.append("KPIAgent skipped because no statements were loaded.")
        return state

    logs.append("KPIAgent -> extract KPIs and compute trends")
    try:
        state["kpis"] = extract_kpis(statements[0])
        state["trends"] = context.trend_calculator.calculate(statements)
    except (TypeError, ValueError) as exc:
        errors.append(f"KPI extraction failed: {exc}")
    return state
