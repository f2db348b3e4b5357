"""LangGraph node producing the plain-Italian narrative."""
from __future__ import annotations

from pmi_insight.workflows.context import WorkflowContext
from pmi_insight.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])

    logs.append("NarrativeAgent -> generate narrative sections")
    try:
        # An empty statement list still yields the "no data yet" summary.
        state["narrative"] = context.narrative_generator.generate(state.get("statements") or [])
    except (TypeError, ValueError) as exc:
        errors.append(f"Narrative generation failed: {exc}")
    return state
