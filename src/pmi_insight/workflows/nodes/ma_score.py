"""LangGraph node computing the M&A attractiveness score."""
from __future__ import annotations

from pmi_insight.workflows.context import WorkflowContext
from pmi_insight.workflows.state import AnalysisState


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])

    logs.append("MAScoreAgent -> score M&A attractiveness")
    try:
        result = context.ma_scorer.score(state.get("statements") or [])
    except (TypeError, ValueError) as exc:
        errors.append(f"M&A scoring failed: {exc}")
        return state
    state["ma_score"] = result
    logs.append(f"M&A score {result.score}/100 (eligible: {'yes' if result.is_eligible else 'no'})")
    return state
