"""LangGraph node responsible for final Markdown assembly."""
from __future__ import annotations

from jinja2 import TemplateError

from pmi_insight.workflows.context import WorkflowContext
from pmi_insight.workflows.state import AnalysisState

POSITION_LABELS = {
    "leader": "Leader",
    "competitive": "Competitiva",
    "average": "Nella media",
    "lagging": "In ritardo",
}


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])

    company = state.get("company")
    kpis = state.get("kpis")
    if company is None or kpis is None:
        errors.append("WritingAgent skipped because company data is incomplete.")
        return state

    logs.append("WritingAgent -> render Markdown output")
    trends = state.get("trends")
    render_context = {
        "company": company,
        "report_date": state.get("report_date"),
        "kpis": kpis,
        "history": trends.history if trends is not None else [],
        "narrative": state.get("narrative"),
        "ma_score": state.get("ma_score"),
        "benchmark": state.get("benchmark"),
        "position_labels": POSITION_LABELS,
        "errors": list(errors),
    }
    try:
        state["markdown_report"] = context.renderer.render(render_context)
    except TemplateError as exc:
        errors.append(f"Markdown rendering failed: {exc}")
    return state
