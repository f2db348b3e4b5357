"""Workflow state definitions shared by LangGraph nodes."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, TypedDict

from pmi_insight.domain.models.financials import (
    BenchmarkResult,
    CompanyProfile,
    CompetitorStatement,
    FinancialNarrative,
    FinancialStatement,
    KPISet,
    MAScoreResult,
    TrendSummary,
)


class AnalysisState(TypedDict, total=False):
    company_id: str
    competitor_ids: List[str]
    report_date: str

    company: Optional[CompanyProfile]
    statements: List[FinancialStatement]
    competitors: List[CompetitorStatement]

    kpis: Optional[KPISet]
    trends: Optional[TrendSummary]
    narrative: Optional[FinancialNarrative]
    ma_score: Optional[MAScoreResult]
    benchmark: Optional[BenchmarkResult]
    benchmark_chart: Optional[Dict[str, Any]]
    markdown_report: Optional[str]
    stage_order: List[str]

    logs: List[str]
    errors: List[str]
