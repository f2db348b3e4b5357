"""Benchmark a company's latest KPIs against a competitor group."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

import pandas as pd

from pmi_insight.domain.models.financials import (
    BenchmarkComparison,
    BenchmarkPosition,
    BenchmarkResult,
    BenchmarkSummary,
    CompetitorData,
    CompetitorStatement,
    FinancialStatement,
    KPISet,
    OverallPosition,
)
from pmi_insight.domain.services.kpi import extract_kpis, round_half_up
from pmi_insight.utils.formatting import format_currency, format_percentage

logger = logging.getLogger(__name__)

ABOVE_RATIO = 1.1
BELOW_RATIO = 0.9
MAX_RECOMMENDATIONS = 4


@dataclass(frozen=True)
class BenchmarkMetric:
    key: str
    label: str
    is_percentage: bool = False


BENCHMARK_METRICS: List[BenchmarkMetric] = [
    BenchmarkMetric("revenue", "Ricavi"),
    BenchmarkMetric("ebitda", "EBITDA"),
    BenchmarkMetric("ebitda_margin", "Margine EBITDA", is_percentage=True),
    BenchmarkMetric("net_income", "Utile Netto"),
    BenchmarkMetric("equity", "Patrimonio Netto"),
]

# Checked in order; each fires when the metric sits below the competitor average.
BELOW_AVERAGE_RECOMMENDATIONS: List[tuple] = [
    ("ebitda_margin", "Valuta una revisione della struttura dei costi per migliorare i margini"),
    ("revenue", "Potresti investire in strategie di crescita per aumentare i ricavi"),
    ("net_income", "Analizza le voci che impattano l'utile finale: interessi, tasse, ammortamenti"),
]

POSITION_RECOMMENDATIONS: Dict[str, str] = {
    "leader": "Mantieni il vantaggio competitivo investendo in innovazione",
    "lagging": "Considera una consulenza strategica per identificare le aree prioritarie di intervento",
}

NARRATIVE_TEMPLATES: Dict[str, str] = {
    "above": (
        "Il tuo {label} ({value}) è superiore alla media dei competitor ({average}). "
        "Ti posizioni nel {percentile}° percentile."
    ),
    "below": (
        "Il tuo {label} ({value}) è inferiore alla media dei competitor ({average}). "
        "Ti posizioni nel {percentile}° percentile."
    ),
    "average": "Il tuo {label} ({value}) è in linea con la media dei competitor ({average}).",
}


def classify_position(company_value: float, competitor_average: float) -> BenchmarkPosition:
    """Compare the company/average ratio against the 1.1 and 0.9 bands."""
    if competitor_average == 0:
        # Division by zero: any positive value is infinitely above, any negative below.
        if company_value > 0:
            return "above"
        if company_value < 0:
            return "below"
        return "average"
    ratio = company_value / competitor_average
    if ratio > ABOVE_RATIO:
        return "above"
    if ratio < BELOW_RATIO:
        return "below"
    return "average"


def percentile_rank(company_value: float, competitor_values: Sequence[float]) -> int:
    """Rank of the company's value (first occurrence) among all values, as 0-100."""
    ranked = sorted([*competitor_values, company_value])
    position = ranked.index(company_value)
    return round_half_up(position / len(ranked) * 100)


def overall_position(comparisons: Sequence[BenchmarkComparison]) -> OverallPosition:
    above = sum(1 for c in comparisons if c.position == "above")
    below = sum(1 for c in comparisons if c.position == "below")
    if above >= 4:
        return "leader"
    if above >= 3:
        return "competitive"
    if below >= 3:
        return "lagging"
    return "average"


class BenchmarkEngine:
    """Compare one company against N competitors across the fixed metric set."""

    def __init__(self, metrics: Sequence[BenchmarkMetric] = tuple(BENCHMARK_METRICS)) -> None:
        self._metrics = list(metrics)

    def create(
        self,
        company_statement: FinancialStatement,
        competitor_statements: Sequence[CompetitorStatement],
    ) -> BenchmarkResult:
        if not competitor_statements:
            raise ValueError("At least one competitor statement is required for a benchmark.")

        company_kpis = extract_kpis(company_statement)
        competitors = [
            CompetitorData(name=c.name, vat_number=c.vat_number, kpis=extract_kpis(c.statement))
            for c in competitor_statements
        ]
        frame = pd.DataFrame([c.kpis.to_dict() for c in competitors])

        comparisons = [
            self._compare(metric, company_kpis, frame[metric.key].astype(float).tolist())
            for metric in self._metrics
        ]
        summary = self._summarize(comparisons)
        logger.debug(
            "Benchmark FY%s against %d competitors -> %s",
            company_kpis.fiscal_year,
            len(competitors),
            summary.overall_position,
        )
        return BenchmarkResult(
            company_kpis=company_kpis,
            competitors=competitors,
            comparisons=comparisons,
            summary=summary,
        )

    def _compare(
        self, metric: BenchmarkMetric, company_kpis: KPISet, values: List[float]
    ) -> BenchmarkComparison:
        company_value = float(getattr(company_kpis, metric.key))
        average = float(pd.Series(values, dtype=float).mean())
        position = classify_position(company_value, average)
        percentile = percentile_rank(company_value, values)

        fmt = format_percentage if metric.is_percentage else format_currency
        narrative = NARRATIVE_TEMPLATES[position].format(
            label=metric.label.lower(),
            value=fmt(company_value),
            average=fmt(average),
            percentile=percentile,
        )
        return BenchmarkComparison(
            metric=metric.key,
            metric_label=metric.label,
            company_value=company_value,
            competitor_average=average,
            position=position,
            percentile=percentile,
            narrative=narrative,
        )

    def _summarize(self, comparisons: Sequence[BenchmarkComparison]) -> BenchmarkSummary:
        position = overall_position(comparisons)
        strengths = [f"{c.metric_label} superiore alla media" for c in comparisons if c.position == "above"]
        weaknesses = [f"{c.metric_label} inferiore alla media" for c in comparisons if c.position == "below"]

        by_metric = {c.metric: c for c in comparisons}
        recommendations: List[str] = []
        for metric_key, text in BELOW_AVERAGE_RECOMMENDATIONS:
            comparison = by_metric.get(metric_key)
            if comparison is not None and comparison.position == "below":
                recommendations.append(text)
        if position in POSITION_RECOMMENDATIONS:
            recommendations.append(POSITION_RECOMMENDATIONS[position])

        return BenchmarkSummary(
            overall_position=position,
            strengths=strengths,
            weaknesses=weaknesses,
            recommendations=recommendations[:MAX_RECOMMENDATIONS],
        )


def benchmark_chart_data(result: BenchmarkResult) -> Dict[str, Dict[str, object]]:
    """Series for revenue, EBITDA and EBITDA-margin charts (margins in percent)."""
    chart: Dict[str, Dict[str, object]] = {}
    for key, scale in (("revenue", 1.0), ("ebitda", 1.0), ("ebitda_margin", 100.0)):
        chart[key] = {
            "company": getattr(result.company_kpis, key) * scale,
            "competitors": [
                {"name": c.name, "value": getattr(c.kpis, key) * scale} for c in result.competitors
            ],
        }
    return chart


_DEFAULT_ENGINE = BenchmarkEngine()


def create_benchmark(
    company_statement: FinancialStatement,
    competitor_statements: Sequence[CompetitorStatement],
) -> BenchmarkResult:
    """Module-level shortcut around :class:`BenchmarkEngine`."""
    return _DEFAULT_ENGINE.create(company_statement, competitor_statements)
