"""M&A attractiveness score: five weighted factors, eligibility and highlights."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from pmi_insight.domain.models.financials import (
    FactorStatus,
    FinancialStatement,
    KPISet,
    MAFactor,
    MAScoreResult,
    MAThresholds,
)
from pmi_insight.domain.services.kpi import (
    calculate_growth_rate,
    extract_kpis,
    net_margin_ratio,
    round_half_up,
)
from pmi_insight.utils.formatting import format_number

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_SUMMARY = "Dati finanziari insufficienti per la valutazione."

Band = Tuple[int, FactorStatus, str]

SIZE_FACTOR = "Dimensione (Ricavi)"
EBITDA_FACTOR = "Redditività (EBITDA)"
GROWTH_FACTOR = "Crescita"
PROFITABILITY_FACTOR = "Utile Netto"
HEALTH_FACTOR = "Solidità Patrimoniale"

# (lower bound, band), checked top-down with ">="
SIZE_BANDS: List[Tuple[float, Band]] = [
    (5_000_000, (100, "positive", "Dimensione significativa per il mercato M&A")),
    (2_000_000, (80, "positive", "Buona dimensione per operazioni straordinarie")),
    (1_000_000, (50, "neutral", "Dimensione nella media per piccole operazioni")),
]
SIZE_FLOOR: Band = (20, "negative", "Dimensione ridotta per il mercato M&A")

GROWTH_BANDS: List[Tuple[float, Band]] = [
    (0.20, (100, "positive", "Crescita eccezionale")),
    (0.10, (85, "positive", "Crescita a doppia cifra")),
    (0.05, (65, "neutral", "Crescita moderata")),
    (0.0, (40, "neutral", "Crescita piatta")),
]
GROWTH_FLOOR: Band = (15, "negative", "Ricavi in calo")
GROWTH_UNKNOWN: Band = (50, "neutral", "Dati storici insufficienti")

PROFITABILITY_BANDS: List[Tuple[float, Band]] = [
    (0.10, (100, "positive", "Eccellente utile netto")),
    (0.05, (75, "positive", "Buona redditività finale")),
]
PROFITABILITY_THIN: Band = (50, "neutral", "Utile positivo ma contenuto")
PROFITABILITY_LOSS: Band = (10, "negative", "Azienda in perdita")

# (upper bound, band), checked top-down with "<="
LEVERAGE_BANDS: List[Tuple[float, Band]] = [
    (0.3, (100, "positive", "Struttura finanziaria molto solida")),
    (0.6, (75, "positive", "Buon equilibrio finanziario")),
    (1.0, (50, "neutral", "Indebitamento nella norma")),
]
LEVERAGE_CEILING: Band = (25, "negative", "Elevato indebitamento")

SUMMARIES = {
    "outstanding": (
        "Azienda con profilo molto interessante per operazioni straordinarie. "
        "Dimensione, redditività e crescita sono tutti fattori attrattivi."
    ),
    "eligible": (
        "Azienda con buon potenziale per M&A. Presenta alcuni punti di forza che "
        "potrebbero interessare investitori o acquirenti."
    ),
    "promising": (
        "Azienda con alcuni elementi interessanti ma con margini di miglioramento "
        "prima di considerare operazioni straordinarie."
    ),
    "weak": (
        "Al momento il profilo aziendale non è ottimale per operazioni M&A. "
        "Consigliamo di concentrarsi sulla crescita e sul miglioramento dei margini."
    ),
}


def _first_at_least(value: float, bands: Sequence[Tuple[float, Band]], floor: Band) -> Band:
    for bound, band in bands:
        if value >= bound:
            return band
    return floor


def _factor(name: str, weight: int, band: Band) -> MAFactor:
    score, status, description = band
    return MAFactor(name=name, score=score, weight=weight, status=status, description=description)


def size_factor(revenue: float) -> MAFactor:
    return _factor(SIZE_FACTOR, 30, _first_at_least(revenue, SIZE_BANDS, SIZE_FLOOR))


def ebitda_factor(ebitda: float, ebitda_margin: float) -> MAFactor:
    """Joint absolute/relative thresholds on operating profitability."""
    if ebitda >= 500_000 and ebitda_margin >= 0.15:
        band: Band = (100, "positive", "Eccellente redditività operativa")
    elif ebitda >= 200_000 and ebitda_margin >= 0.10:
        band = (75, "positive", "Buona generazione di cassa")
    elif ebitda > 0 and ebitda_margin >= 0.05:
        band = (50, "neutral", "Marginalità nella media")
    elif ebitda > 0:
        band = (25, "negative", "Margini operativi ridotti")
    else:
        band = (0, "negative", "EBITDA negativo")
    return _factor(EBITDA_FACTOR, 25, band)


def growth_factor(growth_rate: Optional[float]) -> MAFactor:
    if growth_rate is None:
        return _factor(GROWTH_FACTOR, 20, GROWTH_UNKNOWN)
    return _factor(GROWTH_FACTOR, 20, _first_at_least(growth_rate, GROWTH_BANDS, GROWTH_FLOOR))


def net_margin(net_income: float, revenue: float) -> float:
    return net_income / revenue if revenue > 0 else 0.0


def profitability_factor(net_income: float, revenue: float) -> MAFactor:
    margin = net_margin(net_income, revenue)
    floor = PROFITABILITY_THIN if margin > 0 else PROFITABILITY_LOSS
    return _factor(PROFITABILITY_FACTOR, 15, _first_at_least(margin, PROFITABILITY_BANDS, floor))


def financial_health_factor(debt_to_equity_ratio: Optional[float], equity: float) -> MAFactor:
    if equity <= 0:
        return _factor(HEALTH_FACTOR, 10, (0, "negative", "Patrimonio netto negativo"))
    if debt_to_equity_ratio is None:
        return _factor(HEALTH_FACTOR, 10, (50, "neutral", "Dati insufficienti"))
    for bound, band in LEVERAGE_BANDS:
        if debt_to_equity_ratio <= bound:
            return _factor(HEALTH_FACTOR, 10, band)
    return _factor(HEALTH_FACTOR, 10, LEVERAGE_CEILING)


def weighted_score(factors: Sequence[MAFactor]) -> int:
    total_weight = sum(f.weight for f in factors)
    if total_weight == 0:
        return 0
    return round_half_up(sum(f.score * f.weight for f in factors) / total_weight)


def summary_for(score: int, is_eligible: bool) -> str:
    # ">= 80" wins before the eligibility-gated bucket.
    if score >= 80:
        return SUMMARIES["outstanding"]
    if score >= 60 and is_eligible:
        return SUMMARIES["eligible"]
    if score >= 40:
        return SUMMARIES["promising"]
    return SUMMARIES["weak"]


class MAScorer:
    """Score a company's statements against injected eligibility thresholds."""

    def __init__(self, thresholds: Optional[MAThresholds] = None) -> None:
        self.thresholds = thresholds or MAThresholds()

    def score(self, statements: Sequence[FinancialStatement]) -> MAScoreResult:
        if not statements:
            return MAScoreResult(score=0, is_eligible=False, summary=INSUFFICIENT_DATA_SUMMARY)

        ordered = sorted(statements, key=lambda s: s.fiscal_year, reverse=True)
        latest = extract_kpis(ordered[0])
        if len(ordered) > 1:
            growth_rate: Optional[float] = calculate_growth_rate(
                latest.revenue, extract_kpis(ordered[1]).revenue
            )
        else:
            growth_rate = latest.revenue_growth

        factors = [
            size_factor(latest.revenue),
            ebitda_factor(latest.ebitda, latest.ebitda_margin),
            growth_factor(growth_rate),
            profitability_factor(latest.net_income, latest.revenue),
            financial_health_factor(latest.debt_to_equity_ratio, latest.equity),
        ]
        score = weighted_score(factors)
        is_eligible = self.is_eligible(score, latest)
        result = MAScoreResult(
            score=score,
            is_eligible=is_eligible,
            factors=factors,
            highlights=self._highlights(latest, growth_rate),
            summary=summary_for(score, is_eligible),
        )
        logger.debug("M&A score FY%s: %d (eligible=%s)", latest.fiscal_year, score, is_eligible)
        return result

    def is_eligible(self, score: int, latest: KPISet) -> bool:
        t = self.thresholds
        meets_revenue = latest.revenue >= t.revenue_threshold
        meets_ebitda = (
            latest.ebitda_margin >= t.ebitda_margin_threshold
            and latest.ebitda >= t.ebitda_threshold
        )
        return score >= t.score_threshold and (meets_revenue or meets_ebitda)

    def _highlights(self, latest: KPISet, growth_rate: Optional[float]) -> List[str]:
        highlights: List[str] = []
        if latest.revenue >= self.thresholds.revenue_threshold:
            millions = format_number(self.thresholds.revenue_threshold / 1_000_000)
            highlights.append(f"Ricavi superiori a €{millions}M")
        if latest.ebitda_margin > 0.15:
            highlights.append("Margine EBITDA sopra la media")
        if growth_rate and growth_rate > 0.10:
            highlights.append("Crescita a doppia cifra")
        if latest.debt_to_equity_ratio is not None and latest.debt_to_equity_ratio < 0.5:
            highlights.append("Basso indebitamento")
        if latest.net_income > 0 and net_margin_ratio(latest.net_income, latest.revenue) > 0.05:
            highlights.append("Buona redditività netta")
        return highlights


def calculate_ma_score(
    statements: Sequence[FinancialStatement],
    thresholds: Optional[MAThresholds] = None,
) -> MAScoreResult:
    """Module-level shortcut around :class:`MAScorer`."""
    return MAScorer(thresholds).score(statements)
