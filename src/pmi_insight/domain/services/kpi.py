"""KPI extraction, growth helpers and qualitative status thresholds.

Every function here is pure and total: missing optional inputs map to ``None``
and the status helpers always fall back to a defined bucket.
"""
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional

from pmi_insight.domain.models.financials import FinancialStatement, KPISet, KPIStatus

KPI_DEFINITIONS: Dict[str, Dict[str, str]] = {
    "revenue": {
        "name": "Ricavi",
        "definition": "Il totale delle vendite della tua azienda. Sono i soldi che entrano vendendo prodotti o servizi.",
        "icon": "💰",
    },
    "ebitda": {
        "name": "EBITDA",
        "definition": "Il guadagno operativo prima di interessi, tasse, ammortamenti. Indica quanto la tua azienda guadagna dalle attività principali.",
        "icon": "📊",
    },
    "ebitda_margin": {
        "name": "Margine EBITDA",
        "definition": "La percentuale di ricavi che diventa EBITDA. Un margine alto significa che controlli bene i costi.",
        "icon": "📈",
    },
    "net_income": {
        "name": "Utile Netto",
        "definition": "Il guadagno finale dopo aver pagato tutto: costi, interessi e tasse. È quello che rimane davvero.",
        "icon": "✅",
    },
    "equity": {
        "name": "Patrimonio Netto",
        "definition": "Il valore dell'azienda che appartiene ai soci. È la differenza tra quello che possiedi e quello che devi.",
        "icon": "🏛️",
    },
    "total_assets": {
        "name": "Totale Attivo",
        "definition": "Tutto quello che la tua azienda possiede: soldi in banca, crediti, macchinari, immobili.",
        "icon": "📦",
    },
    "total_liabilities": {
        "name": "Totale Debiti",
        "definition": "Tutto quello che la tua azienda deve: debiti con banche, fornitori, tasse da pagare.",
        "icon": "📋",
    },
    "net_debt": {
        "name": "Indebitamento Netto",
        "definition": "I debiti finanziari meno la liquidità disponibile. Se è negativo, hai più soldi che debiti.",
        "icon": "💳",
    },
    "revenue_growth": {
        "name": "Crescita Ricavi",
        "definition": "Quanto sono aumentati (o diminuiti) i ricavi rispetto all'anno precedente.",
        "icon": "🚀",
    },
    "debt_to_equity_ratio": {
        "name": "Rapporto Debito/Patrimonio",
        "definition": "Quanti debiti hai per ogni euro di patrimonio. Un numero basso indica solidità finanziaria.",
        "icon": "⚖️",
    },
}

_EXPLANATIONS: Dict[str, str] = {
    "revenue": "I ricavi sono il totale delle vendite. Sono i soldi che entrano dalla vendita di prodotti o servizi.",
    "ebitda": "L'EBITDA è il guadagno operativo prima di interessi, tasse, ammortamenti. Indica quanto l'azienda guadagna dalle attività principali.",
    "ebitda_margin": "Il margine EBITDA indica quale percentuale dei ricavi diventa guadagno operativo. Più alto = meglio controlli i costi.",
    "net_income": "L'utile netto è quello che rimane dopo aver pagato tutto: costi, interessi, tasse. È il guadagno finale.",
    "equity": "Il patrimonio netto è il valore che appartiene ai soci. È la differenza tra quello che possiedi e quello che devi.",
    "total_assets": "Le attività totali sono tutto quello che l'azienda possiede: soldi, crediti, macchinari, immobili.",
    "total_liabilities": "I debiti totali sono tutto quello che l'azienda deve: a banche, fornitori, fisco.",
    "net_debt": "L'indebitamento netto sono i debiti finanziari meno la liquidità disponibile.",
    "revenue_growth": "La crescita dei ricavi indica quanto sono aumentate le vendite rispetto all'anno prima.",
    "debt_to_equity_ratio": "Il rapporto debiti/patrimonio indica quanti debiti hai per ogni euro di capitale proprio.",
}


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    result = float(value)
    return None if math.isnan(result) else result


def extract_kpis(statement: FinancialStatement) -> KPISet:
    """Coerce one statement into a numeric KPI set."""
    return KPISet(
        revenue=float(statement.revenue),
        revenue_growth=_optional_float(statement.revenue_growth),
        ebitda=float(statement.ebitda),
        ebitda_margin=float(statement.ebitda_margin),
        net_income=float(statement.net_income),
        net_profit_margin=_optional_float(statement.net_profit_margin),
        total_assets=float(statement.total_assets),
        total_liabilities=float(statement.total_liabilities),
        equity=float(statement.equity),
        net_debt=_optional_float(statement.net_debt),
        debt_to_equity_ratio=_optional_float(statement.debt_to_equity_ratio),
        current_ratio=_optional_float(statement.current_ratio),
        fiscal_year=int(statement.fiscal_year),
        currency=statement.currency or "EUR",
    )


def calculate_growth_rate(current: float, previous: float) -> float:
    """Year-over-year growth; a zero base counts as +100% when current is positive."""
    if previous == 0:
        return 1.0 if current > 0 else 0.0
    return (current - previous) / abs(previous)


def net_margin_ratio(net_income: float, revenue: float) -> float:
    """Net income over revenue; income on a zero revenue base is unbounded (+/-inf)."""
    if revenue == 0:
        return math.copysign(math.inf, net_income) if net_income else 0.0
    return net_income / revenue


def calculate_cagr(start_value: float, end_value: float, years: float) -> float:
    if start_value <= 0 or years <= 0:
        return 0.0
    return (end_value / start_value) ** (1 / years) - 1


def calculate_average(statements: Iterable[FinancialStatement], field_name: str) -> float:
    """Mean of a statement field across years, ignoring missing values."""
    values = [
        float(getattr(s, field_name))
        for s in statements
        if getattr(s, field_name, None) is not None
    ]
    if not values:
        return 0.0
    return sum(values) / len(values)


def ebitda_margin_status(margin: float) -> KPIStatus:
    if margin >= 0.20:
        return "excellent"
    if margin >= 0.12:
        return "good"
    if margin >= 0.05:
        return "fair"
    return "poor"


def growth_status(growth: Optional[float]) -> KPIStatus:
    if growth is None:
        return "fair"
    if growth >= 0.15:
        return "excellent"
    if growth >= 0.05:
        return "good"
    if growth >= 0:
        return "fair"
    return "poor"


def debt_to_equity_status(ratio: Optional[float]) -> KPIStatus:
    if ratio is None:
        return "fair"
    if ratio <= 0.3:
        return "excellent"
    if ratio <= 0.6:
        return "good"
    if ratio <= 1.0:
        return "fair"
    return "poor"


def current_ratio_status(ratio: Optional[float]) -> KPIStatus:
    if ratio is None:
        return "fair"
    if ratio >= 2.0:
        return "excellent"
    if ratio >= 1.5:
        return "good"
    if ratio >= 1.0:
        return "fair"
    return "poor"


def kpi_explanation(kpi_key: str) -> str:
    """Plain-Italian tooltip text for a KPI key."""
    return _EXPLANATIONS.get(kpi_key, "Indicatore finanziario")


def round_half_up(value: float) -> int:
    """Round .5 upwards (toward +inf), the convention used for every score and percentile."""
    return int(math.floor(value + 0.5))
