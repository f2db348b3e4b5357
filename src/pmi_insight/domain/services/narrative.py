"""Template-based Italian narrative for a company's latest fiscal year.

Each section picks a bucket key from the classified KPIs and looks the
template up in a table, so thresholds stay testable apart from the prose.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from pmi_insight.domain.models.financials import (
    FinancialNarrative,
    FinancialStatement,
    KPISet,
    NarrativeSection,
    SectionStatus,
)
from pmi_insight.domain.services.kpi import (
    calculate_growth_rate,
    debt_to_equity_status,
    ebitda_margin_status,
    extract_kpis,
    net_margin_ratio,
)
from pmi_insight.utils.formatting import format_currency

logger = logging.getLogger(__name__)

EMPTY_SUMMARY = "Non abbiamo ancora dati finanziari per questa azienda."

Template = Tuple[str, SectionStatus]

REVENUE_TEMPLATES: Dict[str, Template] = {
    "strong_growth": (
        "Nel {year} la tua azienda ha fatturato {revenue}, con una crescita del {growth}% rispetto "
        "all'anno precedente. È un ottimo risultato che indica che il mercato sta rispondendo bene.",
        "positive",
    ),
    "growth": (
        "Nel {year} la tua azienda ha fatturato {revenue}, in crescita del {growth}% rispetto "
        "all'anno precedente. Una crescita positiva, anche se moderata.",
        "neutral",
    ),
    "stable": (
        "Nel {year} i ricavi sono stati {revenue}, sostanzialmente stabili rispetto all'anno "
        "precedente ({growth}%).",
        "neutral",
    ),
    "decline": (
        "Nel {year} i ricavi sono scesi a {revenue} ({growth}%). Potrebbe essere utile capire le "
        "cause e intervenire.",
        "negative",
    ),
    "first_year": (
        "Nel {year} la tua azienda ha generato ricavi per {revenue}. È il primo anno che "
        "analizziamo, quindi non possiamo ancora confrontare con il passato.",
        "info",
    ),
}

PROFITABILITY_TEMPLATES: Dict[str, Template] = {
    "excellent": (
        "L'EBITDA (quello che rimane dalle vendite dopo i costi operativi) è di {ebitda}, pari al "
        "{margin}% dei ricavi. È un margine eccellente! Significa che controlli molto bene i costi "
        "e generi buona cassa.",
        "positive",
    ),
    "good": (
        "L'EBITDA è di {ebitda}, pari al {margin}% dei ricavi. È un buon margine, sopra la media "
        "del mercato. La tua azienda genera cassa in modo sano.",
        "positive",
    ),
    "fair": (
        "L'EBITDA è di {ebitda} ({margin}% dei ricavi). Il margine è nella media: c'è spazio per "
        "migliorare l'efficienza operativa.",
        "neutral",
    ),
    "poor": (
        "L'EBITDA è di {ebitda}, con un margine del {margin}%. È un margine basso che potrebbe "
        "indicare costi troppo alti o prezzi troppo bassi. Vale la pena analizzare la struttura "
        "dei costi.",
        "negative",
    ),
}

NET_INCOME_CLAUSES: Dict[str, str] = {
    "profit": " L'utile netto finale è di {net_income}.",
    "loss": (
        " Nota: l'utile netto è negativo ({net_income}), quindi ci sono costi (interessi, tasse, "
        "ammortamenti) che stanno erodendo il margine operativo."
    ),
}

STRUCTURE_TEMPLATES: Dict[str, Template] = {
    "negative_equity": (
        "Attenzione: il patrimonio netto è negativo ({equity}). Significa che i debiti superano "
        "il valore delle attività. È una situazione da monitorare attentamente.",
        "negative",
    ),
    "excellent": (
        "La struttura finanziaria è molto solida: hai {equity} di patrimonio netto e {liabilities} "
        "di debiti. Il rapporto debiti/patrimonio ({ratio}) è basso, il che ti dà molta "
        "flessibilità.",
        "positive",
    ),
    "good": (
        "La struttura finanziaria è equilibrata: {equity} di patrimonio netto contro "
        "{liabilities} di debiti. Il rapporto ({ratio}) è nella norma per una PMI.",
        "positive",
    ),
    "fair": (
        "Il patrimonio netto è di {equity} e i debiti ammontano a {liabilities}. Il rapporto "
        "debiti/patrimonio ({ratio}) è nella media, ma potresti considerare di ridurre "
        "l'indebitamento.",
        "neutral",
    ),
    "poor": (
        "L'indebitamento è elevato: {liabilities} di debiti contro {equity} di patrimonio netto. "
        "Un rapporto di {ratio} indica che l'azienda è molto leveraggiata.",
        "negative",
    ),
    "balanced": (
        "Il patrimonio netto è di {equity} e i debiti totali sono {liabilities}. Complessivamente "
        "la struttura patrimoniale sembra bilanciata.",
        "info",
    ),
}

NET_DEBT_CLAUSES: Dict[str, str] = {
    "net_cash": (
        " Buona notizia: hai più liquidità che debiti finanziari (posizione finanziaria netta "
        "positiva di {net_cash})."
    ),
    "high_leverage": (
        " L'indebitamento finanziario netto ({net_debt}) è significativo rispetto all'EBITDA "
        "generato."
    ),
}

SUMMARY_TEMPLATES: Dict[str, str] = {
    "positive": (
        "Nel complesso, i numeri del {year} mostrano un'azienda in buona salute con ricavi di "
        "{revenue}. I punti di forza superano le criticità."
    ),
    "negative": (
        "I dati del {year} (ricavi: {revenue}) evidenziano alcune aree di attenzione. Consigliamo "
        "di analizzare i punti deboli per intervenire."
    ),
    "neutral": (
        "I numeri del {year} (ricavi: {revenue}) mostrano un quadro equilibrato, con alcuni punti "
        "di forza e alcune aree di miglioramento."
    ),
}


def revenue_delta(latest: KPISet, previous: KPISet) -> float:
    """Signed revenue change against the prior year; a zero base uses the growth-rate rule."""
    if previous.revenue == 0:
        return calculate_growth_rate(latest.revenue, previous.revenue)
    return (latest.revenue - previous.revenue) / previous.revenue


def revenue_bucket(growth: Optional[float]) -> str:
    if growth is None:
        return "first_year"
    if growth > 0.10:
        return "strong_growth"
    if growth > 0:
        return "growth"
    if growth > -0.05:
        return "stable"
    return "decline"


def structure_bucket(kpis: KPISet) -> str:
    if kpis.equity <= 0:
        return "negative_equity"
    if kpis.debt_to_equity_ratio is not None:
        return debt_to_equity_status(kpis.debt_to_equity_ratio)
    return "balanced"


def net_debt_bucket(kpis: KPISet) -> Optional[str]:
    if kpis.net_debt is None:
        return None
    if kpis.net_debt < 0:
        return "net_cash"
    if kpis.net_debt > kpis.ebitda * 3:
        return "high_leverage"
    return None


def sentiment(strengths_count: int, weaknesses_count: int) -> str:
    if strengths_count > weaknesses_count + 1:
        return "positive"
    if weaknesses_count > strengths_count + 1:
        return "negative"
    return "neutral"


class NarrativeGenerator:
    """Build the three-section narrative plus strengths and weaknesses."""

    def generate(self, statements: Sequence[FinancialStatement]) -> FinancialNarrative:
        if not statements:
            return FinancialNarrative(summary=EMPTY_SUMMARY)

        ordered = sorted(statements, key=lambda s: s.fiscal_year, reverse=True)
        latest = extract_kpis(ordered[0])
        previous = extract_kpis(ordered[1]) if len(ordered) > 1 else None
        growth = revenue_delta(latest, previous) if previous is not None else None

        sections = [
            self._revenue_section(latest, growth),
            self._profitability_section(latest),
            self._financial_structure_section(latest),
        ]
        strengths, weaknesses = self._strengths_and_weaknesses(latest, growth)
        summary = SUMMARY_TEMPLATES[sentiment(len(strengths), len(weaknesses))].format(
            year=latest.fiscal_year,
            revenue=format_currency(latest.revenue),
        )
        logger.debug(
            "Narrative for FY%s: %d strengths, %d weaknesses",
            latest.fiscal_year,
            len(strengths),
            len(weaknesses),
        )
        return FinancialNarrative(
            summary=summary,
            sections=sections,
            strengths=strengths,
            weaknesses=weaknesses,
        )

    def _revenue_section(self, latest: KPISet, growth: Optional[float]) -> NarrativeSection:
        template, status = REVENUE_TEMPLATES[revenue_bucket(growth)]
        content = template.format(
            year=latest.fiscal_year,
            revenue=format_currency(latest.revenue),
            growth=f"{growth * 100:.1f}" if growth is not None else "",
        )
        return NarrativeSection(title="I tuoi ricavi", icon="💰", content=content, status=status)

    def _profitability_section(self, latest: KPISet) -> NarrativeSection:
        template, status = PROFITABILITY_TEMPLATES[ebitda_margin_status(latest.ebitda_margin)]
        content = template.format(
            ebitda=format_currency(latest.ebitda),
            margin=f"{latest.ebitda_margin * 100:.1f}",
        )
        clause = NET_INCOME_CLAUSES["profit" if latest.net_income > 0 else "loss"]
        content += clause.format(net_income=format_currency(latest.net_income))
        return NarrativeSection(title="La tua redditività", icon="📊", content=content, status=status)

    def _financial_structure_section(self, latest: KPISet) -> NarrativeSection:
        template, status = STRUCTURE_TEMPLATES[structure_bucket(latest)]
        ratio = latest.debt_to_equity_ratio
        content = template.format(
            equity=format_currency(latest.equity),
            liabilities=format_currency(latest.total_liabilities),
            ratio=f"{ratio:.2f}" if ratio is not None else "",
        )
        debt_key = net_debt_bucket(latest)
        if debt_key is not None and latest.net_debt is not None:
            content += NET_DEBT_CLAUSES[debt_key].format(
                net_cash=format_currency(abs(latest.net_debt)),
                net_debt=format_currency(latest.net_debt),
            )
        return NarrativeSection(
            title="La tua solidità finanziaria", icon="🏛️", content=content, status=status
        )

    def _strengths_and_weaknesses(
        self, latest: KPISet, growth: Optional[float]
    ) -> Tuple[List[str], List[str]]:
        strengths: List[str] = []
        weaknesses: List[str] = []

        if growth is not None:
            if growth > 0.10:
                strengths.append("Crescita dei ricavi a doppia cifra")
            elif growth < -0.05:
                weaknesses.append("Ricavi in calo rispetto all'anno precedente")

        margin_status = ebitda_margin_status(latest.ebitda_margin)
        if margin_status in ("excellent", "good"):
            strengths.append("Buona marginalità operativa")
        elif margin_status == "poor":
            weaknesses.append("Margine EBITDA sotto la media")

        if latest.net_income > 0:
            if net_margin_ratio(latest.net_income, latest.revenue) > 0.08:
                strengths.append("Eccellente utile netto")
        else:
            weaknesses.append("Utile netto negativo")

        if latest.debt_to_equity_ratio is not None:
            if latest.debt_to_equity_ratio < 0.3:
                strengths.append("Basso indebitamento")
            elif latest.debt_to_equity_ratio > 1.0:
                weaknesses.append("Elevato rapporto debiti/patrimonio")

        if latest.net_debt is not None and latest.net_debt < 0:
            strengths.append("Posizione di cassa positiva")

        if latest.revenue >= 2_000_000:
            strengths.append("Dimensione aziendale significativa")

        return strengths, weaknesses


_DEFAULT_GENERATOR = NarrativeGenerator()


def generate_narrative(statements: Sequence[FinancialStatement]) -> FinancialNarrative:
    """Module-level shortcut around :class:`NarrativeGenerator`."""
    return _DEFAULT_GENERATOR.generate(statements)

