"""Domain models describing the financial data exchanged between services."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

KPIStatus = Literal["excellent", "good", "fair", "poor"]
FactorStatus = Literal["positive", "neutral", "negative"]
SectionStatus = Literal["positive", "neutral", "negative", "info"]
BenchmarkPosition = Literal["above", "below", "average"]
OverallPosition = Literal["leader", "competitive", "average", "lagging"]


@dataclass
class FinancialStatement:
    """One fiscal year of a company's statements, as persisted by the application."""

    fiscal_year: int
    revenue: Any
    ebitda: Any
    ebitda_margin: Any
    net_income: Any
    total_assets: Any
    total_liabilities: Any
    equity: Any
    net_debt: Optional[Any] = None
    revenue_growth: Optional[Any] = None
    net_profit_margin: Optional[Any] = None
    debt_to_equity_ratio: Optional[Any] = None
    current_ratio: Optional[Any] = None
    currency: str = "EUR"
    # Income statement detail
    cost_of_goods_sold: Optional[Any] = None
    gross_profit: Optional[Any] = None
    operating_costs: Optional[Any] = None
    depreciation: Optional[Any] = None
    ebit: Optional[Any] = None
    interest_expense: Optional[Any] = None
    # Balance sheet detail
    cash_and_equivalents: Optional[Any] = None
    receivables: Optional[Any] = None
    inventory: Optional[Any] = None
    current_assets: Optional[Any] = None
    fixed_assets: Optional[Any] = None
    current_liabilities: Optional[Any] = None
    long_term_debt: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class KPISet:
    """Numeric KPIs derived from exactly one statement."""

    revenue: float
    revenue_growth: Optional[float]
    ebitda: float
    ebitda_margin: float
    net_income: float
    net_profit_margin: Optional[float]
    total_assets: float
    total_liabilities: float
    equity: float
    net_debt: Optional[float]
    debt_to_equity_ratio: Optional[float]
    current_ratio: Optional[float]
    fiscal_year: int
    currency: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MAThresholds:
    """Eligibility cutoffs for the M&A attractiveness score."""

    revenue_threshold: float = 2_000_000
    ebitda_margin_threshold: float = 0.10
    ebitda_threshold: float = 200_000
    growth_threshold: float = 0.05
    score_threshold: int = 60


@dataclass(frozen=True)
class MAFactor:
    name: str
    score: int
    weight: int
    status: FactorStatus
    description: str


@dataclass(frozen=True)
class MAScoreResult:
    """Weighted 0-100 attractiveness score plus the factors behind it."""

    score: int
    is_eligible: bool
    factors: List[MAFactor] = field(default_factory=list)
    highlights: List[str] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CompetitorStatement:
    """Input pairing of a competitor's identity and its latest statement."""

    name: str
    statement: FinancialStatement
    vat_number: Optional[str] = None


@dataclass(frozen=True)
class CompetitorData:
    name: str
    kpis: KPISet
    vat_number: Optional[str] = None


@dataclass(frozen=True)
class BenchmarkComparison:
    metric: str
    metric_label: str
    company_value: float
    competitor_average: float
    position: BenchmarkPosition
    percentile: int
    narrative: str


@dataclass(frozen=True)
class BenchmarkSummary:
    overall_position: OverallPosition
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BenchmarkResult:
    """Company KPIs compared metric by metric against a competitor group."""

    company_kpis: KPISet
    competitors: List[CompetitorData]
    comparisons: List[BenchmarkComparison]
    summary: BenchmarkSummary

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NarrativeSection:
    title: str
    icon: str
    content: str
    status: SectionStatus


@dataclass(frozen=True)
class FinancialNarrative:
    """Plain-Italian explanation of the latest fiscal year."""

    summary: str
    sections: List[NarrativeSection] = field(default_factory=list)
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CompanyProfile:
    """Company identity as returned by data providers and stored locally."""

    id: str
    legal_name: str
    country: str = "IT"
    vat_number: Optional[str] = None
    industry: Optional[str] = None
    founded_year: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CompanyFinancials:
    """Bundle returned by a provider fetch: identity plus yearly statements."""

    company: CompanyProfile
    statements: List[FinancialStatement] = field(default_factory=list)


@dataclass(frozen=True)
class TrendSummary:
    """Multi-year view: one row per fiscal year plus window-level metrics."""

    history: List[Dict[str, Any]] = field(default_factory=list)
    metrics: Dict[str, Optional[float]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
