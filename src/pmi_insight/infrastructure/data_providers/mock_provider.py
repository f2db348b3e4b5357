"""Deterministic in-process provider with a handful of Italian SMEs."""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, List, Optional

from pmi_insight.domain.models.financials import (
    CompanyFinancials,
    CompanyProfile,
    FinancialStatement,
)
from pmi_insight.domain.services.kpi import round_half_up
from pmi_insight.infrastructure.errors import FinancialDataProviderError

logger = logging.getLogger(__name__)

_VAT_QUERY = re.compile(r"^[a-z]{0,2}\d+$", re.IGNORECASE)
TAX_RATE = 0.24
MIN_GENERATED_QUERY = 3


@dataclass(frozen=True)
class IndustryProfile:
    base_revenue: float
    ebitda_margin: float
    growth_rate: float


INDUSTRY_PROFILES: Dict[str, IndustryProfile] = {
    "manufacturing": IndustryProfile(3_500_000, 0.12, 0.06),
    "technology": IndustryProfile(1_800_000, 0.20, 0.15),
    "food": IndustryProfile(5_200_000, 0.08, 0.03),
    "construction": IndustryProfile(8_500_000, 0.10, 0.04),
    "services": IndustryProfile(950_000, 0.25, 0.12),
}

MOCK_COMPANIES: Dict[str, CompanyProfile] = {
    "mock-1": CompanyProfile("mock-1", "Rossi Meccanica S.r.l.", "IT", "IT12345678901", "manufacturing", 1985),
    "mock-2": CompanyProfile("mock-2", "Tech Solutions Italia S.p.A.", "IT", "IT98765432109", "technology", 2010),
    "mock-3": CompanyProfile("mock-3", "Alimentari Bianchi S.r.l.", "IT", "IT55566677788", "food", 1972),
    "mock-4": CompanyProfile("mock-4", "Costruzioni Verdi S.p.A.", "IT", "IT11122233344", "construction", 1995),
    "mock-5": CompanyProfile("mock-5", "Digital Marketing Pro S.r.l.", "IT", "IT99988877766", "services", 2015),
}


def company_seed(company_id: str) -> int:
    """Sum of code points; keeps generated figures stable per company id."""
    return sum(ord(ch) for ch in company_id)


def _generated_vat(seed: int) -> str:
    return f"IT{(seed * 7_919_113) % 10**11:011d}"


def generate_statements(
    company: CompanyProfile, years_back: int, latest_year: int
) -> List[FinancialStatement]:
    """Synthesize ``years_back`` statements, newest first, from the industry profile."""
    profile = INDUSTRY_PROFILES.get(company.industry or "services", INDUSTRY_PROFILES["services"])
    seed = company_seed(company.id)
    random_factor = 0.8 + (seed % 40) / 100

    statements: List[FinancialStatement] = []
    for i in range(years_back):
        year_factor = (1 + profile.growth_rate) ** -i
        variance = 1 + math.sin(seed + i) * 0.05

        revenue = round_half_up(profile.base_revenue * random_factor * year_factor * variance)
        margin = profile.ebitda_margin + math.sin(seed + i * 2) * 0.02
        ebitda = round_half_up(revenue * margin)
        depreciation = round_half_up(revenue * 0.03)
        ebit = ebitda - depreciation
        interest_expense = round_half_up(revenue * 0.015)
        net_income = round_half_up((ebit - interest_expense) * (1 - TAX_RATE))

        total_assets = round_half_up(revenue * (1.1 + (seed % 30) / 100))
        current_assets = round_half_up(total_assets * 0.4)
        cash = round_half_up(current_assets * 0.25)
        receivables = round_half_up(current_assets * 0.45)

        debt_ratio = 0.4 + (seed % 20) / 100
        total_liabilities = round_half_up(total_assets * debt_ratio)
        current_liabilities = round_half_up(total_liabilities * 0.4)
        long_term_debt = total_liabilities - current_liabilities
        equity = total_assets - total_liabilities

        # The oldest year has no prior year to grow from.
        growth = profile.growth_rate + math.sin(seed + i) * 0.02 if i < years_back - 1 else None

        statements.append(
            FinancialStatement(
                fiscal_year=latest_year - i,
                revenue=revenue,
                ebitda=ebitda,
                ebitda_margin=margin,
                net_income=net_income,
                total_assets=total_assets,
                total_liabilities=total_liabilities,
                equity=equity,
                net_debt=long_term_debt - cash,
                revenue_growth=growth,
                net_profit_margin=net_income / revenue if revenue else None,
                debt_to_equity_ratio=total_liabilities / equity if equity else None,
                current_ratio=current_assets / current_liabilities if current_liabilities else None,
                currency="EUR",
                cost_of_goods_sold=round_half_up(revenue * 0.65),
                gross_profit=round_half_up(revenue * 0.35),
                operating_costs=round_half_up(revenue * 0.35) - ebitda,
                depreciation=depreciation,
                ebit=ebit,
                interest_expense=interest_expense,
                cash_and_equivalents=cash,
                receivables=receivables,
                inventory=current_assets - cash - receivables,
                current_assets=current_assets,
                fixed_assets=total_assets - current_assets,
                current_liabilities=current_liabilities,
                long_term_debt=long_term_debt,
            )
        )
    return statements


class MockFinancialDataProvider:
    """Provider used in development and tests; never touches the network."""

    name = "mock"

    def __init__(self, reference_year: Optional[int] = None) -> None:
        # Latest completed fiscal year.
        self.reference_year = reference_year or date.today().year - 1

    def search_company(self, query: str, country: Optional[str] = None) -> List[CompanyProfile]:
        normalized = (query or "").strip().lower()
        if not normalized:
            raise FinancialDataProviderError("Inserisci un termine di ricerca", code="INVALID_INPUT")

        if _VAT_QUERY.match(re.sub(r"\s", "", normalized)):
            return [
                replace(c)
                for c in MOCK_COMPANIES.values()
                if c.vat_number and normalized in c.vat_number.lower()
            ]

        results = [replace(c) for c in MOCK_COMPANIES.values() if normalized in c.legal_name.lower()]
        if not results and len(normalized) >= MIN_GENERATED_QUERY:
            generated_id = "gen-" + re.sub(r"\s", "-", normalized)
            stripped = query.strip()
            results = [
                CompanyProfile(
                    id=generated_id,
                    legal_name=stripped[:1].upper() + stripped[1:] + " S.r.l.",
                    country="IT",
                    vat_number=_generated_vat(company_seed(generated_id)),
                    industry="services",
                )
            ]
        logger.debug("Mock search %r -> %d result(s)", query, len(results))
        return results

    def fetch_financials(self, company_id: str, years_back: int = 3) -> CompanyFinancials:
        if years_back < 1:
            raise FinancialDataProviderError("years_back must be at least 1", code="INVALID_INPUT")
        company = self._resolve(company_id)
        statements = generate_statements(company, years_back, self.reference_year)
        return CompanyFinancials(company=company, statements=statements)

    def get_company_by_id(self, company_id: str) -> Optional[CompanyProfile]:
        company = MOCK_COMPANIES.get(company_id)
        return replace(company) if company is not None else None

    def _resolve(self, company_id: str) -> CompanyProfile:
        known = self.get_company_by_id(company_id)
        if known is not None:
            return known
        # Unknown ids come from generated search hits.
        name = re.sub(r"^gen-", "", company_id).replace("-", " ")
        return CompanyProfile(
            id=company_id,
            legal_name=f"{name} S.r.l.",
            country="IT",
            vat_number=_generated_vat(company_seed(company_id)),
            industry="services",
        )
