"""LangGraph node loading company statements from storage or the data provider."""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from pmi_insight.domain.models.financials import (
    CompanyProfile,
    CompetitorStatement,
    FinancialStatement,
)
from pmi_insight.infrastructure.errors import FinancialDataProviderError
from pmi_insight.workflows.context import WorkflowContext
from pmi_insight.workflows.state import AnalysisState

logger = logging.getLogger(__name__)


def run(state: AnalysisState, context: WorkflowContext) -> AnalysisState:
    """Populate the state with the company, its statements and competitor statements (cache-first)."""
    logs = state.setdefault("logs", [])
    errors = state.setdefault("errors", [])
    company_id = state["company_id"]

    logs.append("DataLoadAgent -> lookup financial statements")
    company: Optional[CompanyProfile] = None
    statements: List[FinancialStatement] = []
    try:
        company, statements = load_company(company_id, context, logs)
    except FinancialDataProviderError as exc:
        errors.append(f"Provider fetch failed for {company_id}: {exc}")

    if company is not None and not statements:
        errors.append(f"No financial statements available for {company.legal_name}.")
    state["company"] = company
    state["statements"] = statements

    competitors: List[CompetitorStatement] = []
    for competitor_id in state.get("competitor_ids") or []:
        if competitor_id == company_id:
            logs.append(f"Skipping competitor {competitor_id}: same as the analysed company.")
            continue
        try:
            competitor, competitor_statements = load_company(competitor_id, context, logs)
        except FinancialDataProviderError as exc:
            errors.append(f"Competitor {competitor_id} unavailable: {exc}")
            continue
        if not competitor_statements:
            errors.append(f"Competitor {competitor_id} has no statements; excluded from benchmark.")
            continue
        competitors.append(
            CompetitorStatement(
                name=competitor.legal_name,
                statement=competitor_statements[0],
                vat_number=competitor.vat_number,
            )
        )
    state["competitors"] = competitors
    return state


def load_company(
    company_id: str, context: WorkflowContext, logs: List[str]
) -> Tuple[CompanyProfile, List[FinancialStatement]]:
    """Return the company and its statements newest first, caching provider results."""
    repository = context.repository
    company = repository.fetch_company(company_id)
    statements = repository.fetch_statements(company_id)
    if company is not None and statements:
        logs.append(f"Loaded {len(statements)} cached statement(s) for {company_id} from SQLite.")
        return company, statements

    logs.append(f"No cached data for {company_id}; fetching from {context.provider.name} provider.")
    bundle = context.provider.fetch_financials(
        company_id, years_back=context.config.financial_data_years_back
    )
    repository.upsert_company(bundle.company)
    persisted = repository.upsert_statements(bundle.company.id, bundle.statements)
    logger.info("Cached %d statement(s) for %s", persisted, bundle.company.legal_name)
    logs.append(f"Fetched and cached {persisted} statement(s) for {company_id}.")
    ordered = sorted(bundle.statements, key=lambda s: s.fiscal_year, reverse=True)
    return bundle.company, ordered
