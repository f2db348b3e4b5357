"""Provider contract, rate-limited wrapper and factory."""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from config import Config
from pmi_insight.domain.models.financials import CompanyFinancials, CompanyProfile
from pmi_insight.infrastructure.data_providers.mock_provider import MockFinancialDataProvider
from pmi_insight.infrastructure.errors import FinancialDataProviderError, RateLimitExceededError
from pmi_insight.infrastructure.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class FinancialDataProvider(Protocol):
    name: str

    def search_company(self, query: str, country: Optional[str] = None) -> List[CompanyProfile]:
        ...

    def fetch_financials(self, company_id: str, years_back: int = 3) -> CompanyFinancials:
        ...

    def get_company_by_id(self, company_id: str) -> Optional[CompanyProfile]:
        ...


class RateLimitedProvider:
    """Delegate to ``inner`` after charging one request against ``limiter``."""

    def __init__(self, inner: FinancialDataProvider, limiter: RateLimiter, *, key: str = "provider") -> None:
        self._inner = inner
        self._limiter = limiter
        self._key = key
        self.name = inner.name

    def search_company(self, query: str, country: Optional[str] = None) -> List[CompanyProfile]:
        self._charge()
        return self._inner.search_company(query, country)

    def fetch_financials(self, company_id: str, years_back: int = 3) -> CompanyFinancials:
        self._charge()
        return self._inner.fetch_financials(company_id, years_back)

    def get_company_by_id(self, company_id: str) -> Optional[CompanyProfile]:
        self._charge()
        return self._inner.get_company_by_id(company_id)

    def _charge(self) -> None:
        result = self._limiter.check(self._key)
        if not result.success:
            logger.warning("Provider rate limit reached for key %s", self._key)
            raise RateLimitExceededError(self._key, result.reset_at)


def get_financial_data_provider(config: Config) -> FinancialDataProvider:
    """Build the provider selected by ``FINANCIAL_DATA_PROVIDER``."""
    provider_type = config.financial_data_provider or "mock"
    if provider_type == "real":
        raise FinancialDataProviderError(
            "Real financial data provider not yet implemented. "
            "Set FINANCIAL_DATA_PROVIDER=mock to use mock data.",
            code="PROVIDER_ERROR",
        )
    if provider_type != "mock":
        logger.warning("Unknown provider %r; falling back to mock data", provider_type)
    limiter = RateLimiter(max_requests=config.rate_limit_per_minute, window_seconds=60.0)
    return RateLimitedProvider(MockFinancialDataProvider(), limiter)
