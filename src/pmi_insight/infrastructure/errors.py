"""Errors raised by data providers and infrastructure adapters."""
from __future__ import annotations

from typing import Literal, Optional

ProviderErrorCode = Literal["NOT_FOUND", "RATE_LIMITED", "PROVIDER_ERROR", "INVALID_INPUT"]


class FinancialDataProviderError(RuntimeError):
    """Base error for provider lookups, tagged with a machine-readable code."""

    def __init__(self, message: str, code: ProviderErrorCode = "PROVIDER_ERROR") -> None:
        super().__init__(message)
        self.code: ProviderErrorCode = code


class CompanyNotFoundError(FinancialDataProviderError):
    def __init__(self, company_id: str) -> None:
        super().__init__(f"Azienda non trovata: {company_id}", code="NOT_FOUND")
        self.company_id = company_id


class RateLimitExceededError(FinancialDataProviderError):
    def __init__(self, key: str, reset_at: Optional[float] = None) -> None:
        super().__init__(
            "Hai effettuato troppe richieste in poco tempo. Riprova tra qualche minuto.",
            code="RATE_LIMITED",
        )
        self.key = key
        self.reset_at = reset_at
