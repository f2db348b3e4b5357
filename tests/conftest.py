from __future__ import annotations

from typing import Any

import pytest

from pmi_insight.domain.models.financials import FinancialStatement


def build_statement(**overrides: Any) -> FinancialStatement:
    values = dict(
        fiscal_year=2023,
        revenue=1_000_000,
        ebitda=150_000,
        ebitda_margin=0.15,
        net_income=60_000,
        total_assets=1_500_000,
        total_liabilities=900_000,
        equity=600_000,
    )
    values.update(overrides)
    return FinancialStatement(**values)


@pytest.fixture
def make_statement():
    return build_statement
