from __future__ import annotations

import pytest

from pmi_insight.domain.models.financials import CompanyProfile
from pmi_insight.infrastructure.db.sqlite import SQLiteRepository


@pytest.fixture
def repository(tmp_path):
    repo = SQLiteRepository(f"sqlite:///{tmp_path / 'pmi.db'}")
    yield repo
    repo.engine.dispose()


def test_company_upsert_and_lookup(repository):
    assert repository.fetch_company("mock-1") is None

    repository.upsert_company(
        CompanyProfile("mock-1", "Rossi Meccanica S.r.l.", "IT", "IT12345678901", "manufacturing", 1985)
    )
    repository.upsert_company(CompanyProfile("mock-1", "Rossi Meccanica S.p.A.", vat_number="IT12345678901"))
    repository.upsert_company(CompanyProfile("mock-9", "Alfa S.r.l."))

    stored = repository.fetch_company("mock-1")
    assert stored.legal_name == "Rossi Meccanica S.p.A."
    assert stored.industry is None
    assert [c.id for c in repository.list_companies()] == ["mock-9", "mock-1"]


def test_statements_round_trip_newest_first(repository, make_statement):
    stored = repository.upsert_statements(
        "mock-1",
        [
            make_statement(fiscal_year=2021, revenue_growth=None),
            make_statement(fiscal_year=2023, revenue_growth=0.05, current_ratio=1.4),
            make_statement(fiscal_year=2022),
        ],
    )
    assert stored == 3

    statements = repository.fetch_statements("mock-1")
    assert [s.fiscal_year for s in statements] == [2023, 2022, 2021]
    latest = statements[0]
    assert latest.revenue == 1_000_000
    assert latest.revenue_growth == pytest.approx(0.05)
    assert latest.current_ratio == pytest.approx(1.4)
    assert latest.net_debt is None
    assert latest.currency == "EUR"
    assert repository.fetch_statements("other") == []


def test_statement_upsert_overwrites_same_year(repository, make_statement):
    repository.upsert_statements("mock-1", [make_statement(revenue=1_000_000)])
    repository.upsert_statements("mock-1", [make_statement(revenue=1_250_000)])

    statements = repository.fetch_statements("mock-1")
    assert len(statements) == 1
    assert statements[0].revenue == 1_250_000


def test_empty_statement_batch_is_a_no_op(repository):
    assert repository.upsert_statements("mock-1", []) == 0
