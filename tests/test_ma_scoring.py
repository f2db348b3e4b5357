from __future__ import annotations

import pytest

from pmi_insight.domain.models.financials import MAThresholds
from pmi_insight.domain.services.ma_scoring import (
    INSUFFICIENT_DATA_SUMMARY,
    SUMMARIES,
    MAScorer,
    calculate_ma_score,
    ebitda_factor,
    financial_health_factor,
    growth_factor,
    profitability_factor,
    size_factor,
    summary_for,
)


@pytest.fixture
def eligible_statement(make_statement):
    return make_statement(
        revenue=3_000_000,
        ebitda=400_000,
        ebitda_margin=0.13,
        net_income=200_000,
        total_assets=2_500_000,
        total_liabilities=1_000_000,
        equity=1_500_000,
        debt_to_equity_ratio=1_000_000 / 1_500_000,
    )


def test_empty_input_scores_zero():
    result = calculate_ma_score([])
    assert result.score == 0
    assert result.is_eligible is False
    assert result.factors == []
    assert result.highlights == []
    assert result.summary == INSUFFICIENT_DATA_SUMMARY


def test_eligible_company(eligible_statement):
    result = calculate_ma_score([eligible_statement])

    assert [f.score for f in result.factors] == [80, 75, 50, 75, 50]
    assert [f.weight for f in result.factors] == [30, 25, 20, 15, 10]
    assert result.score == 69
    assert result.is_eligible is True
    assert result.highlights == ["Ricavi superiori a €2M", "Buona redditività netta"]
    assert result.summary == SUMMARIES["eligible"]


def test_small_company_rounds_half_up(make_statement):
    statement = make_statement(
        revenue=500_000,
        ebitda=30_000,
        ebitda_margin=0.06,
        net_income=10_000,
        total_liabilities=300_000,
        equity=200_000,
        debt_to_equity_ratio=1.5,
    )
    result = calculate_ma_score([statement])

    # (20*30 + 50*25 + 50*20 + 50*15 + 25*10) / 100 = 38.5
    assert result.score == 39
    assert result.is_eligible is False
    assert result.summary == SUMMARIES["weak"]


def test_growth_uses_previous_year_when_available(make_statement):
    statements = [
        make_statement(fiscal_year=2022, revenue=2_000_000),
        make_statement(fiscal_year=2023, revenue=2_400_000, revenue_growth=0.01),
    ]
    result = calculate_ma_score(statements)
    growth = result.factors[2]
    assert growth.score == 100
    assert growth.description == "Crescita eccezionale"
    assert "Crescita a doppia cifra" in result.highlights


def test_single_statement_falls_back_to_stored_growth(make_statement):
    result = calculate_ma_score([make_statement(revenue_growth=0.12)])
    assert result.factors[2].score == 85


def test_injected_thresholds_change_eligibility(eligible_statement):
    thresholds = MAThresholds(revenue_threshold=5_000_000, ebitda_threshold=500_000)
    result = MAScorer(thresholds).score([eligible_statement])

    assert result.score == 69
    assert result.is_eligible is False
    assert "Ricavi superiori a €5M" not in result.highlights
    assert result.highlights == ["Buona redditività netta"]
    assert result.summary == SUMMARIES["promising"]


def test_ebitda_path_makes_small_company_eligible(make_statement):
    statement = make_statement(
        revenue=1_500_000,
        ebitda=600_000,
        ebitda_margin=0.40,
        net_income=300_000,
        total_liabilities=200_000,
        equity=1_300_000,
        debt_to_equity_ratio=0.15,
        revenue_growth=0.25,
    )
    result = calculate_ma_score([statement])
    # (50*30 + 100*25 + 100*20 + 100*15 + 100*10) / 100
    assert result.score == 85
    assert result.is_eligible is True
    assert result.summary == SUMMARIES["outstanding"]


@pytest.mark.parametrize(
    "revenue, expected",
    [(5_000_000, 100), (4_999_999, 80), (2_000_000, 80), (1_000_000, 50), (999_999, 20)],
)
def test_size_factor_bands(revenue, expected):
    assert size_factor(revenue).score == expected


def test_ebitda_factor_bands():
    assert ebitda_factor(500_000, 0.15).score == 100
    assert ebitda_factor(500_000, 0.14).score == 75
    assert ebitda_factor(199_999, 0.30).score == 50
    assert ebitda_factor(10_000, 0.04).score == 25
    assert ebitda_factor(0, 0.20).score == 0
    assert ebitda_factor(-1, 0.0).description == "EBITDA negativo"


def test_growth_factor_bands():
    assert growth_factor(None).description == "Dati storici insufficienti"
    assert growth_factor(0.20).score == 100
    assert growth_factor(0.10).score == 85
    assert growth_factor(0.05).score == 65
    assert growth_factor(0.0).score == 40
    assert growth_factor(-0.01).status == "negative"


def test_profitability_factor_handles_zero_revenue():
    assert profitability_factor(100_000, 1_000_000).score == 100
    assert profitability_factor(50_000, 1_000_000).score == 75
    assert profitability_factor(1, 1_000_000).score == 50
    assert profitability_factor(0, 1_000_000).score == 10
    assert profitability_factor(50_000, 0).score == 10


def test_financial_health_factor_bands():
    assert financial_health_factor(0.1, 0).description == "Patrimonio netto negativo"
    assert financial_health_factor(None, 100).score == 50
    assert financial_health_factor(0.3, 100).score == 100
    assert financial_health_factor(0.6, 100).score == 75
    assert financial_health_factor(1.0, 100).score == 50
    assert financial_health_factor(1.01, 100).score == 25


def test_summary_checks_eighty_before_eligibility():
    assert summary_for(80, False) == SUMMARIES["outstanding"]
    assert summary_for(60, True) == SUMMARIES["eligible"]
    assert summary_for(60, False) == SUMMARIES["promising"]
    assert summary_for(39, True) == SUMMARIES["weak"]


def test_revenue_highlight_uses_italian_decimals(make_statement):
    thresholds = MAThresholds(revenue_threshold=2_500_000)
    result = MAScorer(thresholds).score([make_statement(revenue=3_000_000)])
    assert result.highlights[0] == "Ricavi superiori a €2,5M"


def test_net_income_on_zero_revenue_is_highlighted(make_statement):
    result = calculate_ma_score([make_statement(revenue=0, net_income=10_000)])
    assert "Buona redditività netta" in result.highlights


def test_scoring_is_deterministic(eligible_statement, make_statement):
    statements = [eligible_statement, make_statement(fiscal_year=2022, revenue=2_600_000)]
    assert calculate_ma_score(statements) == calculate_ma_score(statements)
