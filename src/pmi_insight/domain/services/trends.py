"""Year-over-year trends and window metrics across all available statements."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import pandas as pd

from pmi_insight.domain.models.financials import FinancialStatement, TrendSummary
from pmi_insight.domain.services.kpi import calculate_cagr, calculate_growth_rate

TREND_COLUMNS = [
    "fiscal_year",
    "revenue",
    "ebitda",
    "ebitda_margin",
    "net_income",
    "net_profit_margin",
    "equity",
]
OPTIONAL_COLUMNS = ("net_profit_margin", "revenue_yoy", "net_income_yoy")


def _frame_from_statements(statements: Sequence[FinancialStatement]) -> pd.DataFrame:
    rows = [{key: getattr(s, key) for key in TREND_COLUMNS} for s in statements]
    df = pd.DataFrame(rows, columns=TREND_COLUMNS)
    if df.empty:
        return df
    df = df.drop_duplicates(subset="fiscal_year", keep="first")
    df[TREND_COLUMNS[1:]] = df[TREND_COLUMNS[1:]].astype(float)
    return df.sort_values("fiscal_year").reset_index(drop=True)


def _yoy(series: pd.Series) -> List[Optional[float]]:
    values = series.tolist()
    out: List[Optional[float]] = [None]
    for previous, current in zip(values, values[1:]):
        out.append(calculate_growth_rate(current, previous))
    return out


def _column_average(series: pd.Series) -> float:
    values = series.dropna()
    return float(values.mean()) if not values.empty else 0.0


class TrendCalculator:
    """Compute CAGR and YoY growth over the statements window (oldest to newest)."""

    def calculate(self, statements: Sequence[FinancialStatement]) -> TrendSummary:
        df = _frame_from_statements(statements)
        if df.empty:
            return TrendSummary(metrics={"periods_count": 0.0})

        df["revenue_yoy"] = _yoy(df["revenue"])
        df["net_income_yoy"] = _yoy(df["net_income"])

        years = float(df["fiscal_year"].iloc[-1] - df["fiscal_year"].iloc[0])
        metrics: Dict[str, Optional[float]] = {
            "periods_count": float(len(df)),
            "revenue_cagr": float(calculate_cagr(df["revenue"].iloc[0], df["revenue"].iloc[-1], years))
            if years > 0
            else None,
            "average_ebitda_margin": _column_average(df["ebitda_margin"]),
            "average_net_profit_margin": _column_average(df["net_profit_margin"]),
        }
        history = df.sort_values("fiscal_year", ascending=False).to_dict(orient="records")
        for row in history:
            row["fiscal_year"] = int(row["fiscal_year"])
            for key in OPTIONAL_COLUMNS:
                if pd.isna(row[key]):
                    row[key] = None
        return TrendSummary(history=history, metrics=metrics)
