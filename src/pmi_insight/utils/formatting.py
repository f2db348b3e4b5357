"""Italian (it-IT) number formatting for narrative sentences and reports.

Amounts use "." as thousands separator and "," as decimal separator; the euro
sign follows the amount after a non-breaking space, e.g. ``1.234.567 €``.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

NBSP = "\u00a0"

_CURRENCY_SYMBOLS = {"EUR": "€", "USD": "USD", "GBP": "£", "CHF": "CHF"}


def _group_it(value: float, decimals: int) -> str:
    """Round half away from zero and apply Italian separators."""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(str(abs(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{decimals}f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if value < 0 and rounded != 0 else ""
    return f"{sign}{text}"


def format_currency(value: Optional[float], currency: str = "EUR", decimals: int = 0) -> str:
    if value is None:
        return "—"
    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    return f"{_group_it(float(value), decimals)}{NBSP}{symbol}"


def format_percentage(value: Optional[float], decimals: int = 1) -> str:
    """Format a ratio (0.125) as an Italian percentage (12,5%)."""
    if value is None:
        return "—"
    return f"{_group_it(float(value) * 100, decimals)}%"


def format_compact_number(value: Optional[float]) -> str:
    """Abbreviate millions (Mln) and billions (Mrd); smaller amounts stay grouped."""
    if value is None:
        return "—"
    abs_val = abs(float(value))
    if abs_val >= 1_000_000_000:
        return f"{_strip_zero(_group_it(float(value) / 1_000_000_000, 1))}{NBSP}Mrd"
    if abs_val >= 1_000_000:
        return f"{_strip_zero(_group_it(float(value) / 1_000_000, 1))}{NBSP}Mln"
    return _strip_zero(_group_it(float(value), 1))


def format_number(value: Optional[float], max_decimals: int = 2) -> str:
    """Italian separators with trailing decimal zeros dropped: 2,5 and 2 and 1.234,56."""
    if value is None:
        return "—"
    text = _group_it(float(value), max_decimals)
    if "," in text:
        text = text.rstrip("0").rstrip(",")
    return text


def format_ratio(value: Optional[float], decimals: int = 2) -> str:
    if value is None:
        return "—"
    return f"{float(value):.{decimals}f}"


def _strip_zero(text: str) -> str:
    return text[:-2] if text.endswith(",0") else text
