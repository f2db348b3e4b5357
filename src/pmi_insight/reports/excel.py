"""Excel workbook export: summary, income statement, balance sheet, benchmark."""
from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from pmi_insight.domain.models.financials import BenchmarkResult, FinancialStatement
from pmi_insight.domain.services.kpi import extract_kpis

logger = logging.getLogger(__name__)

REPORT_TITLE = "PMI INSIGHT - Analisi Finanziaria"
AMOUNT_FORMAT = "#,##0"
PERCENT_FORMAT = "0.0%"

FILLS = {
    "header": PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid"),
    "section": PatternFill(start_color="D6E4F0", end_color="D6E4F0", fill_type="solid"),
    "above": PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"),
    "average": PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid"),
    "below": PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid"),
}
FONTS = {
    "title": Font(bold=True, size=14, color="1F4E79"),
    "header": Font(bold=True, color="FFFFFF", size=11),
    "section": Font(bold=True, size=11, color="1F4E79"),
    "total": Font(bold=True),
}
THIN_BORDER = Border(
    left=Side(style="thin"), right=Side(style="thin"),
    top=Side(style="thin"), bottom=Side(style="thin"),
)

POSITION_LABELS = {"above": "Sopra", "below": "Sotto", "average": "In linea"}
TOTAL_KEYS = {"total_assets", "total_liabilities", "equity"}

INCOME_ROWS: List[Tuple[str, str]] = [
    ("revenue", "Ricavi"),
    ("cost_of_goods_sold", "Costo del Venduto"),
    ("gross_profit", "Margine Lordo"),
    ("operating_costs", "Costi Operativi"),
    ("ebitda", "EBITDA"),
    ("depreciation", "Ammortamenti"),
    ("ebit", "EBIT"),
    ("interest_expense", "Oneri Finanziari"),
    ("net_income", "Utile Netto"),
]
ASSET_ROWS: List[Tuple[str, str]] = [
    ("cash_and_equivalents", "Disponibilità Liquide"),
    ("receivables", "Crediti"),
    ("inventory", "Magazzino"),
    ("current_assets", "Attivo Corrente"),
    ("fixed_assets", "Immobilizzazioni"),
    ("total_assets", "TOTALE ATTIVO"),
]
LIABILITY_ROWS: List[Tuple[str, str]] = [
    ("current_liabilities", "Passivo Corrente"),
    ("long_term_debt", "Debiti a Lungo Termine"),
    ("total_liabilities", "Totale Passivo"),
    ("equity", "Patrimonio Netto"),
]


def excel_filename(company_name: str, today: Optional[date] = None) -> str:
    safe_name = re.sub(r"[^a-zA-Z0-9]", "_", company_name)[:30]
    stamp = (today or date.today()).isoformat()
    return f"PMIInsight_{safe_name}_{stamp}.xlsx"


def _number(value) -> Optional[float]:
    return float(value) if value is not None else None


def _style_header(ws: Worksheet, row: int, width: int) -> None:
    for col in range(1, width + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = FILLS["header"]
        cell.font = FONTS["header"]
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center")


def _set_widths(ws: Worksheet, widths: Sequence[int]) -> None:
    for idx, width in enumerate(widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width


def _write_summary(ws: Worksheet, company_name: str, statements: Sequence[FinancialStatement], generated: date) -> None:
    ws.title = "Sintesi"
    ws.merge_cells("A1:C1")
    ws["A1"] = REPORT_TITLE
    ws["A1"].font = FONTS["title"]
    ws["A2"] = company_name
    ws["A2"].font = FONTS["section"]
    ws["A3"] = f"Generato il: {generated.strftime('%d/%m/%Y')}"

    ws.append([])
    ws.append(["KPI Principali", "Valore", "Anno"])
    _style_header(ws, ws.max_row, 3)

    if statements:
        kpis = extract_kpis(statements[0])
        rows = [
            ("Ricavi", kpis.revenue, AMOUNT_FORMAT),
            ("EBITDA", kpis.ebitda, AMOUNT_FORMAT),
            ("Margine EBITDA", kpis.ebitda_margin, PERCENT_FORMAT),
            ("Utile Netto", kpis.net_income, AMOUNT_FORMAT),
            ("Patrimonio Netto", kpis.equity, AMOUNT_FORMAT),
            ("Totale Attivo", kpis.total_assets, AMOUNT_FORMAT),
            ("Totale Debiti", kpis.total_liabilities, AMOUNT_FORMAT),
        ]
        if kpis.net_debt is not None:
            rows.append(("Indebitamento Netto", kpis.net_debt, AMOUNT_FORMAT))
        for label, value, number_format in rows:
            ws.append([label, value, kpis.fiscal_year])
            ws.cell(row=ws.max_row, column=2).number_format = number_format
    _set_widths(ws, [25, 18, 10])


def _write_statement_rows(
    ws: Worksheet, statements: Sequence[FinancialStatement], rows: Sequence[Tuple[str, str]]
) -> None:
    for key, label in rows:
        ws.append([label, *(_number(getattr(s, key)) for s in statements)])
        for col in range(2, len(statements) + 2):
            ws.cell(row=ws.max_row, column=col).number_format = AMOUNT_FORMAT
        if key in TOTAL_KEYS:
            ws.cell(row=ws.max_row, column=1).font = FONTS["total"]


def _write_section_label(ws: Worksheet, label: str) -> None:
    ws.append([label])
    ws.cell(row=ws.max_row, column=1).font = FONTS["section"]
    ws.cell(row=ws.max_row, column=1).fill = FILLS["section"]


def _write_income_statement(ws: Worksheet, statements: Sequence[FinancialStatement]) -> None:
    ws.append(["Conto Economico", *(str(s.fiscal_year) for s in statements)])
    _style_header(ws, 1, len(statements) + 1)
    _write_statement_rows(ws, statements, INCOME_ROWS)
    ws.append([])
    ws.append(["Margine EBITDA %", *(float(s.ebitda_margin) for s in statements)])
    for col in range(2, len(statements) + 2):
        ws.cell(row=ws.max_row, column=col).number_format = PERCENT_FORMAT
    _set_widths(ws, [22, *([15] * len(statements))])


def _write_balance_sheet(ws: Worksheet, statements: Sequence[FinancialStatement]) -> None:
    ws.append(["Stato Patrimoniale", *(str(s.fiscal_year) for s in statements)])
    _style_header(ws, 1, len(statements) + 1)
    _write_section_label(ws, "ATTIVO")
    _write_statement_rows(ws, statements, ASSET_ROWS)
    ws.append([])
    _write_section_label(ws, "PASSIVO")
    _write_statement_rows(ws, statements, LIABILITY_ROWS)
    _set_widths(ws, [25, *([15] * len(statements))])


def _write_benchmark(ws: Worksheet, benchmark: BenchmarkResult) -> None:
    ws["A1"] = "Benchmark con Competitor"
    ws["A1"].font = FONTS["title"]
    ws.append([])
    ws.append(["Metrica", "La tua azienda", "Media competitor", "Posizione"])
    _style_header(ws, ws.max_row, 4)

    for comparison in benchmark.comparisons:
        number_format = PERCENT_FORMAT if comparison.metric == "ebitda_margin" else AMOUNT_FORMAT
        ws.append([
            comparison.metric_label,
            comparison.company_value,
            comparison.competitor_average,
            POSITION_LABELS[comparison.position],
        ])
        row = ws.max_row
        ws.cell(row=row, column=2).number_format = number_format
        ws.cell(row=row, column=3).number_format = number_format
        ws.cell(row=row, column=4).fill = FILLS[comparison.position]

    ws.append([])
    _write_section_label(ws, "Competitor analizzati:")
    for competitor in benchmark.competitors:
        ws.append([competitor.name, competitor.kpis.revenue, competitor.kpis.ebitda_margin])
        ws.cell(row=ws.max_row, column=2).number_format = AMOUNT_FORMAT
        ws.cell(row=ws.max_row, column=3).number_format = PERCENT_FORMAT
    _set_widths(ws, [22, 18, 18, 12])


def build_workbook(
    company_name: str,
    statements: Sequence[FinancialStatement],
    benchmark: Optional[BenchmarkResult] = None,
    *,
    generated: Optional[date] = None,
) -> Workbook:
    """Assemble the analysis workbook; statements are laid out newest first."""
    ordered = sorted(statements, key=lambda s: s.fiscal_year, reverse=True)
    wb = Workbook()
    _write_summary(wb.active, company_name, ordered, generated or date.today())
    _write_income_statement(wb.create_sheet("Conto Economico"), ordered)
    _write_balance_sheet(wb.create_sheet("Stato Patrimoniale"), ordered)
    if benchmark is not None:
        _write_benchmark(wb.create_sheet("Benchmark"), benchmark)
    return wb


def export_excel(
    path: Path,
    company_name: str,
    statements: Sequence[FinancialStatement],
    benchmark: Optional[BenchmarkResult] = None,
) -> Path:
    """Write the workbook to ``path`` and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb = build_workbook(company_name, statements, benchmark)
    wb.save(path)
    logger.info("Excel report saved to %s", path)
    return path
