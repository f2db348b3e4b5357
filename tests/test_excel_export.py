from __future__ import annotations

from datetime import date

import pytest
from openpyxl import load_workbook

from pmi_insight.domain.models.financials import CompetitorStatement
from pmi_insight.domain.services.benchmark import create_benchmark
from pmi_insight.reports.excel import REPORT_TITLE, build_workbook, excel_filename, export_excel


@pytest.fixture
def statements(make_statement):
    return [
        make_statement(fiscal_year=2022, revenue=900_000, ebitda_margin=0.12),
        make_statement(fiscal_year=2023, revenue=1_000_000, cash_and_equivalents=50_000),
    ]


def test_excel_filename_is_sanitized():
    assert (
        excel_filename("Rossi Meccanica S.r.l.", today=date(2024, 1, 2))
        == "PMIInsight_Rossi_Meccanica_S_r_l__2024-01-02.xlsx"
    )
    long_name = excel_filename("A" * 50, today=date(2024, 1, 2))
    assert long_name == f"PMIInsight_{'A' * 30}_2024-01-02.xlsx"


def test_workbook_sheets_without_benchmark(statements):
    wb = build_workbook("Rossi Meccanica S.r.l.", statements, generated=date(2024, 1, 2))
    assert wb.sheetnames == ["Sintesi", "Conto Economico", "Stato Patrimoniale"]

    summary = wb["Sintesi"]
    assert summary["A1"].value == REPORT_TITLE
    assert summary["A2"].value == "Rossi Meccanica S.r.l."
    assert summary["A3"].value == "Generato il: 02/01/2024"
    assert summary["A5"].value == "KPI Principali"
    assert summary["A6"].value == "Ricavi"
    assert summary["B6"].value == 1_000_000
    assert summary["C6"].value == 2023

    income = wb["Conto Economico"]
    assert [cell.value for cell in income[1]] == ["Conto Economico", "2023", "2022"]
    assert income["A2"].value == "Ricavi"
    assert income["B2"].value == 1_000_000
    assert income["C2"].value == 900_000

    balance = wb["Stato Patrimoniale"]
    assert balance["A2"].value == "ATTIVO"
    assert balance["A3"].value == "Disponibilità Liquide"
    assert balance["B3"].value == 50_000
    assert balance["C3"].value is None


def test_export_writes_benchmark_sheet(tmp_path, statements, make_statement):
    benchmark = create_benchmark(
        statements[1],
        [CompetitorStatement(name="Alfa S.r.l.", statement=make_statement(revenue=2_000_000))],
    )
    target = export_excel(tmp_path / "out" / "report.xlsx", "Rossi", statements, benchmark)
    assert target.exists()

    wb = load_workbook(target)
    assert wb.sheetnames[-1] == "Benchmark"
    sheet = wb["Benchmark"]
    assert sheet["A1"].value == "Benchmark con Competitor"
    assert [cell.value for cell in sheet[3]] == [
        "Metrica", "La tua azienda", "Media competitor", "Posizione",
    ]
    assert sheet["A4"].value == "Ricavi"
    assert sheet["C4"].value == 2_000_000
    assert sheet["D4"].value == "Sotto"
