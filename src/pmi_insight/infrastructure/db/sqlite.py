"""SQLite persistence layer for companies and their yearly statements."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from pmi_insight.domain.models.financials import CompanyProfile, FinancialStatement

logger = logging.getLogger(__name__)

STATEMENT_COLUMNS = (
    "fiscal_year",
    "revenue",
    "cost_of_goods_sold",
    "gross_profit",
    "operating_costs",
    "ebitda",
    "ebitda_margin",
    "depreciation",
    "ebit",
    "interest_expense",
    "net_income",
    "cash_and_equivalents",
    "receivables",
    "inventory",
    "current_assets",
    "fixed_assets",
    "total_assets",
    "current_liabilities",
    "long_term_debt",
    "total_liabilities",
    "equity",
    "net_debt",
    "revenue_growth",
    "net_profit_margin",
    "debt_to_equity_ratio",
    "current_ratio",
    "currency",
)


class SQLiteRepository:
    """Lightweight gateway for reading and writing company financial data."""

    def __init__(self, database_uri: str, *, echo: bool = False) -> None:
        self._engine: Engine = create_engine(database_uri, echo=echo, future=True)
        self._ensure_schema()

    @property
    def engine(self) -> Engine:
        return self._engine

    # -----------------
    # Schema management
    # -----------------
    def _ensure_schema(self) -> None:
        """Create core tables if they do not already exist."""
        ddl = [
            """
            CREATE TABLE IF NOT EXISTS companies (
              id TEXT PRIMARY KEY,
              legal_name TEXT NOT NULL,
              vat_number TEXT,
              country TEXT NOT NULL DEFAULT 'IT',
              industry TEXT,
              founded_year INTEGER,
              updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );
            """,
            """CREATE INDEX IF NOT EXISTS idx_companies_vat ON companies(vat_number);""",
            """
            CREATE TABLE IF NOT EXISTS financial_statements (
              company_id TEXT NOT NULL,
              fiscal_year INTEGER NOT NULL,
              revenue REAL NOT NULL,
              cost_of_goods_sold REAL,
              gross_profit REAL,
              operating_costs REAL,
              ebitda REAL NOT NULL,
              ebitda_margin REAL NOT NULL,
              depreciation REAL,
              ebit REAL,
              interest_expense REAL,
              net_income REAL NOT NULL,
              cash_and_equivalents REAL,
              receivables REAL,
              inventory REAL,
              current_assets REAL,
              fixed_assets REAL,
              total_assets REAL NOT NULL,
              current_liabilities REAL,
              long_term_debt REAL,
              total_liabilities REAL NOT NULL,
              equity REAL NOT NULL,
              net_debt REAL,
              revenue_growth REAL,
              net_profit_margin REAL,
              debt_to_equity_ratio REAL,
              current_ratio REAL,
              currency TEXT NOT NULL DEFAULT 'EUR',
              updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
              PRIMARY KEY (company_id, fiscal_year)
            );
            """,
        ]
        with self._engine.begin() as conn:
            for statement in ddl:
                conn.execute(text(statement))

    # ---------
    # Companies
    # ---------
    def upsert_company(self, company: CompanyProfile) -> None:
        stmt = text(
            """
            INSERT INTO companies (id, legal_name, vat_number, country, industry, founded_year, updated_at)
            VALUES (:id, :legal_name, :vat_number, :country, :industry, :founded_year, CURRENT_TIMESTAMP)
            ON CONFLICT(id) DO UPDATE SET
              legal_name=excluded.legal_name,
              vat_number=excluded.vat_number,
              country=excluded.country,
              industry=excluded.industry,
              founded_year=excluded.founded_year,
              updated_at=CURRENT_TIMESTAMP
            """
        )
        with self._engine.begin() as conn:
            conn.execute(stmt, company.to_dict())

    def fetch_company(self, company_id: str) -> Optional[CompanyProfile]:
        query = text(
            """
            SELECT id, legal_name, country, vat_number, industry, founded_year
            FROM companies
            WHERE id = :id
            LIMIT 1
            """
        )
        with self._engine.connect() as conn:
            row = conn.execute(query, {"id": company_id}).mappings().first()
            return CompanyProfile(**dict(row)) if row else None

    def list_companies(self) -> List[CompanyProfile]:
        query = text(
            """
            SELECT id, legal_name, country, vat_number, industry, founded_year
            FROM companies
            ORDER BY legal_name
            """
        )
        with self._engine.connect() as conn:
            rows = conn.execute(query)
            return [CompanyProfile(**dict(row)) for row in rows.mappings()]

    # ----------
    # Statements
    # ----------
    def upsert_statements(self, company_id: str, statements: Iterable[FinancialStatement]) -> int:
        """Persist yearly statements; re-running for a year overwrites it."""
        payload: List[Dict[str, Any]] = []
        for statement in statements:
            row = {column: getattr(statement, column) for column in STATEMENT_COLUMNS}
            row["company_id"] = company_id
            row["currency"] = row["currency"] or "EUR"
            payload.append(row)
        if not payload:
            return 0

        columns = ", ".join(STATEMENT_COLUMNS)
        placeholders = ", ".join(f":{column}" for column in STATEMENT_COLUMNS)
        updates = ",\n              ".join(
            f"{column}=excluded.{column}" for column in STATEMENT_COLUMNS if column != "fiscal_year"
        )
        stmt = text(
            f"""
            INSERT INTO financial_statements (company_id, {columns})
            VALUES (:company_id, {placeholders})
            ON CONFLICT(company_id, fiscal_year) DO UPDATE SET
              {updates},
              updated_at=CURRENT_TIMESTAMP
            """
        )
        with self._engine.begin() as conn:
            conn.execute(stmt, payload)
        logger.info("Stored %d statement(s) for %s", len(payload), company_id)
        return len(payload)

    def fetch_statements(self, company_id: str) -> List[FinancialStatement]:
        """Load statements for a company ordered by fiscal year descending."""
        query = text(
            f"""
            SELECT {", ".join(STATEMENT_COLUMNS)}
            FROM financial_statements
            WHERE company_id = :company_id
            ORDER BY fiscal_year DESC
            """
        )
        with self._engine.connect() as conn:
            rows = conn.execute(query, {"company_id": company_id})
            return [FinancialStatement(**dict(row)) for row in rows.mappings()]
