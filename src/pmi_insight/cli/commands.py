"""CLI command definitions for the SME financial analysis tool."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from config import Config
from pmi_insight.domain.models.financials import MAScoreResult
from pmi_insight.infrastructure.errors import FinancialDataProviderError
from pmi_insight.reports.excel import excel_filename, export_excel
from pmi_insight.settings.loader import load_settings
from pmi_insight.utils.formatting import format_currency, format_percentage
from pmi_insight.utils.logging import configure_logging
from pmi_insight.workflows.graph import AnalysisWorkflow
from pmi_insight.workflows.nodes.data_load import load_company
from pmi_insight.workflows.state import AnalysisState

console = Console()
app = typer.Typer(help="Analyse Italian SME financial statements from the terminal.")

STATUS_STYLES = {"positive": "green", "neutral": "yellow", "negative": "red", "info": "cyan"}


@dataclass
class AppContext:
    """Holds reusable process-wide objects for CLI commands."""

    config: Config
    workflow: AnalysisWorkflow


def _init_context(debug_override: Optional[bool] = None) -> AppContext:
    """Create a context with configuration, logging, and workflow wiring."""
    config = load_settings(debug_override)
    configure_logging(debug=config.debug)
    workflow = AnalysisWorkflow(config=config)
    return AppContext(config=config, workflow=workflow)


@app.callback()
def main_callback(
    ctx: typer.Context,
    debug: Optional[bool] = typer.Option(
        None,
        "--debug/--no-debug",
        help="Temporarily toggle verbose logging without touching environment variables.",
    ),
) -> None:
    """Attach the application context to Typer."""
    ctx.obj = _init_context(debug_override=debug)


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Company name or VAT number, e.g. 'Rossi' or IT12345678901"),
    country: Optional[str] = typer.Option(None, "--country", help="Optional ISO country filter."),
) -> None:
    """Search companies through the configured financial data provider."""
    context: AppContext = ctx.obj
    try:
        results = context.workflow.context.provider.search_company(query, country)
    except FinancialDataProviderError as exc:
        console.print(f"[bold red]Search failed ({exc.code}):[/bold red] {exc}")
        raise typer.Exit(code=1)

    if not results:
        console.print(f"[yellow]No company matches '{query}'.[/yellow]")
        return

    table = Table(title=f"Results for '{query}'", header_style="bold magenta")
    table.add_column("ID", style="cyan")
    table.add_column("Ragione sociale")
    table.add_column("P.IVA")
    table.add_column("Settore")
    table.add_column("Fondata")
    for company in results:
        table.add_row(
            company.id,
            company.legal_name,
            company.vat_number or "—",
            company.industry or "—",
            str(company.founded_year) if company.founded_year else "—",
        )
    console.print(table)


@app.command()
def analyze(
    ctx: typer.Context,
    company_id: str = typer.Argument(..., help="Company identifier returned by 'search', e.g. mock-1"),
    competitors: List[str] = typer.Option(
        [], "--competitor", "-c", help="Competitor id to benchmark against; repeat for more."
    ),
    emit_json: bool = typer.Option(False, "--json", help="Persist the merged workflow state to JSON."),
    markdown_path: Optional[Path] = typer.Option(
        None,
        "--markdown",
        help="Optional custom path for the rendered Markdown report.",
    ),
    excel_path: Optional[Path] = typer.Option(
        None,
        "--excel",
        help="Also export an Excel workbook to this path.",
    ),
) -> None:
    """Run the analysis workflow for one company and present the outcome."""
    context: AppContext = ctx.obj
    console.rule(f"Analysing {company_id}")

    with console.status("[bold cyan]Running workflow..."):
        result: AnalysisState = context.workflow.run(company_id, competitor_ids=competitors)

    company = result.get("company")
    if company is None:
        console.print(f"[bold red]Company {company_id} not found.[/bold red]")
        for issue in result.get("errors", []):
            console.print(f"- {issue}")
        raise typer.Exit(code=1)

    if result.get("errors"):
        console.print("[bold red]Workflow completed with errors:[/bold red]")
        for issue in result["errors"]:
            console.print(f"- {issue}")
    else:
        console.print("[bold green]Workflow completed successfully.[/bold green]")

    _print_run_summary(result)

    if emit_json:
        target = context.config.output_dir / f"{company_id}_state.json"
        context.workflow.persist_state(result, target)
        console.print(f"State saved to {target}")

    if result.get("markdown_report"):
        output_md = markdown_path or context.config.output_dir / f"{company_id}.md"
        context.workflow.persist_markdown(result["markdown_report"], output_md)
        console.print(f"Markdown report available at {output_md}")

    if excel_path is not None:
        if excel_path.is_dir():
            excel_path = excel_path / excel_filename(company.legal_name)
        export_excel(excel_path, company.legal_name, result.get("statements") or [], result.get("benchmark"))
        console.print(f"Excel report available at {excel_path}")


@app.command()
def score(
    ctx: typer.Context,
    company_id: str = typer.Argument(..., help="Company identifier, e.g. mock-2"),
) -> None:
    """Print the M&A attractiveness score with its factor breakdown."""
    context: AppContext = ctx.obj
    workflow_context = context.workflow.context
    logs: List[str] = []
    try:
        company, statements = load_company(company_id, workflow_context, logs)
    except FinancialDataProviderError as exc:
        console.print(f"[bold red]Company {company_id} unavailable ({exc.code}):[/bold red] {exc}")
        raise typer.Exit(code=1)

    result = workflow_context.ma_scorer.score(statements)
    console.rule(f"{company.legal_name}: {result.score}/100")
    _print_ma_factors(result)
    for highlight in result.highlights:
        console.print(f"[green]✔[/green] {highlight}")
    eligibility = "[bold green]eligible[/bold green]" if result.is_eligible else "[yellow]not eligible[/yellow]"
    console.print(f"M&A: {eligibility}")
    console.print(result.summary)


@app.command()
def plan(ctx: typer.Context) -> None:
    """Display the high-level workflow path for quick operator reference."""
    context: AppContext = ctx.obj
    table = Table(title="Workflow Stages")
    table.add_column("Step", style="cyan")
    table.add_column("Description")

    for idx, step in enumerate(context.workflow.describe_stages(), start=1):
        table.add_row(str(idx), step)

    console.print(table)


def _print_ma_factors(result: MAScoreResult) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Fattore")
    table.add_column("Punteggio", justify="right")
    table.add_column("Peso", justify="right")
    table.add_column("Valutazione")
    for factor in result.factors:
        style = STATUS_STYLES.get(factor.status, "white")
        table.add_row(
            factor.name,
            str(factor.score),
            f"{factor.weight}%",
            f"[{style}]{factor.description}[/{style}]",
        )
    console.print(table)


def _print_run_summary(state: AnalysisState) -> None:
    """Pretty-print a short run summary for operators."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key")
    table.add_column("Value")

    company = state.get("company")
    kpis = state.get("kpis")
    ma_score = state.get("ma_score")
    benchmark = state.get("benchmark")

    table.add_row("Company", company.legal_name if company else "N/A")
    table.add_row("Report Date", state.get("report_date") or "N/A")
    table.add_row("Statements", str(len(state.get("statements") or [])))
    if kpis is not None:
        table.add_row(f"Ricavi FY{kpis.fiscal_year}", format_currency(kpis.revenue))
        table.add_row("Margine EBITDA", format_percentage(kpis.ebitda_margin))
    table.add_row("M&A Score", f"{ma_score.score}/100" if ma_score else "N/A")
    table.add_row("Benchmark", benchmark.summary.overall_position if benchmark else "skipped")
    table.add_row("Markdown", "yes" if state.get("markdown_report") else "no")
    table.add_row("Errors", str(len(state.get("errors", []))))

    console.print(table)
