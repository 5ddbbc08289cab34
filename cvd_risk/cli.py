"""Command Line Interface for the CVD Risk Engine.

This module provides a CLI using Typer for scoring single patients, FHIR
prefetch documents and CSV cohorts with the ACC/AHA Pooled Cohort Equations.

Commands:
    calculate   Score one patient from command-line values
    score       Run the full flow (score + advisories) over a JSON prefetch file
    batch       Score a CSV cohort
    info        Show configuration
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cvd_risk import __version__
from cvd_risk.domain.enums import AdministrativeGender, Race
from cvd_risk.domain.ports import IngestionError
from cvd_risk.domain.risk_models import (
    REDUCE_BP_CARD_ID,
    SCORE_CARD_ID,
    STOP_SMOKING_CARD_ID,
    ClinicalObservationSet,
)
from cvd_risk.domain.services.comparator import compare_risk
from cvd_risk.domain.services.extractor import InputExtractor
from cvd_risk.domain.services.recommendations import should_reduce_blood_pressure
from cvd_risk.infrastructure.logging_config import setup_logging
from cvd_risk.infrastructure.settings import settings
from cvd_risk.main import create_card_sink, process_batch_source, process_prefetch_source

# Initialize Typer app and Rich console
app = typer.Typer(
    name="cvd-risk",
    help="ACC/AHA 10-year cardiovascular risk engine",
    add_completion=False
)
console = Console()

_ADVISORY_LABELS = {
    STOP_SMOKING_CARD_ID: "Stop smoking",
    REDUCE_BP_CARD_ID: "Reduce blood pressure",
}


def _format_risk(value: float) -> str:
    return f"{value:.1f}%"


@app.command()
def calculate(
    sex: AdministrativeGender = typer.Option(..., "--sex", "-s", help="Patient sex", case_sensitive=False),
    age: int = typer.Option(..., "--age", "-a", help="Age in years"),
    total_cholesterol: float = typer.Option(..., "--total-cholesterol", "--tc", help="Total cholesterol (mg/dL)"),
    hdl_cholesterol: float = typer.Option(..., "--hdl", help="HDL cholesterol (mg/dL)"),
    systolic_bp: float = typer.Option(..., "--sbp", help="Systolic blood pressure (mmHg)"),
    race: Race = typer.Option(Race.OTHER, "--race", "-r", help="Race stratum", case_sensitive=False),
    smoker: bool = typer.Option(False, "--smoker/--non-smoker", help="Current smoker"),
    diabetes: bool = typer.Option(False, "--diabetes/--no-diabetes", help="Type 1 or type 2 diabetes"),
    treated: bool = typer.Option(False, "--treated/--untreated", help="On antihypertensive treatment"),
) -> None:
    """Calculate the 10-year risk for one patient.

    Examples:
        cvd-risk calculate --sex male --age 55 --tc 213 --hdl 50 --sbp 120
        cvd-risk calculate --sex female --race black --age 60 --tc 200 --hdl 45 --sbp 150 --treated
    """
    observations = ClinicalObservationSet(
        sex=sex,
        race=race,
        age=age,
        total_cholesterol=total_cholesterol,
        hdl_cholesterol=hdl_cholesterol,
        systolic_bp=systolic_bp,
        smoker=int(smoker),
        diabetes=diabetes,
        treated_hypertension=treated,
    )

    validation = InputExtractor(validate_inputs=settings.validate_inputs).validate(observations)
    if validation.is_failure():
        console.print(f"[red]✗[/red] No risk score: {validation.error}")
        raise typer.Exit(code=1)

    risk = compare_risk(validation.value)

    table = Table(title="ACC/AHA 10-year CVD risk", show_header=True, header_style="bold")
    table.add_column("Score")
    table.add_column("Risk", justify="right")
    table.add_row("Patient", _format_risk(risk.patient_score))
    table.add_row("Healthy reference", _format_risk(risk.healthy_score))
    console.print(table)

    advisories = []
    if smoker:
        advisories.append(_ADVISORY_LABELS[STOP_SMOKING_CARD_ID])
    if should_reduce_blood_pressure(systolic_bp):
        advisories.append(_ADVISORY_LABELS[REDUCE_BP_CARD_ID])
    for advisory in advisories:
        console.print(f"[yellow]⚠[/yellow] Advisory: {advisory}")


@app.command()
def score(
    input_file: Path = typer.Argument(..., help="JSON prefetch file (object or array)", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write emitted cards to a JSON Lines file"),
) -> None:
    """Run the ACC/AHA flow over FHIR prefetch documents.

    Emits the score card and any stop-smoking or reduce-blood-pressure
    advisories for every patient in the file.

    Examples:
        cvd-risk score prefetch.json
        cvd-risk score cohort.json --output cards.jsonl
    """
    sink = create_card_sink(output) if output else None
    try:
        outcomes = process_prefetch_source(str(input_file), sink=sink)
    except IngestionError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)
    finally:
        if sink is not None:
            sink.close()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Patient", style="cyan")
    table.add_column("Patient risk", justify="right")
    table.add_column("Healthy risk", justify="right")
    table.add_column("Advisories")
    table.add_column("Status")

    failure_count = 0
    for index, outcome in enumerate(outcomes):
        patient = outcome.patient_id or f"#{index}"
        advisories = ", ".join(
            _ADVISORY_LABELS[card.card_id] for card in outcome.cards if card.card_id != SCORE_CARD_ID
        )
        if outcome.result.is_success():
            table.add_row(
                patient,
                _format_risk(outcome.result.value.patient_score),
                _format_risk(outcome.result.value.healthy_score),
                advisories,
                "[green]✓[/green]",
            )
        else:
            failure_count += 1
            table.add_row(patient, "-", "-", advisories, f"[red]✗[/red] {outcome.result.error_type}")

    console.print(table)
    if output:
        console.print(f"[dim]Cards written to:[/dim] {output}")

    if failure_count > 0:
        console.print(f"\n[yellow]⚠[/yellow] {failure_count} of {len(outcomes)} patient(s) without a risk score")
        raise typer.Exit(code=1)
    console.print(f"\n[green]✓[/green] Scored {len(outcomes)} patient(s)")


@app.command()
def batch(
    input_file: Path = typer.Argument(..., help="CSV cohort file", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write scored rows to a CSV file"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", "-b", help="Rows per chunk", min=1),
    limit: int = typer.Option(10, "--limit", "-n", help="Rows to preview", min=0),
) -> None:
    """Score a CSV cohort with vectorized Pooled Cohort Equations.

    Examples:
        cvd-risk batch cohort.csv
        cvd-risk batch cohort.csv --output scored.csv --chunk-size 5000
    """
    try:
        scored, failure_count = process_batch_source(str(input_file), chunk_size=chunk_size)
    except IngestionError as e:
        console.print(f"[red]✗[/red] {str(e)}")
        raise typer.Exit(code=1)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        scored.to_csv(output, index=False)

    if len(scored) > 0 and limit > 0:
        preview = Table(show_header=True, header_style="bold")
        id_column = "patient_id" if "patient_id" in scored.columns else None
        preview.add_column(id_column or "Row", style="cyan")
        for column in ("sex", "race", "age"):
            preview.add_column(column)
        preview.add_column("Patient risk", justify="right")
        preview.add_column("Healthy risk", justify="right")
        for index, row in scored.head(limit).iterrows():
            preview.add_row(
                str(row[id_column] if id_column else index),
                str(row["sex"]),
                str(row["race"]),
                f"{row['age']:g}",
                _format_risk(row["patient_risk"]),
                _format_risk(row["healthy_risk"]),
            )
        console.print(preview)

    total_count = len(scored) + failure_count
    console.print("\n[bold]Batch Summary:[/bold]")
    summary_table = Table(show_header=False, box=None, padding=(0, 2))
    summary_table.add_row("Total rows:", f"[bold]{total_count:,}[/bold]")
    summary_table.add_row("Scored:", f"[green]{len(scored):,}[/green]")
    summary_table.add_row("Failed:", f"[red]{failure_count:,}[/red]" if failure_count > 0 else f"{failure_count:,}")
    if len(scored) > 0:
        summary_table.add_row("Mean patient risk:", _format_risk(scored["patient_risk"].mean()))
    if output:
        summary_table.add_row("Output:", str(output))
    console.print(summary_table)

    if failure_count > 0:
        console.print(f"\n[yellow]⚠[/yellow] Batch completed with {failure_count} unscored rows")
        raise typer.Exit(code=1)
    console.print("\n[green]✓[/green] Batch completed successfully")


@app.command()
def info() -> None:
    """Display configuration."""
    console.print("[bold blue]System Information[/bold blue]\n")

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_row("Application:", settings.app_name)
    info_table.add_row("Version:", settings.app_version)
    info_table.add_row("Log Level:", settings.log_level)
    info_table.add_row("JSON Logs:", "Enabled" if settings.log_json else "Disabled")
    info_table.add_row("Input Validation:", "Enabled" if settings.validate_inputs else "Disabled")
    info_table.add_row("Advisories Require Score:", "Yes" if settings.advisories_require_score else "No")
    info_table.add_row("CSV Chunk Size:", str(settings.csv_chunk_size))

    console.print(info_table)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"CVD Risk Engine v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", help="Show version information", callback=_version_callback, is_eager=True
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON log lines"),
) -> None:
    """ACC/AHA 10-year cardiovascular risk engine."""
    setup_logging(
        use_json=log_json or settings.log_json,
        log_level="DEBUG" if verbose else settings.log_level,
    )
    if verbose:
        logging.getLogger(__name__).debug("Verbose logging enabled")


if __name__ == "__main__":
    app()
