"""CLI entry point for the timetable engine."""

import json
import logging
import random
from enum import Enum
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .analysis import analyze_generation
from .apply import InMemoryPeriodRepository, apply_periods
from .config import load_engine_config
from .exceptions import ConfigurationError, SchedulingConflictError
from .exporters import get_exporter, load_preview
from .generator import generate_timetable
from .models import (
    GenerationAnalysis,
    GenerationOptions,
    GenerationPreview,
    TeachableUnit,
    WorkloadStatus,
)
from .templates import TemplateProvider, requires_teacher_assignment
from .utils import minutes_between

app = typer.Typer(
    name="timetable-engine",
    help="Generate, analyze and apply weekly class timetables",
    add_completion=False,
)
console = Console()

DEFAULT_OUTPUT = Path("output/timetable.json")

STATUS_STYLES = {
    WorkloadStatus.LOW: "blue",
    WorkloadStatus.NORMAL: "green",
    WorkloadStatus.HIGH: "yellow",
    WorkloadStatus.OVERLOADED: "red",
}


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    csv = "csv"
    excel = "excel"


def _configure_logging(verbose: bool) -> None:
    """Route engine log records to the console when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_path: Optional[Path]):
    try:
        return load_engine_config(config_path)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _load_preview(input_file: Path) -> GenerationPreview:
    try:
        return load_preview(input_file)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid JSON in {input_file}: {e}")
        raise typer.Exit(1)


@app.command()
def templates(
    category: Annotated[
        Optional[str],
        typer.Argument(help="Institution category: PRIMARY, SECONDARY or TERTIARY"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Engine configuration JSON file"),
    ] = None,
) -> None:
    """Show the daily period template of a category."""
    config = _load_config(config_path)
    slots = TemplateProvider(config).template_for(category)

    table = Table(title=f"Daily template: {category or 'default'}")
    table.add_column("Slot", style="cyan")
    table.add_column("Time", style="green")
    table.add_column("Minutes", style="magenta")
    table.add_column("Type", style="yellow")

    for slot in slots:
        table.add_row(
            slot.label or "",
            f"{slot.start_time}-{slot.end_time}",
            str(minutes_between(slot.start_time, slot.end_time)),
            slot.slot_type.value,
        )

    console.print(table)


@app.command()
def generate(
    input_file: Annotated[
        Path,
        typer.Argument(help="JSON file with category, units, existing_periods and options"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("-o", "--output", help="Output file or directory path"),
    ] = None,
    format: Annotated[
        OutputFormat,
        typer.Option("-f", "--format", help="Output format"),
    ] = OutputFormat.json,
    seed: Annotated[
        Optional[int],
        typer.Option("--seed", help="Random seed for a reproducible timetable"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Engine configuration JSON file"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Show detailed output"),
    ] = False,
) -> None:
    """Generate a timetable preview for one class."""
    _configure_logging(verbose)

    if not input_file.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {input_file}")
        raise typer.Exit(1)

    config = _load_config(config_path)

    try:
        with open(input_file, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid JSON in {input_file}: {e}")
        raise typer.Exit(1)

    category = data.get("category")
    units = [TeachableUnit.from_dict(u) for u in data.get("units", [])]
    if not units:
        console.print(
            "[bold yellow]Warning:[/bold yellow] No subjects or courses found, "
            "add subjects and teachers first"
        )

    options_data = dict(data.get("options", {}))
    options_data.setdefault("requires_teacher_assignment", requires_teacher_assignment(category))
    try:
        options = GenerationOptions.from_dict(options_data)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid options: {e}")
        raise typer.Exit(1)

    template = TemplateProvider(config).template_for(category)
    rng = random.Random(seed) if seed is not None else None

    with console.status("[bold green]Generating timetable..."):
        periods = generate_timetable(
            template,
            units,
            data.get("existing_periods", []),
            options,
            config=config,
            rng=rng,
        )
        analysis = analyze_generation(
            periods, options.requires_teacher_assignment, units, config
        )

    preview = GenerationPreview(
        periods=periods, analysis=analysis, units=units, category=category
    )

    console.print(f"\n[bold]Timetable preview for:[/bold] {input_file.name}")
    _show_analysis(analysis)

    output_path = output or DEFAULT_OUTPUT
    if format == OutputFormat.json and output_path.suffix != ".json":
        output_path = output_path.with_suffix(".json")
    elif format == OutputFormat.excel and output_path.suffix != ".xlsx":
        output_path = output_path.with_suffix(".xlsx")
    elif format == OutputFormat.csv and output_path.suffix:
        output_path = output_path.parent / output_path.stem

    with console.status(f"[bold green]Exporting to {format.value}..."):
        get_exporter(format.value).export(preview, output_path)

    console.print(f"\n[bold green]✓[/bold green] Preview exported to: {output_path}")


@app.command()
def analyze(
    input_file: Annotated[
        Path,
        typer.Argument(help="Preview JSON file (periods and units)"),
    ],
    teachers: Annotated[
        bool,
        typer.Option(
            "--teachers/--no-teachers",
            help="Treat lessons without a teacher as coverage gaps",
        ),
    ] = True,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Engine configuration JSON file"),
    ] = None,
) -> None:
    """Analyze a previously generated preview."""
    if not input_file.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {input_file}")
        raise typer.Exit(1)

    config = _load_config(config_path)
    preview = _load_preview(input_file)
    analysis = analyze_generation(preview.periods, teachers, preview.units, config)

    console.print(f"\n[bold]Analysis of:[/bold] {input_file.name}")
    _show_analysis(analysis)


@app.command("apply")
def apply_command(
    input_file: Annotated[
        Path,
        typer.Argument(help="Approved preview JSON file"),
    ],
    store: Annotated[
        Path,
        typer.Option("--store", help="JSON file holding stored timetables"),
    ],
    school_id: Annotated[str, typer.Option("--school", help="School ID")],
    class_id: Annotated[str, typer.Option("--class", help="Class ID")],
    term_id: Annotated[str, typer.Option("--term", help="Term ID")],
) -> None:
    """Apply an approved preview to the stored timetable of a class."""
    if not input_file.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {input_file}")
        raise typer.Exit(1)

    preview = _load_preview(input_file)
    try:
        repository = InMemoryPeriodRepository.load(store)
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid JSON in {store}: {e}")
        raise typer.Exit(1)

    try:
        result = apply_periods(repository, school_id, class_id, term_id, preview.periods)
    except SchedulingConflictError as e:
        console.print(f"[bold red]Conflict:[/bold red] {e}")
        console.print(
            f"  {e.conflict_type.capitalize()} {e.resource_id} on {e.day} "
            f"{e.start_time}-{e.end_time}"
        )
        console.print("  Reassign the teacher or slot and apply again.")
        # Keep whatever was applied before the conflict
        repository.save(store)
        raise typer.Exit(1)

    repository.save(store)

    if result.is_noop:
        console.print("[bold green]✓[/bold green] Timetable is already up to date")
    else:
        console.print(
            f"[bold green]✓[/bold green] Timetable applied: "
            f"{result.created} created, {result.updated} updated"
        )


def _show_analysis(analysis: GenerationAnalysis) -> None:
    """Show analysis counts, teacher loads and warnings."""
    overview_table = Table(title="Overview", show_header=False)
    overview_table.add_column("Metric", style="cyan")
    overview_table.add_column("Value", style="green")

    overview_table.add_row("Lesson Periods", str(analysis.total_periods))
    overview_table.add_row("With Teacher", str(analysis.assigned_with_teacher))
    overview_table.add_row("Without Teacher", str(analysis.unassigned_teacher))
    overview_table.add_row("Free Periods", str(analysis.free_periods))
    overview_table.add_row("Units Used", str(analysis.units_used))
    overview_table.add_row("Teachers Involved", str(analysis.teachers_involved))

    console.print(overview_table)

    if analysis.teacher_assignments:
        load_table = Table(title="Teacher Loads")
        load_table.add_column("Teacher", style="cyan")
        load_table.add_column("Unit", style="blue")
        load_table.add_column("Periods", style="green")
        load_table.add_column("Total Load", style="magenta")
        load_table.add_column("Status")

        for summary in analysis.teacher_assignments:
            style = STATUS_STYLES[summary.status]
            load_table.add_row(
                summary.teacher_name,
                summary.unit_name,
                str(summary.period_count),
                str(summary.total_load),
                f"[{style}]{summary.status.value}[/{style}]",
            )

        console.print(load_table)

    if analysis.warnings:
        console.print(f"\n[bold yellow]Warnings ({len(analysis.warnings)}):[/bold yellow]")
        for warning in analysis.warnings:
            console.print(f"  [yellow]• {warning}[/yellow]")
    else:
        console.print("\n[bold green]✓ No warnings[/bold green]")


if __name__ == "__main__":
    app()
