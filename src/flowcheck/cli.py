"""CLI interface for flowcheck using Typer framework."""

import json as jsonlib
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from flowcheck import __description__, __version__
from flowcheck.config import FlowcheckConfig, LogLevel, StepCategory, ValidationMode, load_config
from flowcheck.constraints import ConfigConstraintProvider
from flowcheck.errors import ConfigError, DocumentLoadError
from flowcheck.models import Flow
from flowcheck.registry import StepTypeRegistry
from flowcheck.validation import ValidateOptions, ValidationResult
from flowcheck.validator import build_framework, load_document, parse_mode

app = typer.Typer(
    name="flowcheck",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

_LOG_LEVELS = {
    LogLevel.ERROR.value: logging.ERROR,
    LogLevel.WARN.value: logging.WARNING,
    LogLevel.INFO.value: logging.INFO,
    LogLevel.DEBUG.value: logging.DEBUG,
    LogLevel.TRACE.value: logging.DEBUG,
}


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"flowcheck version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """flowcheck - Structural validator for declarative workflow definitions."""


def _load_config_or_exit(config: Path | None) -> FlowcheckConfig:
    try:
        return load_config(config)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _configure_logging(config: FlowcheckConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else _LOG_LEVELS.get(config.logging.level, logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _print_markdown(result: ValidationResult, mode: ValidationMode) -> None:
    console.print("# Validation Report")
    console.print(f"**Mode:** {mode.value}")
    console.print(f"**Valid:** {'yes' if result.valid else 'no'}")
    console.print(f"**Exit Code:** {result.exit_code}")
    console.print()

    if result.issues:
        console.print("## Issues")
        for issue in result.issues:
            console.print(f"- **{issue.severity.value.upper()}** {issue.rule} `{escape(issue.path)}`: {escape(issue.message)}")


def _print_table(result: ValidationResult, mode: ValidationMode) -> None:
    status_color = "green" if result.valid else "red"
    status = "VALID" if result.valid else "INVALID"
    console.print(f"[{status_color}]Validation Status: {status}[/{status_color}] ({mode.value} mode)")
    console.print(f"Errors: {len(result.errors)}  Warnings: {len(result.warnings)}")

    if not result.issues:
        console.print("\n[green]No issues found![/green]")
        return

    console.print("\n[blue]Issues Found:[/blue]")
    issues_table = Table()
    issues_table.add_column("Rule", style="cyan")
    issues_table.add_column("Severity", style="white")
    issues_table.add_column("Message", style="white")
    issues_table.add_column("Location", style="dim")

    for issue in result.issues:
        severity_color = "red" if issue.severity.value == "error" else "yellow"
        issues_table.add_row(
            str(issue.rule),
            f"[{severity_color}]{issue.severity.value.upper()}[/{severity_color}]",
            escape(issue.message),
            escape(issue.path)
        )

    console.print(issues_table)


@app.command()
def validate(
    document: Annotated[
        Path,
        typer.Argument(help="Path to a workflow document (JSON)")
    ],
    mode: Annotated[
        Optional[str],
        typer.Option("--mode", "-m", help="Validation mode: strict, lenient (default: from config, else strict)")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json, markdown (default: table)")
    ] = "table",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .flowcheck.json)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging")
    ] = False,
) -> None:
    """Validate a workflow document against the platform constraints."""
    valid_modes = [m.value.lower() for m in ValidationMode]
    valid_formats = ["table", "json", "markdown"]

    if mode is not None and mode.lower() not in valid_modes:
        console.print(f"[red]Error:[/red] Invalid mode '{mode}'. Must be one of: {', '.join(valid_modes)}")
        raise typer.Exit(1)

    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    flowcheck_config = _load_config_or_exit(config)
    _configure_logging(flowcheck_config, verbose)

    try:
        data = load_document(document)
    except DocumentLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    validation_mode = parse_mode(mode or flowcheck_config.validation.default_mode)
    framework = build_framework(flowcheck_config)

    result = framework.validate(Flow.from_document(data), ValidateOptions(mode=validation_mode))

    if format == "json":
        print(jsonlib.dumps(result.to_dict(), indent=2))
    elif format == "markdown":
        _print_markdown(result, validation_mode)
    else:
        _print_table(result, validation_mode)

    raise typer.Exit(result.exit_code)


@app.command()
def constraints(
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: table)")
    ] = "table",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .flowcheck.json)")
    ] = None,
) -> None:
    """Show the effective platform constraints."""
    provider = ConfigConstraintProvider(_load_config_or_exit(config).constraints)

    if format == "json":
        print(jsonlib.dumps(provider.to_dict(), indent=2))
        return
    if format != "table":
        console.print(f"[red]Error:[/red] Unsupported format '{format}' for constraints")
        raise typer.Exit(1)

    table = Table(title="Platform Constraints")
    table.add_column("Constraint", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Max parallel paths", str(provider.get_max_parallel_paths()))
    table.add_row("Max decision outcomes", str(provider.get_max_decision_outcomes()))
    table.add_row("Max branch nesting depth", str(provider.get_max_branch_nesting_depth()))
    table.add_row("Branch must fit single milestone", str(provider.must_branch_fit_single_milestone()))
    table.add_row("Milestones inside branches", str(provider.are_milestones_allowed_in_branches()))
    table.add_row("GOTO allowed inside", ", ".join(provider.get_goto_allowed_containers()))
    table.add_row("GOTO target must be on main path", str(provider.must_goto_target_main_path()))
    table.add_row("TERMINATE allowed inside", ", ".join(provider.get_terminate_allowed_containers()))
    table.add_row("TERMINATE statuses", ", ".join(provider.get_valid_terminate_statuses()))

    console.print(table)


@app.command("step-types")
def step_types(
    category: Annotated[
        Optional[str],
        typer.Option("--category", help="Filter by category: human_action, control, automation")
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .flowcheck.json)")
    ] = None,
) -> None:
    """List the step types known to the registry."""
    registry = StepTypeRegistry.from_config(_load_config_or_exit(config).step_types)

    if category is not None:
        try:
            selected = [StepCategory(category.upper())]
        except ValueError:
            valid = ", ".join(c.value.lower() for c in StepCategory)
            console.print(f"[red]Error:[/red] Invalid category '{category}'. Must be one of: {valid}")
            raise typer.Exit(1)
    else:
        selected = list(StepCategory)

    table = Table(title=f"Known Step Types ({len(registry)} total)")
    table.add_column("Step Type", style="cyan")
    table.add_column("Category", style="yellow")

    for cat in selected:
        for step_type in registry.get_by_category(cat):
            table.add_row(step_type, cat.value)

    console.print(table)


if __name__ == "__main__":
    app()
