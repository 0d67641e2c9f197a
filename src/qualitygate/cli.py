"""
quality-gate CLI - Static checks and review-pipeline verification.

Commands:
    quality-gate [target] [--skip-linters]               Run the gate (default)
    quality-gate insert-canaries <phase> <dir>           Inject canaries
    quality-gate validate-canaries <phase> <dir>         Score and remove canaries
    quality-gate validate-evidence <phase> <dir>         Check checklist completeness
    quality-gate reconcile-votes <dir>                   Cross-phase disagreement report
    quality-gate start-metrics <pipeline> <target>       Begin a metrics run
    quality-gate record-metrics <phase> <found> <fixed> <ms> [target]
    quality-gate report-metrics [target]                 Archive the metrics run
    quality-gate validate-construction <plan> <dir>      Verify planned artifacts exist

Exit code 0 = pass, 1 = fail.
"""

import logging
import random
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .canary import CanarySession
from .config import GateConfig
from .construction import validate_construction as run_construction
from .errors import QualityGateError
from .evidence import validate_evidence as run_evidence
from .gate import run_gate
from .metrics import MetricsSession
from .votes import reconcile_votes as run_reconcile

app = typer.Typer(help="Polyglot quality gate for multi-phase code review pipelines", add_completion=False)
console = Console()
err_console = Console(stderr=True)

DEFAULT_COMMAND = "gate"
GLOBAL_OPTIONS = ("-v", "--verbose")
PASSTHROUGH_OPTIONS = ("--help",)


def _load_config() -> GateConfig:
    try:
        return GateConfig.from_env()
    except QualityGateError as e:
        _fail(str(e))


def _fail(message: str):
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(1)


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Polyglot quality gate for multi-phase code review pipelines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


# =============================================================================
# GATE
# =============================================================================


@app.command()
def gate(
    target: str = typer.Argument(".", help="Project directory to scan"),
    skip_linters: bool = typer.Option(False, "--skip-linters", help="Run pattern checks only"),
):
    """Run linters and pattern checks against a project."""
    config = _load_config()
    root = Path(target).resolve()
    if not root.is_dir():
        _fail(f"Not a directory: {root}")

    console.print(f"\n[bold blue]quality-gate[/bold blue] {root}")
    result = run_gate(root, skip_linters=skip_linters, config=config)

    if not result.languages:
        console.print("[yellow]No recognized source files -- nothing to check[/yellow]")
        return

    console.print(f"Languages: {', '.join(lang.value for lang in result.languages)}\n")

    for language, lint in result.lint_results.items():
        if lint.skipped:
            console.print(f"[dim]{language.value}: skipped ({lint.output})[/dim]")
        elif not lint.passed:
            console.print(f"[bold red]{language.value} linter failed[/bold red]")
            if lint.output:
                console.print(lint.output, markup=False, highlight=False)

    if result.violations:
        table = Table(title=f"{len(result.violations)} violation(s)")
        table.add_column("Location", style="bold")
        table.add_column("Check")
        table.add_column("Message")
        for v in sorted(result.violations):
            table.add_row(escape(v.location), v.check, escape(v.message))
        console.print(table)

    if not result.passed:
        console.print(f"\n[bold red]FAIL[/bold red] {result.issue_count} issue(s)")
        raise typer.Exit(1)
    console.print("[bold green]PASS[/bold green] All checks passed")


# =============================================================================
# CANARIES
# =============================================================================


@app.command("insert-canaries")
def insert_canaries(
    phase: str = typer.Argument(help="Phase that should catch the canaries"),
    target: str = typer.Argument(help="Project directory"),
    seed: int = typer.Option(None, "--seed", help="Seed for reproducible placement"),
):
    """Inject 3-5 synthetic defects into random source files."""
    config = _load_config()
    rng = random.Random(seed) if seed is not None else random.Random()
    try:
        manifest = CanarySession(target, config, rng).insert(phase)
    except QualityGateError as e:
        _fail(str(e))

    for entry in manifest.canaries:
        console.print(f"  {entry.category:<10} {entry.file}:{entry.line}")
    console.print(f"Inserted {len(manifest.canaries)} canaries for phase '{phase}' ({manifest.run_id})")


@app.command("validate-canaries")
def validate_canaries(
    phase: str = typer.Argument(help="Phase that ran since insertion"),
    target: str = typer.Argument(help="Project directory"),
):
    """Report caught/missed canaries, restore files, and delete the manifest."""
    config = _load_config()
    session = CanarySession(target, config)
    try:
        report = session.validate(phase)
    except QualityGateError as e:
        _fail(str(e))

    for outcome in report.outcomes:
        entry = outcome.entry
        where = escape(f"{entry.file}:{entry.line}")
        if outcome.file_removed:
            console.print(f"[green]CAUGHT[/green] {entry.category} in {where} (file removed)")
        elif outcome.caught:
            console.print(f"[green]CAUGHT[/green] {entry.category} in {where}")
        else:
            console.print(f"[red]MISSED[/red] {entry.category} in {where}")

    total = len(report.outcomes)
    if not report.passed:
        console.print(f"\n[bold red]{len(report.missed)}/{total} canaries missed by phase '{report.phase}'[/bold red]")
        raise typer.Exit(1)
    console.print(f"\n[bold green]All {total} canaries caught by phase '{report.phase}'[/bold green]")


# =============================================================================
# EVIDENCE & VOTES
# =============================================================================


@app.command("validate-evidence")
def validate_evidence(
    phase: str = typer.Argument(help="Phase whose checklists to validate"),
    target: str = typer.Argument(help="Project directory"),
):
    """Check each checklist has at least as many rows as the codebase demands."""
    config = _load_config()
    try:
        report = run_evidence(phase, target, config)
    except QualityGateError as e:
        _fail(str(e))

    table = Table(title=f"Evidence: {phase}")
    table.add_column("Checklist", style="bold")
    table.add_column("Rows")
    table.add_column("Status")
    for checklist in report.checklists:
        if not checklist.known:
            table.add_row(checklist.checklist_id, str(checklist.rows), "[dim]no counter[/dim]")
        elif checklist.complete:
            table.add_row(checklist.checklist_id, f"{checklist.rows}/{checklist.expected}", "[green]complete[/green]")
        else:
            table.add_row(
                checklist.checklist_id,
                f"{checklist.rows}/{checklist.expected}",
                f"[red]INCOMPLETE[/red] ({checklist.label})",
            )
    console.print(table)

    if not report.passed:
        console.print(f"\n[bold red]{len(report.incomplete)} checklist(s) incomplete[/bold red]")
        raise typer.Exit(1)
    console.print("\n[bold green]All evidence checklists complete[/bold green]")


@app.command("reconcile-votes")
def reconcile_votes(
    target: str = typer.Argument(help="Project directory"),
):
    """Flag locations where review phases returned different verdicts."""
    config = _load_config()
    report = run_reconcile(target, config)
    console.print(f"Reconciliation: {report.agreements} agreements, {len(report.disagreements)} disagreements")

    if report.passed:
        console.print("[green]No disagreements -- all reviewers agree[/green]")
        return
    for item in report.disagreements:
        verdicts = ", ".join(f"{r.phase}: {r.verdict}" for r in item.reviews)
        console.print(f"  [red]{escape(item.key)}[/red]  {escape(verdicts)}")
    console.print(f"Wrote disagreement report to {report.report_path}")
    raise typer.Exit(1)


# =============================================================================
# METRICS
# =============================================================================


@app.command("start-metrics")
def start_metrics(
    pipeline: str = typer.Argument(help="Pipeline name"),
    target: str = typer.Argument(help="Project directory"),
):
    """Open the active metrics run for a target."""
    try:
        metrics = MetricsSession(target, _load_config()).start(pipeline)
    except QualityGateError as e:
        _fail(str(e))
    console.print(f"Started metrics for '{metrics.pipeline}' ({metrics.run_id})")


@app.command("record-metrics")
def record_metrics(
    phase: str = typer.Argument(help="Phase name"),
    found: int = typer.Argument(help="Issues found"),
    fixed: int = typer.Argument(help="Issues fixed"),
    duration_ms: int = typer.Argument(help="Phase duration in milliseconds"),
    target: str = typer.Argument(".", help="Project directory"),
):
    """Append one phase's numbers to the active metrics run."""
    try:
        MetricsSession(target, _load_config()).record(phase, found, fixed, duration_ms)
    except QualityGateError as e:
        _fail(str(e))
    console.print(f"Recorded '{phase}': {found} found, {fixed} fixed ({duration_ms}ms)")


@app.command("report-metrics")
def report_metrics(
    target: str = typer.Argument(".", help="Project directory"),
):
    """Archive the active metrics run and print its summary."""
    try:
        metrics, archive = MetricsSession(target, _load_config()).report()
    except QualityGateError as e:
        _fail(str(e))

    console.print(f"\nPipeline: {metrics.pipeline} → {metrics.target}")
    for p in metrics.phases:
        console.print(f"  {p.phase}: {p.issues_found} found, {p.issues_fixed} fixed ({p.duration_ms}ms)")
    console.print(f"Total: {metrics.total_found} found, {metrics.total_fixed} fixed")
    console.print(f"[dim]Archived to {archive}[/dim]")


# =============================================================================
# CONSTRUCTION
# =============================================================================


@app.command("validate-construction")
def validate_construction(
    plan: str = typer.Argument(help="Plan document containing ## CONSTRUCTION_CHECKS"),
    project_dir: str = typer.Argument(help="Project directory"),
):
    """Verify every file and export a plan promised actually exists."""
    try:
        report = run_construction(plan, project_dir)
    except QualityGateError as e:
        _fail(str(e))

    if not report.results:
        console.print("[yellow]No construction directives found -- nothing to verify[/yellow]")
        return

    table = Table(title="Construction Checks")
    table.add_column("Directive", style="bold")
    table.add_column("Status")
    for result in report.results:
        status = "[green]found[/green]" if result.found else "[red]MISSING[/red]"
        table.add_row(escape(result.check.describe()), status)
    console.print(table)

    if not report.passed:
        console.print(f"\n[bold red]{len(report.missing)} directive(s) not satisfied[/bold red]")
        raise typer.Exit(1)
    console.print("\n[bold green]All construction checks passed[/bold green]")


# =============================================================================
# VERSION
# =============================================================================


@app.command()
def version():
    """Show quality-gate version."""
    from qualitygate import __version__
    console.print(f"quality-gate v{__version__}")


# =============================================================================
# ENTRY POINT
# =============================================================================


def route_args(argv: list[str]) -> list[str]:
    """Insert the default `gate` command when no subcommand was named.

    `quality-gate ./proj` -> `quality-gate gate ./proj`
    `quality-gate -v --skip-linters` -> `quality-gate -v gate --skip-linters`
    """
    commands = {cmd.name or cmd.callback.__name__.replace("_", "-") for cmd in app.registered_commands}
    args = list(argv)
    for i, arg in enumerate(args):
        if arg in GLOBAL_OPTIONS:
            continue
        if arg in commands or arg in PASSTHROUGH_OPTIONS:
            return args
        return args[:i] + [DEFAULT_COMMAND] + args[i:]
    return args + [DEFAULT_COMMAND]


def main(argv: list[str] | None = None):
    argv = sys.argv[1:] if argv is None else argv
    app(args=route_args(argv), prog_name="quality-gate")


if __name__ == "__main__":
    main()
