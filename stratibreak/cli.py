"""Typer CLI interface for Stratibreak."""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from stratibreak.config import get_settings

app = typer.Typer(
    name="stratibreak",
    help="Stratibreak: project gap analysis and severity scoring.",
)

console = Console()

DB_HELP = "Path to the SQLite database file (default: STRATIBREAK_DB_PATH or ~/.stratibreak/stratibreak.db)"


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
) -> None:
    """Stratibreak: project gap analysis and severity scoring."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _open_repo(db: Path | None, must_exist: bool = True):
    """Open the database, creating it unless must_exist is set. Returns (conn, repo)."""
    from stratibreak.db.repository import GapRepository
    from stratibreak.db.schema import create_schema

    db_path = db or get_settings().db_path
    if must_exist and not db_path.exists():
        typer.echo("Error: No database found. Import data first with `stratibreak import`.", err=True)
        raise typer.Exit(1)
    conn = create_schema(db_path)
    return conn, GapRepository(conn)


@app.command(name="import")
def import_cmd(
    path: Path = typer.Argument(..., help="Project snapshot (.json) or Jira search export"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant that owns the imported data"),
    db: Path | None = typer.Option(None, "--db", help=DB_HELP),
) -> None:
    """Import project snapshots or gap lists into the database."""
    from stratibreak.exceptions import StratibreakError
    from stratibreak.ingestion import detect_adapter

    tenant_id = tenant or get_settings().default_tenant
    try:
        adapter = detect_adapter(path)
        result = adapter.parse(path, tenant_id)
    except (FileNotFoundError, StratibreakError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    for warning in result.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    errors = adapter.validate(result)
    if errors:
        for error in errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)

    conn, repo = _open_repo(db, must_exist=False)
    try:
        for project in result.projects:
            repo.save_project(project, source=adapter.source)
            typer.echo(f"Imported project {project.name} ({project.id}), {len(project.goals)} goal(s)")
        if result.gaps:
            # gaps attach to projects imported earlier
            for project_id in sorted({gap.project_id for gap in result.gaps}):
                repo.get_project(project_id, tenant_id)
            repo.save_gaps(result.gaps, tenant_id)
            typer.echo(f"Imported {len(result.gaps)} gap(s)")
    except StratibreakError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)
    finally:
        conn.close()


@app.command()
def projects(
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Only list this tenant's projects"),
    db: Path | None = typer.Option(None, "--db", help=DB_HELP),
) -> None:
    """List imported projects."""
    conn, repo = _open_repo(db)
    try:
        rows = repo.get_projects(tenant)
    finally:
        conn.close()

    if not rows:
        typer.echo("No projects found.")
        return
    table = Table(title="Projects")
    for column in ("ID", "Name", "Tenant", "Status", "Source"):
        table.add_column(column)
    for row in rows:
        table.add_row(row["id"], row["name"], row["tenant_id"], row["status"], row["source"] or "")
    console.print(table)


@app.command()
def analyze(
    project_id: str = typer.Argument(..., help="Project to analyze"),
    tenant: str | None = typer.Option(None, "--tenant", "-t", help="Tenant that owns the project"),
    json_output: bool = typer.Option(False, "--json", help="Output the full result as JSON"),
    db: Path | None = typer.Option(None, "--db", help=DB_HELP),
) -> None:
    """Detect, score and categorize the gaps of a project, and store the run."""
    from stratibreak.engines.analysis import GapAnalysisEngine
    from stratibreak.exceptions import StratibreakError

    conn, repo = _open_repo(db)
    try:
        project = repo.get_project(project_id, tenant)
        result = GapAnalysisEngine().analyze(project)
        run_id = repo.save_analysis_run(result, project.tenant_id)
    except StratibreakError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)
    finally:
        conn.close()

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
        return

    summary = result.summary
    table = Table(title=f"Gap analysis: {project.name}")
    table.add_column("Category")
    table.add_column("Gaps", justify="right")
    table.add_column("By severity")
    table.add_column("Avg confidence", justify="right")
    table.add_column("Root cause")
    for gap_type, metrics in result.category_metrics.items():
        severities = ", ".join(f"{k}: {v}" for k, v in metrics.by_severity.items())
        table.add_row(
            gap_type.value,
            str(metrics.total_count),
            severities,
            f"{metrics.average_confidence:.2f}",
            metrics.primary_root_cause.value,
        )
    console.print(table)
    console.print(
        f"Total gaps: {summary.total_gaps}  Critical: {summary.critical_gaps}  "
        f"High: {summary.high_priority_gaps}"
    )
    console.print(
        f"Most affected: {summary.most_affected_category}  "
        f"Least affected: {summary.least_affected_category}"
    )
    console.print(
        f"Health score: {result.overall_health_score:.1f}  Confidence: {result.confidence:.2f}  "
        f"Run: {run_id}"
    )


@app.command()
def gaps(
    project_id: str = typer.Argument(..., help="Project whose gaps to list"),
    gap_type: str | None = typer.Option(None, "--type", help="Filter by gap type"),
    severity: str | None = typer.Option(None, "--severity", help="Filter by severity"),
    status: str | None = typer.Option(None, "--status", help="Filter by status"),
    tag: list[str] | None = typer.Option(None, "--tag", help="Filter by tag (repeatable, any match)"),
    min_confidence: float | None = typer.Option(None, "--min-confidence", help="Minimum confidence (0-1)"),
    all_runs: bool = typer.Option(False, "--all-runs", help="Include gaps from every run, not just the latest"),
    db: Path | None = typer.Option(None, "--db", help=DB_HELP),
) -> None:
    """List stored gaps for a project, from the latest analysis run by default."""
    from stratibreak.normalization.coerce import to_gap_status, to_gap_type, to_severity_level
    from stratibreak.validation import validate_gap_filter

    filters = {
        "type": to_gap_type(gap_type) or gap_type,
        "severity": to_severity_level(severity) or severity,
        "status": to_gap_status(status) or status,
        "tags": tag or None,
        "min_confidence": min_confidence,
    }
    errors = validate_gap_filter(filters)
    if errors:
        for error in errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)

    conn, repo = _open_repo(db)
    try:
        run_id = None
        if not all_runs:
            latest = repo.get_latest_run(project_id)
            run_id = latest["id"] if latest else None
        found = repo.get_gaps(
            project_id,
            run_id=run_id,
            gap_type=filters["type"],
            severity=filters["severity"],
            status=filters["status"],
            tags=filters["tags"],
            min_confidence=min_confidence,
        )
    finally:
        conn.close()

    if not found:
        typer.echo("No gaps found.")
        return

    table = Table(title=f"Gaps for {project_id}")
    for column in ("Severity", "Type", "Title", "Variance", "Confidence", "Status"):
        table.add_column(column)
    for gap in found:
        table.add_row(
            gap.severity.value,
            gap.type.value,
            gap.title,
            f"{gap.variance * 100:+.1f}%",
            f"{gap.confidence:.2f}" if gap.confidence is not None else "-",
            gap.status.value,
        )
    console.print(table)


@app.command()
def validate(
    file: Path = typer.Argument(..., help="JSON file with a gap object or a list of gaps"),
) -> None:
    """Check gap records against the field-level validation rules."""
    from stratibreak.validation import validate_gap

    if not file.exists():
        typer.echo(f"Error: File not found: {file}", err=True)
        raise typer.Exit(1)
    try:
        raw = json.loads(file.read_text())
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: Invalid JSON in {file.name}: {exc}", err=True)
        raise typer.Exit(1)

    records = raw if isinstance(raw, list) else [raw]
    failed = 0
    for index, record in enumerate(records):
        errors = validate_gap(record)
        if errors:
            failed += 1
            for error in errors:
                typer.echo(f"gap[{index}].{error.field}: {error.message}", err=True)

    typer.echo(f"{len(records) - failed} of {len(records)} gap(s) valid")
    if failed:
        raise typer.Exit(1)


@app.command()
def report(
    project_id: str = typer.Argument(..., help="Project to report on"),
    output: Path = typer.Option(Path("reports"), "--output", "-o", help="Output directory for reports"),
    db: Path | None = typer.Option(None, "--db", help=DB_HELP),
) -> None:
    """Render gap and severity reports from the latest analysis run."""
    from stratibreak.engines.analysis import GapAnalysisEngine
    from stratibreak.exceptions import StratibreakError
    from stratibreak.reports import GapReportGenerator, SeverityReportGenerator

    conn, repo = _open_repo(db)
    try:
        project = repo.get_project(project_id)
        latest = repo.get_latest_run(project_id)
        if latest is None:
            typer.echo(
                f"Error: No analysis found for {project_id}. Run `stratibreak analyze` first.",
                err=True,
            )
            raise typer.Exit(1)
        stored = repo.get_gaps(project_id, run_id=latest["id"])
    except StratibreakError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)
    finally:
        conn.close()

    engine = GapAnalysisEngine()
    result = engine.analyze_gaps(project_id, stored)
    severity = engine.severity_analysis(result)

    output.mkdir(parents=True, exist_ok=True)
    gap_path = output / f"gap_report_{project_id}.txt"
    severity_path = output / f"severity_report_{project_id}.txt"
    gap_path.write_text(GapReportGenerator().render(result, project_name=project.name))
    severity_path.write_text(SeverityReportGenerator().render(severity))

    typer.echo(f"  Generated: {gap_path}")
    typer.echo(f"  Generated: {severity_path}")
