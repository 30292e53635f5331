"""Vibecheck CLI - heuristic AI-authorship and effort report for GitHub repositories.

Usage:
    vibecheck analyze <owner/repo-or-url> [options]
    vibecheck analyze https://github.com/facebook/react --no-commits
    vibecheck analyze ghe.example.com/team/service --token $GHE_TOKEN
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import ConfigError, Settings
from .logging import configure_logging
from .models import RepositorySnapshot
from .orchestrator import RepositoryAnalyzer, VibecheckError, parse_repository_ref
from .source import GitHubSourceClient, api_url_for_host

console = Console()


@click.group()
@click.version_option(version=__version__)
def cli():
    """Vibecheck - estimate how much of a repository was written by AI.

    Scores files line by line and commits by message, then estimates
    engineering hours per contributor and per day.
    """
    pass


@cli.command()
@click.argument("target")
@click.option("--token", envvar="GITHUB_TOKEN", default=None, help="GitHub API token (or GITHUB_TOKEN)")
@click.option("--api-url", default=None, help="Override the REST API base URL")
@click.option("--no-commits", is_flag=True, help="Skip commit history analysis")
@click.option("--max-depth", type=int, default=None, help="Directory recursion depth (default 4)")
@click.option("--max-workers", type=int, default=None, help="Concurrent commit-stats requests (default 8)")
@click.option("--marker", default=None, help="Marker keyword to look for (default 'lovable')")
@click.option("--json-only", is_flag=True, help="Output raw JSON to stdout (for piping)")
@click.option("--output", "-O", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write the JSON report to a file")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Also write logs to a file")
def analyze(
    target: str,
    token: str | None,
    api_url: str | None,
    no_commits: bool,
    max_depth: int | None,
    max_workers: int | None,
    marker: str | None,
    json_only: bool,
    output: Path | None,
    verbose: bool,
    log_file: Path | None,
):
    """Analyze a repository and print the authorship report.

    TARGET is a GitHub URL, host/owner/repo, or owner/repo shorthand.

    Examples:

        vibecheck analyze owner/repo

        vibecheck analyze https://github.com/owner/repo --no-commits

        vibecheck analyze owner/repo --json-only > report.json
    """
    configure_logging(verbose=verbose, log_file=log_file)

    try:
        settings = Settings.from_env().with_overrides(
            token=token,
            api_url=api_url,
            max_depth=max_depth,
            max_workers=max_workers,
            marker_keyword=marker,
            include_commit_history=False if no_commits else None,
        )
        identity = parse_repository_ref(target)
    except (ConfigError, VibecheckError) as e:
        raise click.ClickException(str(e))

    if not json_only:
        console.print()
        console.print(Panel.fit(
            f"[bold cyan]Vibecheck v{__version__}[/] - AI Authorship Analyzer",
            border_style="cyan",
        ))

    client = GitHubSourceClient(
        base_url=settings.api_url or api_url_for_host(identity.host),
        token=settings.token,
        timeout=settings.request_timeout,
    )
    analyzer = RepositoryAnalyzer(client, settings=settings)

    with client, Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        console=Console(quiet=True) if json_only else console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting...", total=None)

        def on_progress(status, current, total):
            progress.update(task, description=status[:80], completed=current, total=total)

        try:
            snapshot = analyzer.analyze(target, progress_callback=on_progress)
        except VibecheckError as e:
            raise click.ClickException(str(e))

    if output:
        _write_output(snapshot, output)

    if json_only:
        click.echo(json.dumps(snapshot.to_dict(), indent=2))
        return

    _print_summary(snapshot)
    _print_files(snapshot)
    if snapshot.commit_history is not None:
        _print_commit_history(snapshot)
    elif not no_commits:
        console.print("\n[yellow]Commit history unavailable (see warnings above)[/]")

    if output:
        console.print(f"\n[green]Report written to {output}[/]")


@cli.command()
def version():
    """Show version information."""
    console.print(f"vibecheck-cli v{__version__}")
    console.print("Heuristic AI authorship and effort estimation for Git repositories")


def _print_summary(snapshot: RepositorySnapshot) -> None:
    """Print the repository-level overview."""
    stats = snapshot.overall_stats
    table = Table(title="Repository Analysis", show_header=False, border_style="dim")
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Repository", snapshot.canonical_url)
    if snapshot.is_fork and snapshot.original_url:
        table.add_row("Fork", f"{snapshot.original_url} (analyzing upstream)")
    table.add_row("Branches", str(snapshot.total_branches))
    table.add_row("Files / Analyzed", f"{snapshot.total_files:,} / {snapshot.analyzed_files:,}")
    table.add_row("Lines", f"{stats.total_lines:,}")
    table.add_row("AI lines", f"{stats.ai_lines:,} ({stats.ai_percentage:.1f}%)")
    table.add_row("Human lines", f"{stats.human_lines:,} ({stats.human_percentage:.1f}%)")
    table.add_row("Confidence", f"{stats.overall_confidence:.2f}")
    if snapshot.has_marker_keyword:
        table.add_row("Marker keyword", "[magenta]found[/]")

    console.print(table)


def _print_files(snapshot: RepositorySnapshot, limit: int = 15) -> None:
    """Print the highest-priority files."""
    if not snapshot.files:
        return
    table = Table(title="Files (highest priority first)", border_style="dim")
    table.add_column("Path", style="cyan")
    table.add_column("Language")
    table.add_column("Lines", justify="right")
    table.add_column("AI %", justify="right")

    for f in snapshot.files[:limit]:
        table.add_row(
            f.path,
            f.language,
            str(f.analysis.total_lines),
            f"{f.analysis.ai_percentage:.1f}",
        )
    console.print()
    console.print(table)
    if len(snapshot.files) > limit:
        console.print(f"  [dim]... and {len(snapshot.files) - limit} more files[/]")


def _print_commit_history(snapshot: RepositorySnapshot, limit: int = 10) -> None:
    """Print contributor and timeline rollups."""
    history = snapshot.commit_history
    console.print()
    console.print(Panel.fit(
        f"[bold]{history.total_commits:,} commits[/] | "
        f"AI commits: {history.ai_commit_percentage:.1f}% | "
        f"Estimated effort: {history.total_estimated_hours:.1f}h\n"
        f"Active {history.project_start_date[:10]} to {history.project_end_date[:10]}",
        border_style="green",
        title="Commit History",
    ))

    if history.contributors:
        table = Table(title="Contributors", border_style="dim")
        table.add_column("Name", style="bold")
        table.add_column("Commits", justify="right")
        table.add_column("+/-", justify="right")
        table.add_column("Hours", justify="right")
        table.add_column("AI %", justify="right")
        table.add_column("Days", justify="right")
        for c in history.contributors[:limit]:
            table.add_row(
                c.name,
                str(c.total_commits),
                f"+{c.total_additions}/-{c.total_deletions}",
                f"{c.estimated_hours:.1f}",
                f"{c.ai_commit_percentage:.0f}",
                str(len(c.commit_days)),
            )
        console.print(table)

    if history.timeline:
        table = Table(title="Most recent days", border_style="dim")
        table.add_column("Date")
        table.add_column("Commits", justify="right")
        table.add_column("AI", justify="right")
        table.add_column("Hours", justify="right")
        table.add_column("Authors")
        for day in history.timeline[-limit:]:
            table.add_row(
                day.date,
                str(day.commits),
                str(day.ai_commits),
                f"{day.estimated_hours:.1f}",
                ", ".join(day.contributors),
            )
        console.print(table)


def _write_output(snapshot: RepositorySnapshot, path: Path) -> None:
    """Write the JSON report."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(snapshot.to_dict(), indent=2))


if __name__ == "__main__":
    cli()
