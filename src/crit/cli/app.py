"""Main CLI application entry point."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table

from ..config import CritConfig, load_config, save_config
from ..criticism import CriticismStore, PreferenceLog, review_criticism
from ..daemon import analyze_project, start_daemon
from ..models import (
    AnalysisResult,
    Criticism,
    CriticismCategory,
    CriticismSeverity,
    CriticismStatus,
    ProcessResult,
    WatchEvent,
)
from ..paths import crit_exists, ensure_directories, get_config_path

logger = logging.getLogger(__name__)

console = Console()

SEVERITY_STYLES = {
    CriticismSeverity.HIGH: "red",
    CriticismSeverity.MEDIUM: "yellow",
    CriticismSeverity.LOW: "dim",
}


def _configure_logging(level: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if not verbose:
        logging.getLogger("watchdog").setLevel(logging.WARNING)


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project root (default: current directory)",
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    help="Extra config file merged over .crit/config.yaml",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def main(ctx: click.Context, root: Path, config_path: Optional[str], verbose: bool) -> None:
    """
    crit - continuous code criticism for a project directory.

    Watch a project, collect criticisms, and review them:

        crit init
        crit watch
        crit list
        crit reject <id> --reason "intentional"
    """
    root = root.resolve()
    config = load_config(root, config_path)
    _configure_logging(config.log_level, verbose)

    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    ctx.obj["config"] = config


@main.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the .crit directory layout."""
    root: Path = ctx.obj["root"]
    existed = crit_exists(root)

    ensure_directories(root)
    PreferenceLog(root).init()
    if not get_config_path(root).exists():
        save_config(ctx.obj["config"], root)

    if existed:
        console.print(f"[yellow].crit already initialized in {root}[/yellow]")
    else:
        console.print(f"[green]Initialized .crit in {root}[/green]")


@main.command()
@click.pass_context
def analyze(ctx: click.Context) -> None:
    """Run a full analysis and store new criticisms."""
    root: Path = ctx.obj["root"]
    result = asyncio.run(analyze_project(root, ctx.obj["config"]))
    _print_analysis(result)


def _print_analysis(result: AnalysisResult) -> None:
    stats = result.stats
    table = Table(title="Analysis", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Files analyzed", str(stats.files_analyzed))
    table.add_row("Clones", str(stats.clones_found))
    table.add_row("Secrets", str(stats.secrets_found))
    table.add_row("Rule violations", str(stats.rule_violations))
    table.add_row("Unused imports", str(stats.unused_imports))
    table.add_row("Criticisms", str(len(result.criticisms)))
    console.print(table)

    for error in result.degraded:
        where = f" ({error.file})" if error.file else ""
        console.print(f"[red]Analyzer {error.analyzer} failed{where}: {error.message}[/red]")


@main.command()
@click.pass_context
def watch(ctx: click.Context) -> None:
    """Watch the project until interrupted."""
    root: Path = ctx.obj["root"]
    try:
        asyncio.run(_watch(root, ctx.obj["config"]))
    except KeyboardInterrupt:
        console.print("[yellow]Stopped[/yellow]")


async def _watch(root: Path, config: CritConfig) -> None:
    def on_event(event: WatchEvent) -> None:
        console.print(f"[dim]{event.type.value:6}[/dim] {event.path}")

    def on_actions(actions: List[ProcessResult]) -> None:
        for result in actions:
            console.print(f"[cyan]{result.action.value}[/cyan] {result.details}")

    def on_criticisms(count: int) -> None:
        console.print(f"[yellow]{count} criticisms[/yellow] (crit list to review)")

    daemon = await start_daemon(
        root,
        config=config,
        on_event=on_event,
        on_actions=on_actions,
        on_criticisms=on_criticisms,
    )
    console.print(f"[green]Watching {root}[/green] (Ctrl+C to stop)")

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        daemon.stop()
        await daemon.batcher.drain()


@main.command(name="list")
@click.option(
    "--category",
    type=click.Choice([c.value for c in CriticismCategory], case_sensitive=False),
    help="Only show one category",
)
@click.pass_context
def list_criticisms(ctx: click.Context, category: Optional[str]) -> None:
    """Show pending criticisms."""
    store = CriticismStore(ctx.obj["root"])
    if category:
        criticisms = store.get_by_category(category.upper())
    else:
        criticisms = store.get_pending_criticisms()

    if not criticisms:
        console.print("[green]No pending criticisms[/green]")
        return

    console.print(_criticism_table(criticisms))


def _criticism_table(criticisms: List[Criticism]) -> Table:
    table = Table(title=f"Pending criticisms ({len(criticisms)})")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Category")
    table.add_column("Severity")
    table.add_column("Subject")
    table.add_column("Location", style="dim")

    for criticism in criticisms:
        style = SEVERITY_STYLES.get(criticism.severity, "")
        table.add_row(
            criticism.id,
            criticism.category.value,
            f"[{style}]{criticism.severity.value}[/{style}]" if style else criticism.severity.value,
            criticism.subject,
            criticism.location or "",
        )

    return table


def _review(
    ctx: click.Context,
    criticism_id: str,
    decision: CriticismStatus,
    reason: Optional[str],
) -> None:
    criticism = review_criticism(ctx.obj["root"], criticism_id, decision, reason)
    if criticism is None:
        console.print(f"[red]No criticism with id {criticism_id}[/red]")
        sys.exit(1)
    console.print(f"{decision.value.capitalize()}: {criticism.subject}")


@main.command()
@click.argument("criticism_id")
@click.option("--reason", "-r", help="Why the criticism was accepted")
@click.pass_context
def accept(ctx: click.Context, criticism_id: str, reason: Optional[str]) -> None:
    """Accept a criticism."""
    _review(ctx, criticism_id, CriticismStatus.ACCEPTED, reason)


@main.command()
@click.argument("criticism_id")
@click.option("--reason", "-r", help="Why the criticism does not apply")
@click.pass_context
def reject(ctx: click.Context, criticism_id: str, reason: Optional[str]) -> None:
    """Reject a criticism; the same finding is not suggested again."""
    _review(ctx, criticism_id, CriticismStatus.REJECTED, reason)


@main.command()
@click.argument("criticism_id")
@click.pass_context
def skip(ctx: click.Context, criticism_id: str) -> None:
    """Skip a criticism for now."""
    _review(ctx, criticism_id, CriticismStatus.SKIPPED, None)


@main.command()
@click.pass_context
def clean(ctx: click.Context) -> None:
    """Drop accepted and rejected criticisms from the store."""
    removed = CriticismStore(ctx.obj["root"]).clear_resolved()
    console.print(f"Removed {removed} resolved criticisms")
