"""Command line interface for branch-sweep."""

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich import print
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from branchsweep import __version__
from branchsweep.classifier import plan
from branchsweep.git import DeletionExecutor, RepositoryInspector, open_repository
from branchsweep.logging_config import setup_logging
from branchsweep.models import CleanupOptions, CleanupPlan, CleanupReport, ErrorKind, GitError, RepositoryState

app = typer.Typer(help="Git branch cleanup tool", add_completion=False)
console = Console()

PathOption = Annotated[Path, typer.Option(help="Path to git repository")]
JsonOption = Annotated[bool, typer.Option("--json", help="Print machine-readable JSON")]


def version_callback(value: bool) -> None:
    if value:
        print(f"branch-sweep {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log each deletion"),
    debug: bool = typer.Option(False, "--debug", help="Log every git query"),
    version: Optional[bool] = typer.Option(None, "--version", callback=version_callback, is_eager=True),
) -> None:
    """Prune stale git branches without touching protected ones."""
    setup_logging(verbose=verbose, debug=debug)


def get_repo(path: Path) -> RepositoryInspector:
    """Get repository inspector, exiting when the path is not a repository."""
    try:
        return open_repository(path)
    except GitError as err:
        print(f"[red]Error:[/red] {escape(str(err))}")
        raise typer.Exit(code=1) from err


def split_names(values: Optional[list[str]]) -> list[str]:
    """Flatten repeated and comma-separated ``--protect`` values."""
    names: list[str] = []
    for value in values or []:
        names.extend(name.strip() for name in value.split(",") if name.strip())
    return names


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def create_table(title: str, *columns: str) -> Table:
    """Create a table with the standard look."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    for index, column in enumerate(columns):
        if index == 0:
            table.add_column(column, style="cyan", no_wrap=True)
        else:
            table.add_column(column, justify="center", no_wrap=True)
    return table


def merged_display(repo: RepositoryInspector, branch_name: str) -> str:
    return "[green]yes[/green]" if repo.is_merged(branch_name).value else "[yellow]no[/yellow]"


def show_state(repo: RepositoryInspector, state: RepositoryState) -> None:
    """Print the default branch, current branch and branch tables."""
    current = escape(state.current_branch) if state.current_branch else "[dim](detached)[/dim]"
    console.print(f"Default branch: [bold]{escape(state.default_branch)}[/bold]")
    console.print(f"Current branch: [bold]{current}[/bold]")

    local_table = create_table("Local Branches", "Branch", "Merged")
    for branch_name in state.local_branches:
        display_name = escape(branch_name)
        if branch_name == state.current_branch:
            display_name = f"{display_name} [turquoise2](current)[/turquoise2]"
        local_table.add_row(display_name, merged_display(repo, branch_name))
    console.print(local_table)

    if state.remote_branches:
        remote_table = create_table("Remote Branches", "Branch", "Remote")
        for ref in state.remote_branches:
            remote_table.add_row(escape(ref.name), escape(ref.remote_name or ""))
        console.print(remote_table)


def show_plan(repo: RepositoryInspector, cleanup_plan: CleanupPlan) -> None:
    """Print what a cleanup would delete."""
    protected = ", ".join(escape(name) for name in sorted(cleanup_plan.protected_branches))
    console.print(Panel(f"Protected: [green]{protected}[/green]", title="Branch Cleanup", title_align="left", expand=False))

    if cleanup_plan.local_candidates:
        console.print("Local branches to delete:")
        table = create_table("", "Branch", "Merged")
        for branch_name in cleanup_plan.local_candidates:
            table.add_row(escape(branch_name), merged_display(repo, branch_name))
        console.print(table)

    if cleanup_plan.remote_candidates:
        console.print("Remote branches to delete:")
        table = create_table("", "Branch", "Remote")
        for ref in cleanup_plan.remote_candidates:
            table.add_row(escape(ref.name), escape(ref.remote_name or ""))
        console.print(table)


def show_report(report: CleanupReport, force: bool) -> None:
    """Print deletion failures and the summary counts."""
    if report.skipped:
        table = create_table("Skipped branches", "Branch", "Reason")
        for outcome in report.skipped:
            reason = outcome.message or (outcome.reason.value if outcome.reason else "")
            table.add_row(escape(outcome.branch.full_name), escape(reason))
        console.print()
        console.print(table)

    console.print()
    console.print(f"[green]Deleted:[/green] {len(report.deleted)}")
    console.print(f"[yellow]Skipped:[/yellow] {len(report.skipped)}")
    if not force and any(outcome.reason is ErrorKind.NOT_MERGED for outcome in report.skipped):
        console.print("[dim]Use --force to delete branches that are not merged[/dim]")


@app.command("list")
def list_branches(path: PathOption = Path("."), json_output: JsonOption = False) -> None:
    """List local and remote branches."""
    repo = get_repo(path)
    state = repo.state()

    if json_output:
        echo_json(state.to_dict())
        return

    show_state(repo, state)


@app.command()
def clean(
    path: PathOption = Path("."),
    protect: Optional[list[str]] = typer.Option(
        None, "--protect", "-p", help="Branch names to protect, comma-separated or repeated"
    ),
    remote: bool = typer.Option(False, "--remote", "-r", help="Also delete branches on remotes"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be deleted and stop"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
    force: bool = typer.Option(False, "--force", "-f", help="Force deletion of unmerged branches"),
    json_output: JsonOption = False,
) -> None:
    """Delete every branch except the default, the current and protected ones."""
    if json_output and not (dry_run or yes):
        print("[red]Error:[/red] --json needs --dry-run or --yes")
        raise typer.Exit(code=2)

    repo = get_repo(path)
    options = CleanupOptions(extra_protected=frozenset(split_names(protect)), include_remote=remote)
    cleanup_plan = plan(repo.state(), options)

    if json_output and dry_run:
        echo_json(cleanup_plan.to_dict())
        return

    if cleanup_plan.is_empty:
        if json_output:
            echo_json(CleanupReport().to_dict())
            return
        console.print(Panel("[green]Your branches are clean ✨[/green]", style="green", padding=(0, 2), expand=False))
        return

    if not json_output:
        show_plan(repo, cleanup_plan)

    if dry_run:
        console.print("\n[yellow]Dry run mode[/yellow]: no branches were deleted")
        return

    if not yes:
        console.print()
        confirm = input("Proceed with deletion? [y/N] ")
        if confirm.lower() != "y":
            console.print("\n[yellow]Operation cancelled[/yellow] 🛑")
            return

    report = DeletionExecutor(path).execute(cleanup_plan, force=force)

    if json_output:
        echo_json(report.to_dict())
        return

    show_report(report, force)


if __name__ == "__main__":
    app()
