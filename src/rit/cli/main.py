"""Main CLI entry point for Rit."""

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from rit.constants import (
    EXIT_DATA_ERROR,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    ROOT_ENV_VAR,
)
from rit.diff.engine import ADDED, REMOVED, STATUS_INITIAL, STATUS_NEW, FileDiff, split_lines
from rit.errors import AlreadyInitializedError, CorruptObjectError, IOFailureError, RitError
from rit.repository import Repository

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="rit",
    help="Minimal local version control for a single working directory",
    add_completion=False,
)


def _exit_code_for(error: RitError) -> int:
    if isinstance(error, IOFailureError):
        return EXIT_SYSTEM_ERROR
    if isinstance(error, CorruptObjectError):
        return EXIT_DATA_ERROR
    return EXIT_USER_ERROR


def _fail(error: RitError) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}", style="red")
    raise typer.Exit(_exit_code_for(error))


def _resolve_user_path(path: str) -> Path:
    """Paths on the command line are relative to the current directory."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return Path.cwd() / candidate


@app.callback()
def configure(
    ctx: typer.Context,
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        envvar=ROOT_ENV_VAR,
        help="Repository root (defaults to the current directory)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log core operations to stderr",
    ),
) -> None:
    """Rit: content-addressed snapshots, a linear history and line diffs."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
            force=True,
        )
    ctx.obj = Repository(root if root is not None else Path.cwd())


@app.command()
def version() -> None:
    """Show Rit version."""
    from rit import __version__
    typer.echo(f"Rit version {__version__}")


@app.command()
def init(
    ctx: typer.Context,
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress output except errors",
    ),
) -> None:
    """Initialize a Rit repository in the repository root."""
    repo: Repository = ctx.obj

    try:
        repo.init()
    except AlreadyInitializedError as e:
        if not quiet:
            console.print(f"[yellow]{escape(str(e))}[/yellow]")
        return
    except RitError as e:
        _fail(e)

    if not quiet:
        success_message = f"""[bold green]✓[/bold green] Initialized Rit repository

[dim]Repository root:[/dim] {escape(str(repo.root))}
[dim]Storage location:[/dim] {escape(str(repo.rit_dir))}

[bold]Next steps:[/bold]
  1. Stage files: [cyan]rit add <file>[/cyan]
  2. Commit them: [cyan]rit commit "Initial snapshot"[/cyan]
  3. Inspect history: [cyan]rit log[/cyan]
"""
        console.print(Panel(success_message, border_style="green", title="Rit Initialized"))


@app.command()
def add(
    ctx: typer.Context,
    paths: List[str] = typer.Argument(..., help="Files to stage"),
) -> None:
    """Add files to the staging area."""
    repo: Repository = ctx.obj

    for path in paths:
        try:
            entry = repo.add(_resolve_user_path(path))
        except RitError as e:
            _fail(e)
        console.print(entry.hash, highlight=False)
        console.print(f"[green]Added[/green] {escape(entry.path)}")


@app.command()
def commit(
    ctx: typer.Context,
    message_arg: Optional[str] = typer.Argument(None, metavar="MESSAGE", help="Commit message"),
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Commit message (alternative to the positional argument)",
    ),
) -> None:
    """Commit staged files as a snapshot."""
    repo: Repository = ctx.obj
    commit_message = message if message is not None else message_arg

    if commit_message is None:
        console.print(
            "[bold red]Error:[/bold red] Commit message is required",
            style="red",
        )
        console.print(
            '  Use [bold]rit commit "your message"[/bold] to provide one',
            style="yellow",
        )
        raise typer.Exit(EXIT_USER_ERROR)

    try:
        staged_count = len(repo.staged())
        commit_hash = repo.commit(commit_message)
    except RitError as e:
        _fail(e)

    if staged_count == 0:
        console.print("[dim]Staging area was empty; recorded an empty commit[/dim]")
    console.print(f"Committed with hash: {commit_hash}", highlight=False)


@app.command()
def log(
    ctx: typer.Context,
    max_count: Optional[int] = typer.Option(
        None,
        "--max-count",
        "-n",
        min=0,
        help="Limit number of commits to show",
    ),
    oneline: bool = typer.Option(
        False,
        "--oneline",
        help="Show each commit on a single line",
    ),
) -> None:
    """Show commit history, newest first."""
    repo: Repository = ctx.obj

    try:
        entries = repo.chain.history(repo.head(), limit=max_count)
    except RitError as e:
        _fail(e)

    if not entries:
        console.print("[dim]No commits yet[/dim]")
        return

    for i, entry in enumerate(entries):
        if oneline:
            first_line = entry.message.split("\n")[0]
            console.print(f"[yellow]{entry.hash[:7]}[/yellow] {escape(first_line)}")
            continue

        console.print(f"[bold yellow]commit {entry.hash}[/bold yellow]")
        if entry.parent:
            console.print(f"[dim]Parent: {entry.parent}[/dim]")
        else:
            console.print("[dim]Parent: (root commit)[/dim]")
        console.print(f"[bold]Date:[/bold]   {escape(entry.timestamp)}")
        console.print()
        for line in entry.message.split("\n"):
            console.print(Text(f"    {line}"))

        if i < len(entries) - 1:
            console.print()


NO_NEWLINE_MARKER = "\\ No newline at end of file"

_LINE_STYLES = {
    ADDED: ("++", "green"),
    REMOVED: ("--", "red"),
}


def _print_line(kind: str, line: str) -> None:
    prefix, style = _LINE_STYLES.get(kind, ("  ", "grey50"))
    if line.endswith("\r\n"):
        text, terminated = line[:-2], True
    elif line.endswith("\n"):
        text, terminated = line[:-1], True
    else:
        text, terminated = line, False

    console.print(Text(prefix + text, style=style))
    if not terminated:
        console.print(Text(NO_NEWLINE_MARKER, style="dim"))


def _print_file_diff(file_diff: FileDiff, show_diff: bool) -> None:
    console.print(f"[bold]File:[/bold] {escape(file_diff.path)}  [dim]{file_diff.hash[:7]}[/dim]")

    if file_diff.status in (STATUS_INITIAL, STATUS_NEW):
        if file_diff.status == STATUS_INITIAL:
            console.print("[dim]Initial commit[/dim]")
        else:
            console.print("[dim]First commit of this file[/dim]")
        if show_diff and file_diff.content:
            console.print("\nFile content:")
            for line in split_lines(file_diff.content):
                _print_line(ADDED, line)
        return

    stats = file_diff.stats()
    console.print(
        f"[green]+{stats['added']}[/green] [red]-{stats['removed']}[/red]"
    )

    if not show_diff or not file_diff.segments:
        return

    console.print("\nDiff:")
    for segment in file_diff.segments:
        for line in segment.lines:
            _print_line(segment.kind, line)


@app.command()
def show(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., help="Commit hash to show"),
    no_diff: bool = typer.Option(
        False,
        "--no-diff",
        help="Only list the files and change counts, without content or diff lines",
    ),
) -> None:
    """Show a commit and its line diff against the parent commit."""
    repo: Repository = ctx.obj

    try:
        commit_diff = repo.show(commit_hash)
    except RitError as e:
        _fail(e)

    commit_record = commit_diff.commit
    console.print(f"[bold yellow]commit {commit_diff.hash}[/bold yellow]")
    console.print(f"[dim]Parent: {commit_record.parent or '(root commit)'}[/dim]")
    console.print(f"[bold]Date:[/bold]   {escape(commit_record.timestamp)}")
    console.print()
    for line in commit_record.message.split("\n"):
        console.print(Text(f"    {line}"))

    if not commit_diff.files:
        console.print("\n[dim]No files in this commit[/dim]")
        return

    for file_diff in commit_diff.files:
        console.print()
        _print_file_diff(file_diff, show_diff=not no_diff)


@app.command()
def status(ctx: typer.Context) -> None:
    """Show HEAD and the files staged for the next commit."""
    repo: Repository = ctx.obj

    try:
        state = repo.load_state()
    except RitError as e:
        _fail(e)

    console.print(f"[bold]HEAD:[/bold] {state.head or '(no commits yet)'}", highlight=False)

    entries = state.index.snapshot()
    if not entries:
        console.print("\n[dim]Nothing staged[/dim]")
        return

    console.print(f"\n[bold green]Staged ({len(entries)}):[/bold green]")
    for entry in entries:
        console.print(f"  [green]+[/green] {escape(entry.path)}  [dim]{entry.hash[:7]}[/dim]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
