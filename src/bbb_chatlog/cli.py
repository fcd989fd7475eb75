"""CLI for bbb-chatlog."""

import logging
import sys
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bbb_chatlog import __version__
from bbb_chatlog.logging import configure_logging
from bbb_chatlog.store import ChatStore

app = typer.Typer(
    name="bbb-chatlog",
    help="Rebuild BigBlueButton chat transcripts from server log lines.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

STDIN_MARKER = Path("-")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"bbb-chatlog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", envvar="BBB_CHATLOG_QUIET", help="Only log warnings"),
    ] = False,
    log_json: Annotated[
        bool,
        typer.Option("--log-json", envvar="BBB_CHATLOG_LOG_JSON", help="Log as JSON lines"),
    ] = False,
) -> None:
    """Rebuild BigBlueButton chat transcripts."""
    configure_logging(level=logging.WARNING if quiet else logging.INFO, json_output=log_json)


def read_lines(files: list[Path] | None) -> Iterator[str]:
    """Yield lines from the given files in order, or from stdin."""
    if not files:
        files = [STDIN_MARKER]
    for path in files:
        if path == STDIN_MARKER:
            # decode stdin the same way as files
            sys.stdin.reconfigure(encoding="utf-8", errors="replace")
            yield from sys.stdin
            continue
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                yield from f
        except OSError as e:
            err_console.print(f"[red]Error: cannot read {escape(str(path))}: {escape(e.strerror or str(e))}[/red]")
            raise typer.Exit(1) from e


def echo_raw(text: str) -> None:
    """Write a line to stdout unchanged, ANSI escapes included."""
    typer.echo(text, color=True)


def ingest(files: list[Path] | None, emit: Callable[[str], None], strict: bool) -> ChatStore:
    """Run the pipeline over the input and return the filled store."""
    from bbb_chatlog.extractor import RequiredFieldError
    from bbb_chatlog.pipeline import process_lines

    store = ChatStore()
    try:
        process_lines(read_lines(files), store, emit, strict=strict)
    except RequiredFieldError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    return store


@app.command()
def report(
    files: Annotated[
        list[Path] | None,
        typer.Argument(help="Log files to read ('-' or none for stdin)"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            envvar="BBB_CHATLOG_STRICT",
            help="Abort on a missing or non-numeric timestamp instead of skipping the line",
        ),
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Print chat messages grouped by session and conversation."""
    from bbb_chatlog.renderer import render_report, report_as_dict

    store = ingest(files, echo_raw, strict)

    if json_output:
        console.print_json(data=report_as_dict(store))
    else:
        typer.echo(render_report(store), nl=False, color=True)


def _discard(_: str) -> None:
    pass


@app.command()
def summary(
    files: Annotated[
        list[Path] | None,
        typer.Argument(help="Log files to read ('-' or none for stdin)"),
    ] = None,
    strict: Annotated[
        bool,
        typer.Option(
            "--strict",
            envvar="BBB_CHATLOG_STRICT",
            help="Abort on a missing or non-numeric timestamp instead of skipping the line",
        ),
    ] = False,
) -> None:
    """Show per-session conversation and message counts."""
    from bbb_chatlog.renderer import summarize

    store = ingest(files, _discard, strict)
    rows = summarize(store)

    if not rows:
        console.print("[yellow]No chat messages found.[/yellow]")
        return

    table = Table("Session", "Started (UTC)", "Conversations", "Messages")
    for row in rows:
        table.add_row(
            escape(row["session"]),
            row["start_time"],
            str(row["conversations"]),
            str(row["messages"]),
        )
    console.print(table)
    console.print(f"Sessions: {len(rows)}")


if __name__ == "__main__":
    app()
