"""
llmsedit: inspect and trim llms.txt-style documents by section.

Usage:
  llmsedit [OPTIONS] tree SOURCE
  llmsedit [OPTIONS] dups SOURCE
  llmsedit [OPTIONS] export [OPTIONS] SOURCE OUT

Examples:
  llmsedit tree https://example.com/llms.txt
  llmsedit --approximate dups llms-full.txt
  llmsedit export llms.txt trimmed.txt --exclude section-4 --exclude-group "Examples::3"
  llmsedit -v export llms.txt - --none --include section-0
"""

import logging
from functools import partial

import anyio
import httpx
import typer

from llmsedit._duplicates import format_group_key
from llmsedit._export import write_export
from llmsedit._selection import State
from llmsedit._session import Session
from llmsedit._source import DEFAULT_TIMEOUT
from llmsedit._tokens import DEFAULT_ENCODING, LINE_BREAK_SURCHARGE, load_tokenizer

app = typer.Typer(help=__doc__, no_args_is_help=True)


def setup_logging(verbose: int):
    """Set up logging based on verbosity level."""
    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


@app.callback()
def main(
    ctx: typer.Context,
    encoding: str = typer.Option(
        DEFAULT_ENCODING, envvar="LLMSEDIT_ENCODING", help="tiktoken encoding used for token counts"
    ),
    approximate: bool = typer.Option(
        False,
        "--approximate/--exact",
        envvar="LLMSEDIT_APPROXIMATE",
        help="Use the approximate counter instead of tiktoken",
    ),
    line_break_surcharge: int = typer.Option(
        LINE_BREAK_SURCHARGE,
        envvar="LLMSEDIT_LINE_BREAK_SURCHARGE",
        min=0,
        help="Tokens added per content line",
    ),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, help="Timeout in seconds for URL sources"),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
) -> None:
    setup_logging(verbose)
    ctx.obj = {
        "encoding": encoding,
        "approximate": approximate,
        "line_break_surcharge": line_break_surcharge,
        "timeout": timeout,
    }


def _open(ctx: typer.Context, source: str) -> Session:
    opts = ctx.obj
    session = Session(
        load_tokenizer(opts["encoding"], approximate=opts["approximate"]),
        opts["line_break_surcharge"],
    )
    try:
        anyio.run(partial(session.open, source, timeout=opts["timeout"]))
    except (OSError, UnicodeDecodeError, httpx.HTTPError) as e:
        typer.echo(f"Error loading {source}: {e}", err=True)
        raise typer.Exit(1)
    return session


@app.command("tree", help="Show the section outline with token counts.")
def tree(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Path or http(s) URL of the document"),
) -> None:
    session = _open(ctx, source)
    if not session.document.sections:
        typer.echo("No sections found.")
        return
    typer.echo(session.document.outline(session.selection))


@app.command("dups", help="List titles repeated at least three times at the same level.")
def dups(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Path or http(s) URL of the document"),
) -> None:
    session = _open(ctx, source)
    if not session.groups:
        typer.echo("No significant duplicates found (min. 3 at same level).")
        return
    for group in session.groups:
        typer.echo(f"{format_group_key(group.key)}\t{group}")


@app.command("export", help="Write the selected sections to OUT ('-' for stdout).")
def export(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Path or http(s) URL of the document"),
    out: str = typer.Argument(..., help="Output file, or '-' for stdout"),
    select_none: bool = typer.Option(
        False, "--none", help="Start from nothing selected instead of everything"
    ),
    exclude: list[str] = typer.Option(
        None, "--exclude", "-x", help="Section id to deselect with its subtree"
    ),
    include: list[str] = typer.Option(
        None, "--include", "-i", help="Section id to select with its subtree"
    ),
    exclude_group: list[str] = typer.Option(
        None, "--exclude-group", help='Duplicate group "TITLE::LEVEL" to deselect'
    ),
    include_group: list[str] = typer.Option(
        None, "--include-group", help='Duplicate group "TITLE::LEVEL" to select'
    ),
) -> None:
    session = _open(ctx, source)
    if not session.document.sections:
        typer.echo("No data to export.", err=True)
        raise typer.Exit(1)

    if select_none:
        session.select_all(State.OFF)
    for section_id in exclude or ():
        session.toggle(section_id, State.OFF)
    for section_id in include or ():
        session.toggle(section_id, State.ON)
    for key in exclude_group or ():
        session.toggle_group(key, State.OFF)
    for key in include_group or ():
        session.toggle_group(key, State.ON)

    summary = session.summary()
    if summary.selected_sections == 0:
        typer.echo("No sections selected for export.", err=True)
        raise typer.Exit(1)

    text = session.export()
    if out == "-":
        typer.echo(text, nl=False)
    else:
        write_export(out, text)
    typer.echo(f"Exported {summary}", err=True)


if __name__ == "__main__":
    app()
