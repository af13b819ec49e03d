from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import NoReturn

import typer


def configure_stdio() -> None:
    """Make CLI output robust across Windows console encodings.

    Rendered templates and the status glyphs (✓/❌) may not be encodable in a
    non-UTF8 console encoding (e.g. cp1252); replace unencodable characters
    instead of aborting the command.
    """

    if os.name != "nt":
        return

    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors="replace")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def read_template(path: Path, encoding: str) -> str:
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"❌ Could not read template {path}: {e}", err=True)
        raise typer.Exit(1)


def exit_nesting_too_deep(path: Path) -> NoReturn:
    typer.echo(
        f"❌ {path}: blocks are nested too deeply to process "
        f"(Python recursion limit is {sys.getrecursionlimit()})",
        err=True,
    )
    raise typer.Exit(1)
