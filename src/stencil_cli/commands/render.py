"""
render.py - Render a template file with variables from flags, files and env.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from stencil_core.config import ConfigLoader
from stencil_core.errors import ConfigError, TemplateError
from stencil_core.render import render_to_string

from ..util import configure_logging, exit_nesting_too_deep, read_template


def render(
    template: Path = typer.Argument(
        ...,
        help="Template file to render",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    var: Optional[List[str]] = typer.Option(
        None, "--var", "-D",
        help="Variable assignment NAME=VALUE (repeatable, wins over files and env)",
    ),
    vars_file: Optional[Path] = typer.Option(
        None, "--vars-file",
        help="TOML or JSON file with a [variables] table",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o",
        help="Write output to this file instead of stdout",
    ),
    env: bool = typer.Option(
        False, "--env/--no-env",
        help="Read variables from STENCIL_VAR_<NAME> environment variables",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Render TEMPLATE and print the result."""
    configure_logging(verbose)

    try:
        config = ConfigLoader.load_effective(vars_file, var or [], use_env=env)
    except ConfigError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    template_text = read_template(template, config.encoding)

    # Rendered in full first so a failed render never leaves a partial output file
    try:
        rendered = render_to_string(template_text, config.variables)
    except TemplateError as e:
        typer.echo(f"❌ {e.get_detailed_message()}", err=True)
        raise typer.Exit(1)
    except RecursionError:
        exit_nesting_too_deep(template)

    if output is None:
        typer.echo(rendered, nl=False)
        return

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered, encoding=config.encoding)
    except OSError as e:
        typer.echo(f"❌ Could not write {output}: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Wrote {output}", err=True)
