from __future__ import annotations

import typer

from stencil_core import __version__

from .util import configure_stdio

app = typer.Typer(help="stencil: render templates with LOOP, IF, NOT and WITH blocks")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"stencil version {__version__}")
        raise typer.Exit()


@app.callback()
def _init(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
):
    configure_stdio()


from .commands import inspect as inspect_cmd  # noqa: E402
from .commands import render as render_cmd  # noqa: E402

app.command(name="render")(render_cmd.render)
app.command(name="check")(inspect_cmd.check)
app.command(name="tree")(inspect_cmd.tree)


def main():
    app()
