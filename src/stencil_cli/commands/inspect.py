"""
inspect.py - Parse-only commands: syntax check and segment tree outline.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text as RichText
from rich.tree import Tree

from stencil_core.errors import ParseError
from stencil_core.parser import parse_template
from stencil_core.segments import If, Loop, Not, SegmentTree, Text, Variable, With

from ..util import exit_nesting_too_deep, read_template

console = Console()


def _parse_or_exit(template: Path, encoding: str) -> SegmentTree:
    template_text = read_template(template, encoding)
    try:
        return parse_template(template_text)
    except ParseError as e:
        typer.echo(f"❌ {template}: {e.get_detailed_message()}", err=True)
        raise typer.Exit(1)
    except RecursionError:
        exit_nesting_too_deep(template)


def _add_segments(node: Tree, tree: SegmentTree) -> None:
    """Append one outline node per segment, recursing into nested trees."""
    for segment in tree:
        if isinstance(segment, Text):
            node.add(RichText(f"Text {segment.value!r}"))
        elif isinstance(segment, Variable):
            _add_segments(node.add("Variable"), segment.name)
        elif isinstance(segment, Not):
            _add_segments(node.add("Not"), segment.operand)
        elif isinstance(segment, If):
            branch = node.add("If")
            _add_segments(branch.add("condition"), segment.condition)
            _add_segments(branch.add("body"), segment.body)
        elif isinstance(segment, Loop):
            branch = node.add("Loop")
            _add_segments(branch.add("count"), segment.count)
            _add_segments(branch.add("body"), segment.body)
        elif isinstance(segment, With):
            branch = node.add("With")
            for i, assignment in enumerate(segment.assignments):
                pair = branch.add(f"assignment {i}")
                _add_segments(pair.add("name"), assignment.name)
                _add_segments(pair.add("value"), assignment.value)
            _add_segments(branch.add("body"), segment.body)


def check(
    template: Path = typer.Argument(
        ..., help="Template file to parse", exists=True, dir_okay=False, readable=True
    ),
    encoding: str = typer.Option("utf-8", "--encoding", help="Template file encoding"),
) -> None:
    """Check TEMPLATE for syntax errors without rendering it."""
    tree = _parse_or_exit(template, encoding)
    typer.echo(f"✓ {template}: {len(tree)} segments")


def tree(
    template: Path = typer.Argument(
        ..., help="Template file to parse", exists=True, dir_okay=False, readable=True
    ),
    encoding: str = typer.Option("utf-8", "--encoding", help="Template file encoding"),
) -> None:
    """Print the parsed segment tree of TEMPLATE as an outline."""
    parsed = _parse_or_exit(template, encoding)
    outline = Tree(RichText(str(template)))
    try:
        _add_segments(outline, parsed)
        console.print(outline)
    except RecursionError:
        exit_nesting_too_deep(template)
