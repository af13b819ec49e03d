"""Public entry points: parse a template, then resolve it against a scope."""

from __future__ import annotations

import io
import logging
from typing import Optional

from .parser import parse_template
from .resolver import Sink, resolve_tree
from .scope import Scope, ScopeLike

logger = logging.getLogger(__name__)


def render(sink: Sink, template_text: str, scope: ScopeLike) -> None:
    """Render ``template_text`` into ``sink``.

    Args:
        sink: Object with a text ``write`` method.
        template_text: Template source.
        scope: A ``Scope`` or a plain mapping of variable names to values.

    Raises:
        ParseError: the template is malformed; nothing has been written.
        RenderError: resolution failed; output written so far is kept.
    """
    tree = parse_template(template_text)
    logger.debug(f"Parsed template ({len(template_text)} chars) into {len(tree)} top-level segments")
    resolve_tree(sink, tree, Scope.coerce(scope))


def render_to_string(template_text: str, variables: Optional[ScopeLike] = None) -> str:
    """Render ``template_text`` and return the output."""
    buffer = io.StringIO()
    render(buffer, template_text, variables if variables is not None else {})
    return buffer.getvalue()
