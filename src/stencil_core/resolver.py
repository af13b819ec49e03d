"""Tree-walking evaluator that writes a segment tree's output to a sink."""

from __future__ import annotations

import io
import re
from typing import Protocol, Tuple

from .errors import NoSuchVariableError, ShouldBeIntegerError, WriterError
from .scope import Scope
from .segments import Assignment, If, Loop, Not, Segment, SegmentTree, Text, Variable, With

LOOP_INDEX = "LOOP_INDEX"

_COUNT_RE = re.compile(r"\+?[0-9]+")


class Sink(Protocol):
    """Anything with a text ``write`` method (files, ``io.StringIO``, streams)."""

    def write(self, text: str) -> object: ...


def is_truthy(value: str) -> bool:
    """True for any non-empty value other than ``"0"``."""
    return value != "" and value != "0"


def resolve_tree(sink: Sink, tree: SegmentTree, scope: Scope) -> None:
    """Write the output of ``tree`` resolved against ``scope`` to ``sink``.

    Output is written as it is produced; on error, text already written stays
    in the sink.

    Raises:
        NoSuchVariableError: a variable name is bound in no scope layer.
        ShouldBeIntegerError: a LOOP count is not a non-negative integer.
        WriterError: the sink rejected a write.
    """
    for segment in tree:
        _resolve_segment(sink, segment, scope)


def resolve_tree_str(tree: SegmentTree, scope: Scope) -> str:
    """Resolve ``tree`` into a new string."""
    buffer = io.StringIO()
    resolve_tree(buffer, tree, scope)
    return buffer.getvalue()


def _write(sink: Sink, text: str) -> None:
    try:
        sink.write(text)
    except (OSError, ValueError, TypeError) as e:
        raise WriterError(e) from e


def _resolve_segment(sink: Sink, segment: Segment, scope: Scope) -> None:
    if isinstance(segment, Text):
        _write(sink, segment.value)
    elif isinstance(segment, Variable):
        _resolve_variable(sink, segment.name, scope)
    elif isinstance(segment, Not):
        _resolve_not(sink, segment.operand, scope)
    elif isinstance(segment, If):
        _resolve_if(sink, segment.condition, segment.body, scope)
    elif isinstance(segment, Loop):
        _resolve_loop(sink, segment.count, segment.body, scope)
    elif isinstance(segment, With):
        _resolve_with(sink, segment.assignments, segment.body, scope)
    else:
        raise TypeError(f"Unknown segment type: {type(segment).__name__}")


def _resolve_variable(sink: Sink, name: SegmentTree, scope: Scope) -> None:
    var_name = resolve_tree_str(name, scope).strip()
    value = scope.lookup(var_name)
    if value is None:
        raise NoSuchVariableError(var_name)
    _write(sink, value)


def _resolve_not(sink: Sink, operand: SegmentTree, scope: Scope) -> None:
    value = resolve_tree_str(operand, scope).strip()
    _write(sink, "0" if is_truthy(value) else "1")


def _resolve_if(sink: Sink, condition: SegmentTree, body: SegmentTree, scope: Scope) -> None:
    if is_truthy(resolve_tree_str(condition, scope).strip()):
        resolve_tree(sink, body, scope)


def _resolve_loop(sink: Sink, count: SegmentTree, body: SegmentTree, scope: Scope) -> None:
    count_text = resolve_tree_str(count, scope).strip()
    if not _COUNT_RE.fullmatch(count_text):
        raise ShouldBeIntegerError(count_text)

    for index in range(int(count_text)):
        resolve_tree(sink, body, scope.derive({LOOP_INDEX: str(index)}))


def _resolve_with(
    sink: Sink,
    assignments: Tuple[Assignment, ...],
    body: SegmentTree,
    scope: Scope,
) -> None:
    # Each assignment sees the bindings made before it, never its own or later ones
    for assignment in assignments:
        var_name = resolve_tree_str(assignment.name, scope).strip()
        var_value = resolve_tree_str(assignment.value, scope)
        scope = scope.derive({var_name: var_value})
    resolve_tree(sink, body, scope)
