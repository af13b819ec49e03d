"""Recursive-descent parser turning template text into a segment tree.

Supported syntax:
- ``{{ name }}`` variable reference (the name is itself a sub-template)
- ``{% LOOP count %} ... {%END%}`` repetition, binding ``LOOP_INDEX``
- ``{% IF condition %} ... {%END%}`` conditional inclusion
- ``{% WITH a=1, b=2 %} ... {%END%}`` local bindings
- ``{% NOT value %}`` inline negation (no body)

Block tags (LOOP/IF/WITH and their ``{%END%}``) trim the indentation in front
of them and swallow one newline after their closing delimiter, so they can sit
on lines of their own without leaking whitespace into the output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from .errors import (
    MissingTerminalError,
    NoAssignmentInWithError,
    TooManyAssignmentsInWithError,
    UnknownBlockError,
)
from .segments import Assignment, If, Loop, Not, Segment, SegmentTree, Text, Variable, With

VARIABLE_CLOSE = "}}"
BLOCK_CLOSE = "%}"
END_TAG = "{%END%}"

_START_RE = re.compile(r"(\{\{)|(\{%)")
_BLOCK_NAME_END_RE = re.compile(r" |%\}")


@dataclass(frozen=True)
class _Terminal:
    """Closing sequence a sub-parse scans for; ``text=None`` is end of input."""

    text: Optional[str]

    def find_in(self, source: str, pos: int) -> int:
        if self.text is None:
            return len(source)
        return source.find(self.text, pos)

    def __len__(self) -> int:
        return 0 if self.text is None else len(self.text)

    def __str__(self) -> str:
        return "EOF" if self.text is None else self.text


_EOF = _Terminal(None)
_VARIABLE_CLOSE = _Terminal(VARIABLE_CLOSE)
_BLOCK_CLOSE = _Terminal(BLOCK_CLOSE)
_END_TAG = _Terminal(END_TAG)


class NewlineMode(Enum):
    NONE = "none"
    TRIM_START = "trim_start"


# (position after the construct, the construct, how it treats surrounding whitespace)
_Parsed = Tuple[int, Segment, NewlineMode]


def parse_template(template_text: str) -> SegmentTree:
    """Parse a whole template.

    Raises:
        ParseError: on a missing closing sequence, an unknown block name or a
            malformed WITH assignment list.
    """
    _, tree = _parse_subexpr(template_text, 0, _EOF, NewlineMode.NONE)
    return tree


def _parse_subexpr(
    source: str,
    pos: int,
    terminal: _Terminal,
    newline_mode: NewlineMode,
) -> Tuple[int, SegmentTree]:
    trim = newline_mode is NewlineMode.TRIM_START
    segments: List[Segment] = []

    while True:
        # Only start sequences before the next terminal belong to this sub-expression
        terminal_index = terminal.find_in(source, pos)
        if terminal_index < 0:
            raise MissingTerminalError(str(terminal))

        found = _START_RE.search(source, pos, terminal_index)
        if found is None:
            text_end = _trim_end(source, pos, terminal_index) if trim else terminal_index
            if text_end > pos:
                segments.append(Text(source, pos, text_end))

            pos = terminal_index + len(terminal)
            if trim and source.startswith("\n", pos):
                pos += 1
            return pos, SegmentTree(tuple(segments))

        if found.group(1) is not None:
            next_pos, segment, construct_mode = _parse_variable(source, found.end())
        else:
            next_pos, segment, construct_mode = _parse_block(source, found.end())

        text_end = found.start()
        if construct_mode is NewlineMode.TRIM_START:
            text_end = _trim_end(source, pos, text_end)
        if text_end > pos:
            segments.append(Text(source, pos, text_end))

        segments.append(segment)
        pos = next_pos


def _trim_end(source: str, start: int, end: int) -> int:
    """Move ``end`` back over trailing whitespace other than newlines."""
    while end > start and source[end - 1] != "\n" and source[end - 1].isspace():
        end -= 1
    return end


def _parse_variable(source: str, pos: int) -> _Parsed:
    pos, name = _parse_subexpr(source, pos, _VARIABLE_CLOSE, NewlineMode.NONE)
    return pos, Variable(name), NewlineMode.NONE


def _parse_block(source: str, pos: int) -> _Parsed:
    name_start = pos
    while source.startswith(" ", name_start):
        name_start += 1

    name_end = _BLOCK_NAME_END_RE.search(source, name_start)
    if name_end is None:
        raise MissingTerminalError(BLOCK_CLOSE)

    block_name = source[name_start:name_end.start()]
    block_parser = _BLOCK_PARSERS.get(block_name)
    if block_parser is None:
        raise UnknownBlockError(block_name)

    # A separating space is consumed; a "%}" is left for the block's own sub-parse.
    after_name = name_end.end() if name_end.group() == " " else name_end.start()
    return block_parser(source, after_name)


def _parse_header_and_body(source: str, pos: int) -> Tuple[int, SegmentTree, SegmentTree]:
    pos, header = _parse_subexpr(source, pos, _BLOCK_CLOSE, NewlineMode.TRIM_START)
    pos, body = _parse_subexpr(source, pos, _END_TAG, NewlineMode.TRIM_START)
    return pos, header, body


def _parse_loop(source: str, pos: int) -> _Parsed:
    pos, count, body = _parse_header_and_body(source, pos)
    return pos, Loop(count, body), NewlineMode.TRIM_START


def _parse_if(source: str, pos: int) -> _Parsed:
    pos, condition, body = _parse_header_and_body(source, pos)
    return pos, If(condition, body), NewlineMode.TRIM_START


def _parse_not(source: str, pos: int) -> _Parsed:
    pos, operand = _parse_subexpr(source, pos, _BLOCK_CLOSE, NewlineMode.NONE)
    return pos, Not(operand), NewlineMode.NONE


def _parse_with(source: str, pos: int) -> _Parsed:
    pos, assignment_list = _parse_subexpr(source, pos, _BLOCK_CLOSE, NewlineMode.TRIM_START)
    # Split before parsing the body so a bad assignment list fails first
    assignments = split_assignments(assignment_list)
    pos, body = _parse_subexpr(source, pos, _END_TAG, NewlineMode.TRIM_START)
    return pos, With(assignments, body), NewlineMode.TRIM_START


_BLOCK_PARSERS: Dict[str, Callable[[str, int], _Parsed]] = {
    "LOOP": _parse_loop,
    "IF": _parse_if,
    "NOT": _parse_not,
    "WITH": _parse_with,
}


def split_assignments(tree: SegmentTree) -> Tuple[Assignment, ...]:
    """Split a WITH assignment list into ``(name, value)`` pairs.

    Only literal text is split: a comma or equal sign produced by a nested
    ``{{...}}`` at render time never separates assignments.

    Raises:
        NoAssignmentInWithError: a comma-separated group has no ``=``.
        TooManyAssignmentsInWithError: a group has more than one ``=``.
    """
    groups: List[List[Segment]] = [[]]
    for segment in tree:
        if not isinstance(segment, Text):
            groups[-1].append(segment)
            continue

        start = segment.start
        comma = segment.find(",")
        while comma >= 0:
            if comma > start:
                groups[-1].append(segment.slice(start, comma))
            groups.append([])
            start = comma + 1
            comma = segment.find(",", start)
        if start < segment.end:
            groups[-1].append(segment.slice(start, segment.end))

    return tuple(_split_group(group) for group in groups)


def _split_group(group: List[Segment]) -> Assignment:
    name_parts: List[Segment] = []
    value_parts: List[Segment] = []
    current = name_parts

    for segment in group:
        if isinstance(segment, Text):
            equal = segment.find("=")
            if equal >= 0:
                if current is value_parts or segment.find("=", equal + 1) >= 0:
                    raise TooManyAssignmentsInWithError()
                if equal > segment.start:
                    name_parts.append(segment.slice(segment.start, equal))
                if equal + 1 < segment.end:
                    value_parts.append(segment.slice(equal + 1, segment.end))
                current = value_parts
                continue
        current.append(segment)

    if current is name_parts:
        raise NoAssignmentInWithError()
    return Assignment(SegmentTree(tuple(name_parts)), SegmentTree(tuple(value_parts)))
