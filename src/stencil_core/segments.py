"""Segment tree node types produced by the parser.

Trees are immutable. ``Text`` nodes keep a reference to the template source
plus an index span instead of a copied substring, so every tree parsed from a
template shares that template's single string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple, Union


@dataclass(frozen=True)
class Text:
    """Literal text: ``source[start:end]``."""

    source: str = field(repr=False)
    start: int
    end: int

    @property
    def value(self) -> str:
        return self.source[self.start:self.end]

    def __len__(self) -> int:
        return self.end - self.start

    def find(self, char: str, start: Optional[int] = None) -> int:
        """Return the absolute source index of ``char`` within the span, or -1.

        ``start`` is an absolute source index; the search begins at the span
        start when omitted.
        """
        return self.source.find(char, self.start if start is None else start, self.end)

    def slice(self, start: int, end: int) -> Text:
        """Return a sub-span using absolute source indices."""
        return Text(self.source, start, end)


@dataclass(frozen=True)
class Variable:
    name: SegmentTree


@dataclass(frozen=True)
class Not:
    operand: SegmentTree


@dataclass(frozen=True)
class If:
    condition: SegmentTree
    body: SegmentTree


@dataclass(frozen=True)
class Loop:
    count: SegmentTree
    body: SegmentTree


@dataclass(frozen=True)
class Assignment:
    """One ``name=value`` pair of a WITH block."""

    name: SegmentTree
    value: SegmentTree


@dataclass(frozen=True)
class With:
    assignments: Tuple[Assignment, ...]
    body: SegmentTree


Segment = Union[Text, Variable, Not, If, Loop, With]


@dataclass(frozen=True)
class SegmentTree:
    """Ordered segments; concatenation order is rendering order."""

    segments: Tuple[Segment, ...] = ()

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __bool__(self) -> bool:
        return bool(self.segments)
