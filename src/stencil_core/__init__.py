"""Stencil Core - Template parsing and rendering library."""

from .__version__ import __version__, __version_info__

from .segments import Assignment, If, Loop, Not, Segment, SegmentTree, Text, Variable, With
from .scope import Scope, ScopeLike
from .parser import parse_template, split_assignments
from .resolver import LOOP_INDEX, Sink, is_truthy, resolve_tree, resolve_tree_str
from .render import render, render_to_string
from .config import ConfigLoader, RenderConfig, parse_assignment
from .errors import (
    ConfigError,
    MissingTerminalError,
    NoAssignmentInWithError,
    NoSuchVariableError,
    ParseError,
    RenderError,
    ShouldBeIntegerError,
    TemplateError,
    TooManyAssignmentsInWithError,
    UnknownBlockError,
    WriterError,
)

__all__ = [
    # Version
    "__version__",
    "__version_info__",
    # Segment tree
    "Assignment",
    "If",
    "Loop",
    "Not",
    "Segment",
    "SegmentTree",
    "Text",
    "Variable",
    "With",
    # Scope
    "Scope",
    "ScopeLike",
    # Parse / resolve
    "parse_template",
    "split_assignments",
    "LOOP_INDEX",
    "Sink",
    "is_truthy",
    "resolve_tree",
    "resolve_tree_str",
    "render",
    "render_to_string",
    # Config
    "ConfigLoader",
    "RenderConfig",
    "parse_assignment",
    # Errors
    "ConfigError",
    "MissingTerminalError",
    "NoAssignmentInWithError",
    "NoSuchVariableError",
    "ParseError",
    "RenderError",
    "ShouldBeIntegerError",
    "TemplateError",
    "TooManyAssignmentsInWithError",
    "UnknownBlockError",
    "WriterError",
]
