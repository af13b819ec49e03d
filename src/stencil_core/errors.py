"""Error types raised while parsing and rendering templates.

Every failure is fatal for the current parse or render call. Errors carry the
offending name or text in ``detail`` and a short list of recovery suggestions
for CLI reporting.
"""

from typing import List, Optional


class TemplateError(Exception):
    """Base exception for all template errors."""

    def __init__(self, message: str, detail: Optional[str] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        self.recovery_suggestions = recovery_suggestions or []

    def get_detailed_message(self) -> str:
        """Get the error message followed by numbered recovery suggestions."""
        parts = [str(self)]

        if self.recovery_suggestions:
            parts.append("Recovery suggestions:")
            for i, suggestion in enumerate(self.recovery_suggestions, 1):
                parts.append(f"  {i}. {suggestion}")

        return "\n".join(parts)


class ParseError(TemplateError):
    """Raised when template text cannot be turned into a segment tree."""


class MissingTerminalError(ParseError):
    """Raised when a closing sequence (or end of input) is never found."""

    def __init__(self, terminal: str):
        suggestions = []
        if terminal == "{%END%}":
            suggestions.append("Close every LOOP, IF and WITH block with {%END%}")
        elif terminal == "}}":
            suggestions.append("Close every variable reference with }}")
        elif terminal == "%}":
            suggestions.append("Close every block tag with %}")
        super().__init__(
            f'A "{terminal}" is missing',
            detail=terminal,
            recovery_suggestions=suggestions,
        )
        self.terminal = terminal


class UnknownBlockError(ParseError):
    """Raised when ``{% NAME`` uses a name other than LOOP, IF, NOT or WITH."""

    def __init__(self, name: str):
        super().__init__(
            f'Unknown block "{name}"',
            detail=name,
            recovery_suggestions=[
                "Valid blocks: LOOP, IF, NOT, WITH (case-sensitive)",
                "Follow the block name with a single space or %}",
            ],
        )
        self.name = name


class NoAssignmentInWithError(ParseError):
    """Raised when a WITH assignment group has no equal sign."""

    def __init__(self):
        super().__init__(
            "Expected an equal sign in with block",
            recovery_suggestions=[
                "Write assignments as NAME=VALUE separated by commas",
                "Remove trailing commas from the assignment list",
            ],
        )


class TooManyAssignmentsInWithError(ParseError):
    """Raised when a WITH assignment group has more than one equal sign."""

    def __init__(self):
        super().__init__(
            "Expected only one equal sign in with block",
            recovery_suggestions=[
                "Use one NAME=VALUE pair per comma-separated group",
                "Move values containing '=' into a variable and reference it with {{...}}",
            ],
        )


class RenderError(TemplateError):
    """Raised when a parsed template cannot be resolved against a scope."""


class NoSuchVariableError(RenderError):
    """Raised when a variable lookup misses every scope layer."""

    def __init__(self, name: str):
        super().__init__(
            f'No variable called "{name}" in scope',
            detail=name,
            recovery_suggestions=[
                f"Pass a value for '{name}' (e.g. --var {name}=...)",
                "Bindings made by WITH are only visible inside its body",
            ],
        )
        self.name = name


class ShouldBeIntegerError(RenderError):
    """Raised when a LOOP count is not a non-negative decimal integer."""

    def __init__(self, text: str):
        super().__init__(
            f'Expected an integer, but got "{text}" instead',
            detail=text,
            recovery_suggestions=["LOOP counts must resolve to digits only, e.g. 3"],
        )
        self.text = text


class WriterError(RenderError):
    """Raised when the output sink rejects a write."""

    def __init__(self, original_error: Exception):
        super().__init__("Error writing to output", detail=str(original_error))
        self.original_error = original_error


class ConfigError(TemplateError):
    """Raised when render configuration cannot be loaded or validated."""
