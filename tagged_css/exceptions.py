"""Package-specific exception types."""

from __future__ import annotations


class ExtractionError(ValueError):
    """Base class for errors raised while extracting embedded stylesheets.

    Represents errors encountered while scanning host source or parsing the
    CSS carried by a tagged template.
    """


class HostSyntaxError(ExtractionError):
    """Raised when the host source cannot be scanned.

    Args:
        reason: Short description of the syntax problem.
        line: One-based line where the problem starts.
        column: Zero-based column where the problem starts.
    """

    def __init__(self, reason: str, line: int, column: int):
        self.reason = reason
        self.line = line
        self.column = column
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        return f"{self.reason} at line {self.line}, column {self.column}"


class StylesheetSyntaxError(ExtractionError):
    """Raised when embedded CSS does not follow the stylesheet grammar.

    Positions are reported in the coordinates of the text handed to the
    stylesheet parser.

    Args:
        reason: Short description of the grammar problem.
        line: One-based line of the offending token.
        column: One-based column of the offending token.
        source_name: Optional name of the stylesheet being parsed.
    """

    def __init__(self, reason: str, line: int, column: int, source_name: str | None = None):
        self.reason = reason
        self.line = line
        self.column = column
        self.source_name = source_name
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        location = f"{self.line}:{self.column}"
        if self.source_name:
            location = f"{self.source_name}:{location}"
        return f"{location}: {self.reason}"


class ParseFileError(Exception):
    """Raised when parsing a host source file fails."""
