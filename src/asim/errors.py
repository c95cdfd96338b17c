"""
asim Error Hierarchy
====================

This module defines the exception hierarchy and the diagnostic types used
throughout asim. All exceptions inherit from AsimError, allowing callers
to catch every asim-related error with a single except clause.

Exception Hierarchy
-------------------
AsimError (base)
├── CompileError - source text could not be compiled (carries a report)
└── ExecutionError - engine invariant violated at runtime
    └── ExecutionLimitError - tick budget exhausted before halting

Compile-Time Diagnostics
------------------------
Compilation never stops at the first problem. The parser and the resolver
record every problem they find in an ErrorCollector as a PendingError
(kind plus absolute source offsets). Once the pipeline has finished, the
collector is turned into a ParseErrorReport, where every entry carries the
0-based line number, the literal line text and the offsets of the offending
token within that line.

Error messages follow this format:
    line 3: error: not allowed fix number
        STA #5
            ^^
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from asim.assembler.lexer import LineTable


# =============================================================================
# Base Exception Class
# =============================================================================

class AsimError(Exception):
    """
    Base exception for all asim errors.

        try:
            commands = compile(source)
        except AsimError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(Enum):
    """
    Classification of compile-time diagnostics.

    Missing-* kinds mean a required element is absent, Invalid-* kinds mean
    an element is present but malformed, NotAllowed-* kinds mean a valid
    operand form was rejected by the instruction table.
    """

    # Missing
    MISSING_OPERAND = auto()
    MISSING_INSTRUCTION = auto()
    MISSING_LABEL = auto()
    MISSING_PARENTHESIS_CLOSE = auto()

    # Invalid
    INVALID_FIX_NUMBER = auto()
    INVALID_ADDRESS = auto()
    INVALID_INSTRUCTION = auto()
    INVALID_OPERANT = auto()
    INVALID_TOKEN = auto()

    # Not allowed
    NOT_ALLOWED_ADDRESS = auto()
    NOT_ALLOWED_FIX_NUMBER = auto()
    NOT_ALLOWED_LABEL = auto()

    # Labels
    LABEL_REASSIGN = auto()

    # Bounds
    ADDRESS_OUT_OF_RANGE = auto()
    TARGET_OUT_OF_RANGE = auto()

    def __str__(self) -> str:
        """Return human-readable message for error reports."""
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    ErrorKind.MISSING_OPERAND: "missing operand",
    ErrorKind.MISSING_INSTRUCTION: "missing instruction",
    ErrorKind.MISSING_LABEL: "missing label",
    ErrorKind.MISSING_PARENTHESIS_CLOSE: "missing closing parenthesis",
    ErrorKind.INVALID_FIX_NUMBER: "invalid fix number",
    ErrorKind.INVALID_ADDRESS: "invalid address",
    ErrorKind.INVALID_INSTRUCTION: "invalid instruction",
    ErrorKind.INVALID_OPERANT: "invalid operand",
    ErrorKind.INVALID_TOKEN: "unexpected token",
    ErrorKind.NOT_ALLOWED_ADDRESS: "not allowed address",
    ErrorKind.NOT_ALLOWED_FIX_NUMBER: "not allowed fix number",
    ErrorKind.NOT_ALLOWED_LABEL: "not allowed label",
    ErrorKind.LABEL_REASSIGN: "label reassignment not allowed",
    ErrorKind.ADDRESS_OUT_OF_RANGE: "register address out of range",
    ErrorKind.TARGET_OUT_OF_RANGE: "jump target out of range",
}


# =============================================================================
# Source Line Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLine:
    """
    A single line of source text, used for error display.

    Attributes:
        number: Line number (0-indexed)
        text: The literal line text, without its newline
    """
    number: int
    text: str

    def __str__(self) -> str:
        return f"line {self.number}"


@dataclass(frozen=True)
class ParseError:
    """
    One compile-time diagnostic.

    Attributes:
        kind: What went wrong
        line: The affected source line
        start: Offset of the offending token within the line text
        end: Offset one past the offending token within the line text
    """
    kind: ErrorKind
    line: SourceLine
    start: int
    end: int

    def format(self) -> str:
        """
        Format the error with the source line and a caret pointer.

        Example output:
            line 1: error: not allowed fix number
                STA #5
                    ^^
        """
        width = max(self.end - self.start, 1)
        return "\n".join([
            f"{self.line}: error: {self.kind}",
            f"    {self.line.text}",
            " " * (4 + self.start) + "^" * width,
        ])

    def __str__(self) -> str:
        return f"{self.line}: error: {self.kind}"


@dataclass(frozen=True)
class PendingError:
    """An error recorded against absolute source offsets, not yet mapped to a line."""
    kind: ErrorKind
    start: int
    end: int


@dataclass
class ParseErrorReport:
    """
    Ordered batch of diagnostics produced by one compilation.

    Errors appear in the order they were found: parser errors first (in
    source order), then resolver errors.
    """
    errors: list[ParseError] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[ParseError]:
        return iter(self.errors)

    def __bool__(self) -> bool:
        return bool(self.errors)

    def kinds(self) -> list[ErrorKind]:
        """Return the kind of every error, in report order."""
        return [error.kind for error in self.errors]

    def format(self) -> str:
        """
        Format all errors for display.

        Returns:
            Formatted string with every error followed by a summary line
        """
        lines = []
        for error in self.errors:
            lines.append(error.format())
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")
        return "\n".join(lines)


# =============================================================================
# Exceptions
# =============================================================================

class CompileError(AsimError):
    """
    Source text could not be compiled.

    Raised by compile() once the whole program has been checked, so the
    attached report is complete.

    Attributes:
        report: Every diagnostic found in the source
    """

    def __init__(self, report: ParseErrorReport):
        self.report = report
        error_word = "error" if len(report) == 1 else "errors"
        super().__init__(f"compilation failed with {len(report)} {error_word}")


class ExecutionError(AsimError):
    """
    The engine was asked to do something its program cannot support.

    Raised when ticking a halted engine or when a command addresses a
    register outside the register file. The compiler rejects such programs
    at resolve time, so this only happens with hand-built command lists.
    """
    pass


class ExecutionLimitError(ExecutionError):
    """
    A run did not halt within its tick budget.

    Attributes:
        ticks: Number of ticks executed before giving up
    """

    def __init__(self, ticks: int):
        self.ticks = ticks
        super().__init__(f"program did not halt within {ticks} ticks")


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects compile-time errors for batch reporting.

    The parser and resolver use this to continue processing after
    encountering an error, collecting all errors before reporting them
    together.

    Example:
        collector = ErrorCollector()
        collector.add(ErrorKind.MISSING_LABEL, token.start, token.end)

        if collector.has_errors():
            raise CompileError(collector.build_report(source, line_table))
    """

    def __init__(self) -> None:
        self.errors: list[PendingError] = []

    def add(self, kind: ErrorKind, start: int, end: int) -> None:
        """Record an error spanning source offsets [start, end)."""
        self.errors.append(PendingError(kind, start, end))

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def kinds(self) -> list[ErrorKind]:
        return [error.kind for error in self.errors]

    def build_report(self, source: str, line_table: "LineTable") -> ParseErrorReport:
        """
        Map every pending error onto its source line.

        Args:
            source: The compiled source text
            line_table: Line boundaries produced by the lexer

        Returns:
            ParseErrorReport with line-relative offsets
        """
        return ParseErrorReport([
            self._build(error, source, line_table) for error in self.errors
        ])

    @staticmethod
    def _build(error: PendingError, source: str, line_table: "LineTable") -> ParseError:
        number = line_table.index_of(error.start)
        line_start, line_end = line_table.bounds(number)
        text = source[line_start:line_end].rstrip("\r")
        start = min(error.start - line_start, len(text))
        end = min(max(error.end - line_start, start), len(text))
        return ParseError(error.kind, SourceLine(number, text), start, end)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
