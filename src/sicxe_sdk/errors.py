"""
SIC/XE SDK Error Hierarchy
==========================

This module defines the exception hierarchy for the SIC/XE SDK together
with the numeric error catalog used by the assembler. All exceptions
inherit from SicxeError, allowing callers to catch every SDK-related
error with a single except clause.

Exception Hierarchy
-------------------
SicxeError (base)
├── AssemblerError (assembler-related)
│   ├── AssemblySyntaxError - malformed label or operator field
│   ├── UnknownOperatorError - mnemonic not in opcode or directive table
│   ├── InvalidExtendFlagError - '+' used on an opcode without format 4
│   ├── DirectiveError - structural error in a directive (START, RESW, ...)
│   ├── DuplicateSymbolError - label defined more than once
│   ├── UnresolvedSymbolError - reference to a label that was never defined
│   ├── OperandValidationError - operand count/type mismatch
│   ├── DisplacementError - target not reachable with a 12-bit displacement
│   ├── PhaseError - passes run out of order
│   └── TooManyErrors - error limit reached
└── (reserved for future tools)

Error Catalog
-------------
Every assembler error carries a small integer code. The message text for
each code lives in ERROR_MESSAGES; codes 0-4 are the classic SIC assembler
codes, the rest cover the errors the SDK adds on top of them.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
              ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Error Catalog
# =============================================================================

ERROR_MESSAGES: dict[int, str] = {
    0: "invalid label syntax",
    1: "invalid operator syntax",
    2: "START directive requires a label",
    3: "START directive requires an operand",
    4: "START operand is not a hexadecimal address",
    5: "unknown operator",
    6: "operator does not support extended format",
    7: "invalid directive operand",
    8: "duplicate symbol",
    9: "unresolved symbol",
    10: "operand mismatch",
    11: "displacement out of range",
}


def error_message(code: int) -> str:
    """Look up the catalog text for an error code."""
    return ERROR_MESSAGES.get(code, f"error {code}")


# =============================================================================
# Base Exception Class
# =============================================================================

class SicxeError(Exception):
    """
    Base exception for all SIC/XE SDK errors.

        try:
            assembler.assemble_file("copy.asm")
        except SicxeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        if self.column:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SicxeError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        code: Numeric error code from ERROR_MESSAGES (None if not catalogued)
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    code: Optional[int] = None

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        code: Optional[int] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def line(self) -> Optional[int]:
        """Source line number, if known."""
        return self.location.line if self.location else None

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            copy.asm:4:16: error: unresolved symbol 'RETADX'
                FIRST   STL    RETADX
                               ^
            hint: did you mean 'RETADR'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Malformed label or operator field.

    Code 0 is an invalid label, code 1 an invalid operator. Labels must
    start with a letter or underscore; operators may additionally carry a
    leading '+' to request the extended format.
    """

    def __init__(
        self,
        code: int,
        text: str = "",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        message = error_message(code)
        if text:
            message = f"{message} '{text}'"
        super().__init__(
            message, location=location, source_line=source_line, code=code
        )


class UnknownOperatorError(AssemblerError):
    """Mnemonic found in neither the opcode table nor the directive set."""

    code = 5

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        super().__init__(
            f"{error_message(self.code)} '{operator}'",
            location=location,
            source_line=source_line,
        )


class InvalidExtendFlagError(AssemblerError):
    """
    Extended-format marker on an instruction without a format 4 encoding.

    Example:
        +ADDR  A,S   ; ADDR is format 2 only
    """

    code = 6

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        formats: tuple[int, ...] = (),
    ):
        self.mnemonic = mnemonic
        hint = None
        if formats:
            hint = f"{mnemonic} supports format {'/'.join(str(f) for f in formats)}"
        super().__init__(
            f"{error_message(self.code)} '+{mnemonic}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DirectiveError(AssemblerError):
    """
    Error in an assembler directive.

    Codes 2-4 are the START checks (missing label, missing operand,
    operand not hexadecimal); code 7 covers bad RESW/RESB counts and
    malformed data literals.
    """

    def __init__(
        self,
        code: int,
        detail: str = "",
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        message = error_message(code)
        if detail:
            message = f"{message}: {detail}"
        super().__init__(
            message, location=location, source_line=source_line, code=code
        )


class DuplicateSymbolError(AssemblerError):
    """
    Label defined more than once.

    The first definition is kept in the symbol table.
    """

    code = 8

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_line: Optional[int] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_line = original_line

        hint = None
        if original_line is not None:
            hint = f"'{symbol}' was first defined on line {original_line}"

        super().__init__(
            f"{error_message(self.code)} '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnresolvedSymbolError(AssemblerError):
    """
    Reference to a symbol that no statement defines.

    Raised during the second pass. Similar symbol names are offered as a
    hint to catch typos.
    """

    code = 9

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        if not hint and self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"{error_message(self.code)} '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class OperandValidationError(AssemblerError):
    """
    Operand count or type mismatch.

    The parser never raises this: it marks the statement invalid and keeps
    it. The driver only collects one of these when strict operand checking
    is enabled.
    """

    code = 10

    def __init__(
        self,
        diagnostic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.diagnostic = diagnostic
        super().__init__(
            f"{error_message(self.code)}: {diagnostic}",
            location=location,
            source_line=source_line,
        )


class DisplacementError(AssemblerError):
    """
    Target address not reachable from a format 3 instruction.

    Only raised when relative addressing is enabled. The hint suggests
    the extended format, which carries a full 20-bit address.
    """

    code = 11

    def __init__(
        self,
        mnemonic: str,
        target: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.target = target
        super().__init__(
            f"{error_message(self.code)}: {mnemonic} target {target:06X}",
            location=location,
            hint=f"use +{mnemonic} for a 20-bit address",
            source_line=source_line,
        )


class PhaseError(AssemblerError):
    """A pass was requested before the pass it depends on has run."""
    pass


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The assembler keeps going after a bad line so that every problem in a
    source file is reported in one run.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(UnknownOperatorError("FOOBAR", location))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.warnings: list[str] = []
        self.max_errors = max_errors

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"too many errors ({self.max_errors}), stopping")

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()


class TooManyErrors(AssemblerError):
    """Raised when the error limit has been reached."""

    def __init__(self, message: str = "too many errors"):
        super().__init__(message)
