"""
SIC/XE Fixed-Column Line Tokenizer
==================================

SIC/XE source is written in fixed columns. Each field lives in an
absolute column range, so the tokenizer slices rather than splitting on
whitespace:

| Columns | Field    | Example   |
|---------|----------|-----------|
| 0-6     | label    | FIRST     |
| 8-13    | operator | +JSUB     |
| 15-34   | operand  | BUFFER,X  |
| 35-     | comment  | read loop |

Column 7 and 14 are separators. Every field is stripped of surrounding
whitespace after slicing; an operand such as C'EOF  ' therefore keeps
its inner spaces.

Comments
--------
A line whose first non-blank character is '.' or ';' is a full-line
comment and is returned whole, without column slicing.

Example
-------
>>> from sicxe_sdk.assembler.lexer import tokenize_line
>>> tokenize_line("FIRST   STL    RETADR             save return", 3)
SourceLine(line=3, label='FIRST', operator='STL', operand='RETADR', comment='save return', ...)
"""

from dataclasses import dataclass
import re

from sicxe_sdk.errors import AssemblySyntaxError, SourceLocation


# =============================================================================
# Column Layout
# =============================================================================

LABEL_COLUMNS = slice(0, 7)
OPERATOR_COLUMNS = slice(8, 14)
OPERAND_COLUMNS = slice(15, 35)
COMMENT_COLUMNS = slice(35, None)

COMMENT_MARKERS = (".", ";")

LABEL_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
OPERATOR_PATTERN = re.compile(r"^\+?[A-Za-z_][A-Za-z0-9_]*$")

# Syntax error codes (see sicxe_sdk.errors.ERROR_MESSAGES)
ERR_LABEL = 0
ERR_OPERATOR = 1

# 1-indexed column where the operand field starts
OPERAND_COLUMN = OPERAND_COLUMNS.start + 1


# =============================================================================
# Tokenized Line
# =============================================================================

@dataclass(frozen=True)
class SourceLine:
    """
    One tokenized source line.

    Attributes:
        line: Line number in the source (1-indexed)
        label: Label field, uppercased ("" if absent)
        operator: Operator field, uppercased, '+' marker kept
        operand: Operand field as written ("" if absent)
        comment: Trailing comment text
        text: The raw line (tabs expanded, newline removed)
        is_comment: True for full-line comments; only `text` is meaningful
    """
    line: int
    label: str
    operator: str
    operand: str
    comment: str
    text: str
    is_comment: bool = False


# =============================================================================
# Tokenizer
# =============================================================================

def is_comment_line(text: str) -> bool:
    """True if the first non-blank character is a comment marker."""
    return text.lstrip().startswith(COMMENT_MARKERS)


def tokenize_line(text: str, line: int, filename: str = "<input>") -> SourceLine:
    """
    Split one raw source line into its four fixed-column fields.

    Args:
        text: Raw source line (trailing newline allowed)
        line: Line number for error reporting
        filename: Source name for error reporting

    Returns:
        The tokenized line

    Raises:
        AssemblySyntaxError: Invalid label (code 0) or operator (code 1)
    """
    text = text.rstrip("\r\n").expandtabs(8)

    if is_comment_line(text):
        return SourceLine(
            line=line, label="", operator="", operand="",
            comment=text.strip(), text=text, is_comment=True,
        )

    label = text[LABEL_COLUMNS].strip()
    operator = text[OPERATOR_COLUMNS].strip()
    operand = text[OPERAND_COLUMNS].strip()
    comment = text[COMMENT_COLUMNS].strip()

    if label and not LABEL_PATTERN.match(label):
        raise AssemblySyntaxError(
            ERR_LABEL, label,
            location=SourceLocation(filename, line, LABEL_COLUMNS.start + 1),
            source_line=text,
        )

    if not OPERATOR_PATTERN.match(operator):
        raise AssemblySyntaxError(
            ERR_OPERATOR, operator,
            location=SourceLocation(filename, line, OPERATOR_COLUMNS.start + 1),
            source_line=text,
        )

    return SourceLine(
        line=line,
        label=label.upper(),
        operator=operator.upper(),
        operand=operand,
        comment=comment,
        text=text,
    )


def format_line(
    label: str = "",
    operator: str = "",
    operand: str = "",
    comment: str = "",
) -> str:
    """
    Lay fields out in their fixed columns (inverse of tokenize_line).

    Handy for generating source text programmatically and in tests.
    """
    text = f"{label:<8}{operator:<7}{operand:<20}{comment}"
    return text.rstrip()
