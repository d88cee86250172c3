"""
SIC/XE Operand Parser
=====================

This module turns operand text into typed operands and addressing flags.

Operand Kinds
-------------
| Syntax        | Kind      | Example          |
|---------------|-----------|------------------|
| decimal       | integer   | 4096, -1         |
| 0x prefix     | integer   | 0x1000           |
| h suffix      | integer   | 0FFh             |
| register name | register  | A, X, PC, SW     |
| C'...'        | chars     | C'EOF' (data)    |
| X'...'        | hex       | X'F1' (data)     |
| anything else | symbol    | BUFFER           |

Character and hex literals are only meaningful for the BYTE and WORD
directives; instruction operands are always integer, register or symbol.

Addressing Flags
----------------
| Syntax   | Flag      |
|----------|-----------|
| #value   | immediate |
| @value   | indirect  |
| value,X  | indexed   |
| +OP      | extended  |

The pc-relative and base-relative flags are never written in source; the
assembler picks them when relative addressing is enabled.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
import re

from sicxe_sdk.cpu import ArgKind, is_register


# =============================================================================
# Enumerations
# =============================================================================

class OperandKind(Enum):
    """Operand type tag."""
    INTEGER = "integer"
    REGISTER = "register"
    SYMBOL = "symbol"
    CHARS = "char-bytes"
    HEX = "hex-bytes"

    def __str__(self) -> str:
        return self.value


class Flag(Enum):
    """Per-instruction addressing and format flags."""
    EXTENDED = "extended-format"
    INDEXED = "indexed"
    IMMEDIATE = "immediate"
    INDIRECT = "indirect"
    PC_RELATIVE = "pc-relative"
    BASE_RELATIVE = "base-relative"
    SICXE = "sicxe-capable"

    def __str__(self) -> str:
        return self.value


# Flags that do not select the n/i addressing bits
NEUTRAL_FLAGS = frozenset({Flag.EXTENDED, Flag.INDEXED, Flag.SICXE})


# =============================================================================
# Operand
# =============================================================================

@dataclass(frozen=True)
class Operand:
    """
    A typed operand.

    Attributes:
        kind: The operand type
        value: int for INTEGER and HEX, str for REGISTER and SYMBOL,
               bytes for CHARS
    """
    kind: OperandKind
    value: Union[int, str, bytes]

    @classmethod
    def integer(cls, value: int) -> "Operand":
        return cls(OperandKind.INTEGER, value)

    @classmethod
    def register(cls, name: str) -> "Operand":
        return cls(OperandKind.REGISTER, name.upper())

    @classmethod
    def symbol(cls, name: str) -> "Operand":
        return cls(OperandKind.SYMBOL, name.upper())

    @classmethod
    def chars(cls, data: bytes) -> "Operand":
        return cls(OperandKind.CHARS, data)

    @classmethod
    def hex(cls, value: int) -> "Operand":
        return cls(OperandKind.HEX, value)

    @property
    def is_symbol(self) -> bool:
        return self.kind is OperandKind.SYMBOL

    def __str__(self) -> str:
        if self.kind is OperandKind.CHARS:
            return f"C'{self.value.decode('latin-1')}'"
        if self.kind is OperandKind.HEX:
            return f"X'{self.value:X}'"
        return str(self.value)


# =============================================================================
# Numbers
# =============================================================================

DECIMAL_PATTERN = re.compile(r"^[+-]?\d+$")
HEX_PREFIX_PATTERN = re.compile(r"^0[xX]([0-9A-Fa-f]+)$")
HEX_SUFFIX_PATTERN = re.compile(r"^(\d[0-9A-Fa-f]*)[hH]$")
HEX_DIGITS_PATTERN = re.compile(r"^[0-9A-Fa-f]+$")

CHAR_LITERAL_PATTERN = re.compile(r"^[Cc]'(.*)'$")
HEX_LITERAL_PATTERN = re.compile(r"^[Xx]'(.*)'$")


def parse_integer(token: str) -> Optional[int]:
    """
    Parse a decimal or hexadecimal integer.

    Hexadecimal is written with a 0x prefix or an h suffix; the suffix
    form must start with a decimal digit so that names like ACH stay
    symbols.

    Returns:
        The value, or None if the token is not a number
    """
    if DECIMAL_PATTERN.match(token):
        return int(token, 10)
    if match := HEX_PREFIX_PATTERN.match(token):
        return int(match.group(1), 16)
    if match := HEX_SUFFIX_PATTERN.match(token):
        return int(match.group(1), 16)
    return None


def parse_hex_address(token: str) -> Optional[int]:
    """Parse a bare hexadecimal address such as the START operand."""
    if HEX_DIGITS_PATTERN.match(token):
        return int(token, 16)
    return None


# =============================================================================
# Instruction Operands
# =============================================================================

def split_operands(text: str) -> list[str]:
    """Split operand text on commas, dropping surrounding whitespace."""
    if not text.strip():
        return []
    return [part.strip() for part in text.split(",")]


def classify(token: str) -> Operand:
    """Type a bare token as integer, register or symbol."""
    value = parse_integer(token)
    if value is not None:
        return Operand.integer(value)
    if is_register(token):
        return Operand.register(token)
    return Operand.symbol(token)


def parse_operand(token: str) -> tuple[Operand, set[Flag]]:
    """
    Parse one instruction operand token.

    A leading '#' sets the immediate flag and a leading '@' the indirect
    flag; the marker is stripped before typing.

    Returns:
        (operand, flags) where flags holds any addressing markers seen
    """
    flags: set[Flag] = set()
    if token.startswith("#"):
        flags.add(Flag.IMMEDIATE)
        token = token[1:].strip()
    elif token.startswith("@"):
        flags.add(Flag.INDIRECT)
        token = token[1:].strip()
    return classify(token), flags


def accepts(arg: ArgKind, operand: Operand) -> bool:
    """True if an operand may fill an argument slot of the declared kind."""
    if arg is ArgKind.GENERAL:
        return True
    if arg is ArgKind.REGISTER:
        return operand.kind is OperandKind.REGISTER
    return operand.kind is OperandKind.INTEGER


def describe_shape(kinds) -> str:
    """Render a list of kinds as '(a, b)' for diagnostics."""
    return "(" + ", ".join(str(k) for k in kinds) + ")"


# =============================================================================
# Data Literals (BYTE / WORD)
# =============================================================================

def parse_literal(text: str, width: int) -> Operand:
    """
    Parse a BYTE/WORD operand.

    Args:
        text: Operand text
        width: Directive width in bytes (1 for BYTE, 3 for WORD)

    Returns:
        INTEGER, CHARS or HEX operand; anything unrecognised is a SYMBOL

    Raises:
        ValueError: Literal is malformed or does not fit the width
    """
    limit = 1 << (8 * width)

    value = parse_integer(text)
    if value is not None:
        if not -(limit >> 1) <= value < limit:
            raise ValueError(f"{text} does not fit in {width} byte(s)")
        return Operand.integer(value)

    if match := CHAR_LITERAL_PATTERN.match(text):
        content = match.group(1)
        if not content:
            raise ValueError("empty character literal")
        try:
            return Operand.chars(content.encode("latin-1"))
        except UnicodeEncodeError:
            raise ValueError(f"non 8-bit character in {text}") from None

    if match := HEX_LITERAL_PATTERN.match(text):
        digits = match.group(1)
        if not HEX_DIGITS_PATTERN.match(digits):
            raise ValueError(f"invalid hexadecimal literal {text}")
        value = int(digits, 16)
        if value >= limit:
            raise ValueError(f"{text} does not fit in {width} byte(s)")
        return Operand.hex(value)

    return Operand.symbol(text)
