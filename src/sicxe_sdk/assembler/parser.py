"""
SIC/XE Statement Model and Parser
=================================

This module converts tokenized source lines into statements. Each
statement knows its own size and, once symbols are resolved, its own
object code.

Statement Types
---------------
The set of statement kinds is closed:

1. **Instruction**: a machine instruction
   ```
   FIRST   STL    RETADR
           +JSUB  RDREC
           LDCH   BUFFER,X
   ```

2. **Directive**: an assembler directive
   ```
   COPY    START  1000
   EOF     BYTE   C'EOF'
   BUFFER  RESB   4096
   ```

3. **Comment**: a full-line comment
   ```
   . read record into buffer
   ```

Format Selection
----------------
| Source         | Opcode formats | Chosen format |
|----------------|----------------|---------------|
| +OP            | includes 4     | 4 (extended)  |
| +OP            | no 4           | error         |
| OP             | several        | 3             |
| OP             | single         | that one      |

Encoding
--------
Format 3 and 4 set the low two bits of the opcode byte from the
addressing flags:

| Flags                              | n i |
|------------------------------------|-----|
| immediate                          | 0 1 |
| indirect                           | 1 0 |
| pc-relative / base-relative        | 1 1 |
| none (plain address)               | 0 0 |

and OR the x/b/p/e flag bits into the address field (0x8000/0x4000/
0x2000/0x1000 for format 3, shifted left 8 for format 4).
"""

from dataclasses import dataclass, field
from typing import Optional

from sicxe_sdk.errors import (
    AssemblerError,
    DirectiveError,
    InvalidExtendFlagError,
    SourceLocation,
    UnknownOperatorError,
)
from sicxe_sdk.assembler.lexer import OPERAND_COLUMN, SourceLine, tokenize_line
from sicxe_sdk.assembler.operands import (
    NEUTRAL_FLAGS,
    Flag,
    Operand,
    OperandKind,
    accepts,
    classify,
    describe_shape,
    parse_hex_address,
    parse_literal,
    parse_operand,
    split_operands,
)
from sicxe_sdk.cpu import (
    DATA_DIRECTIVES,
    DATA_WIDTH,
    FORMAT_SIZES,
    RESERVE_DIRECTIVES,
    ArgKind,
    OpcodeInfo,
    get_opcode,
    get_register,
    is_directive,
    is_valid_instruction,
)


# Address field bits for the x/b/p/e flags, per format
FLAG_BITS: dict[int, dict[Flag, int]] = {
    3: {
        Flag.EXTENDED: 0x1000,
        Flag.PC_RELATIVE: 0x2000,
        Flag.BASE_RELATIVE: 0x4000,
        Flag.INDEXED: 0x8000,
    },
    4: {
        Flag.EXTENDED: 0x100000,
        Flag.PC_RELATIVE: 0x200000,
        Flag.BASE_RELATIVE: 0x400000,
        Flag.INDEXED: 0x800000,
    },
}

ADDRESS_MASK = {3: 0xFFF, 4: 0xFFFFF}
FIELD_DIGITS = {3: 4, 4: 6}

# Directive error codes (see sicxe_sdk.errors.ERROR_MESSAGES)
ERR_START_LABEL = 2
ERR_START_OPERAND = 3
ERR_START_HEX = 4
ERR_OPERAND = 7


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all statements.

    Attributes:
        location: Source location (line number is location.line)
        offset: Address assigned in pass 1; fixed once set
        label: Label text, uppercased ("" if none)
        operator: Operator as written, uppercased ('+' kept)
        operands: Typed operands
        operand_text: Operand field as written (for listings)
        comment: Trailing comment
    """
    location: SourceLocation
    offset: int = 0
    label: str = ""
    operator: str = ""
    operands: list[Operand] = field(default_factory=list)
    operand_text: str = ""
    comment: str = ""

    def __setattr__(self, name, value):
        if name == "offset" and "offset" in self.__dict__:
            raise AttributeError("statement offset is fixed once assigned")
        super().__setattr__(name, value)

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def size(self) -> int:
        raise NotImplementedError

    def assemble(self) -> str:
        """Object code for this statement as uppercase hex digits."""
        raise NotImplementedError


@dataclass
class Instruction(Statement):
    """
    Machine instruction.

    Attributes:
        opcode: Opcode table entry
        format: Chosen instruction format (1-4)
        flags: Addressing and format flags
        references: Names of symbols the operands referred to when parsed
        valid: False if operands do not match the declared argument kinds
        diagnostic: Expected vs actual operand shape when not valid
        displacement: Relative displacement chosen in pass 2, if any
    """
    opcode: Optional[OpcodeInfo] = None
    format: int = 3
    flags: set[Flag] = field(default_factory=set)
    references: tuple[str, ...] = ()
    valid: bool = True
    diagnostic: str = ""
    displacement: Optional[int] = None

    @property
    def mnemonic(self) -> str:
        return self.operator.lstrip("+")

    @property
    def size(self) -> int:
        return FORMAT_SIZES[self.format]

    @property
    def target(self) -> int:
        """Address/value carried by the first operand (0 if unresolved)."""
        if not self.operands:
            return 0
        operand = self.operands[0]
        if operand.kind is OperandKind.INTEGER:
            return operand.value
        if operand.kind is OperandKind.REGISTER:
            return get_register(operand.value)
        return 0

    def addressing_bits(self) -> int:
        """The n/i bits for the low two bits of the opcode byte."""
        if Flag.IMMEDIATE in self.flags:
            return 0b01
        if Flag.INDIRECT in self.flags:
            return 0b10
        if self.flags - NEUTRAL_FLAGS:
            return 0b11
        return 0b00

    def assemble(self) -> str:
        code = self.opcode.code

        if self.format == 1:
            return f"{code:02X}"

        if self.format == 2:
            nibbles = [self._register_nibble(op) for op in self.operands[:2]]
            nibbles += [0] * (2 - len(nibbles))
            return f"{code:02X}{nibbles[0] << 4 | nibbles[1]:02X}"

        code = (code & 0xFC) | self.addressing_bits()
        address = self.target if self.displacement is None else self.displacement
        address &= ADDRESS_MASK[self.format]
        for flag, bit in FLAG_BITS[self.format].items():
            if flag in self.flags:
                address |= bit
        return f"{code:02X}{address:0{FIELD_DIGITS[self.format]}X}"

    @staticmethod
    def _register_nibble(operand: Operand) -> int:
        if operand.kind is OperandKind.REGISTER:
            return get_register(operand.value)
        if operand.kind is OperandKind.INTEGER:
            return operand.value & 0xF
        return 0


@dataclass
class Directive(Statement):
    """
    Assembler directive (START, END, RESW, RESB, BYTE, WORD, BASE, NOBASE).

    Attributes:
        value: Start address for START, reserve count for RESW/RESB
    """
    value: int = 0

    @property
    def name(self) -> str:
        return self.operator

    @property
    def is_reserve(self) -> bool:
        return self.operator in RESERVE_DIRECTIVES

    @property
    def size(self) -> int:
        if self.operator == "START":
            return self.value
        if self.operator == "RESW":
            return self.value * 3
        if self.operator == "RESB":
            return self.value
        if self.operator in DATA_DIRECTIVES:
            operand = self.operands[0]
            if operand.kind is OperandKind.CHARS:
                return len(operand.value)
            return DATA_WIDTH[self.operator]
        return 0

    def assemble(self) -> str:
        if self.operator not in DATA_DIRECTIVES:
            return ""
        operand = self.operands[0]
        if operand.kind is OperandKind.CHARS:
            return operand.value.hex().upper()
        if operand.kind is OperandKind.SYMBOL:
            return "00" * self.size
        value = operand.value & ((1 << (8 * self.size)) - 1)
        return f"{value:0{self.size * 2}X}"


@dataclass
class Comment(Statement):
    """Full-line comment; never occupies memory."""

    @property
    def content(self) -> str:
        return self.comment

    @property
    def size(self) -> int:
        return 0

    def assemble(self) -> str:
        return ""


# =============================================================================
# Per-line Parse Result
# =============================================================================

@dataclass
class ParseResult:
    """
    Outcome of parsing one line: a statement or the error that stopped it.
    """
    line: int
    statement: Optional[Statement] = None
    error: Optional[AssemblerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Parser
# =============================================================================

class Parser:
    """
    Line parser for SIC/XE source.

    The parser is stateless apart from the filename: the caller supplies
    the program counter for each line, since only the driver knows it.
    """

    def __init__(self, filename: str = "<input>"):
        self.filename = filename

    def parse_line(self, text: str, line: int, offset: int) -> Statement:
        """
        Parse one source line into a statement placed at `offset`.

        Raises:
            AssemblySyntaxError: Malformed label or operator
            UnknownOperatorError: Operator is neither an opcode nor a directive
            InvalidExtendFlagError: '+' on an opcode without format 4
            DirectiveError: Structural error in a directive
        """
        source = tokenize_line(text, line, self.filename)

        if source.is_comment:
            return Comment(
                location=SourceLocation(self.filename, line, 1),
                offset=offset,
                comment=source.comment,
            )

        mnemonic = source.operator.lstrip("+")
        if is_valid_instruction(mnemonic):
            return self._parse_instruction(source, offset)
        if is_directive(source.operator):
            return self._parse_directive(source, offset)

        raise UnknownOperatorError(
            source.operator,
            location=self._location(source, 9),
            source_line=source.text,
        )

    def try_parse_line(self, text: str, line: int, offset: int) -> ParseResult:
        """Like parse_line, but returns the error instead of raising it."""
        try:
            return ParseResult(line, statement=self.parse_line(text, line, offset))
        except AssemblerError as e:
            return ParseResult(line, error=e)

    def _location(self, source: SourceLine, column: int) -> SourceLocation:
        return SourceLocation(self.filename, source.line, column)

    # =========================================================================
    # Instructions
    # =========================================================================

    def _parse_instruction(self, source: SourceLine, offset: int) -> Instruction:
        mnemonic = source.operator.lstrip("+")
        opcode = get_opcode(mnemonic)
        flags: set[Flag] = set()

        if source.operator.startswith("+"):
            if not opcode.supports_extended:
                raise InvalidExtendFlagError(
                    mnemonic,
                    location=self._location(source, 9),
                    source_line=source.text,
                    formats=opcode.formats,
                )
            fmt = 4
            flags.add(Flag.EXTENDED)
        elif len(opcode.formats) > 1:
            fmt = 3
        else:
            fmt = opcode.formats[0]

        if opcode.sicxe:
            flags.add(Flag.SICXE)

        tokens = split_operands(source.operand)
        memory_reference = not any(
            arg in (ArgKind.REGISTER, ArgKind.NUMERIC) for arg in opcode.args
        )
        if memory_reference and any(t.upper() == "X" for t in tokens):
            flags.add(Flag.INDEXED)
            tokens = [t for t in tokens if t.upper() != "X"]

        operands = []
        for token in tokens:
            operand, markers = parse_operand(token)
            operands.append(operand)
            flags |= markers

        valid, diagnostic = self._validate(opcode, operands)

        return Instruction(
            location=self._location(source, 1),
            offset=offset,
            label=source.label,
            operator=source.operator,
            operands=operands,
            operand_text=source.operand,
            comment=source.comment,
            opcode=opcode,
            format=fmt,
            flags=flags,
            references=tuple(op.value for op in operands if op.is_symbol),
            valid=valid,
            diagnostic=diagnostic,
        )

    @staticmethod
    def _validate(opcode: OpcodeInfo, operands: list[Operand]) -> tuple[bool, str]:
        """Compare operands against the declared argument kinds."""
        valid = len(opcode.args) == len(operands) and all(
            accepts(arg, operand) for arg, operand in zip(opcode.args, operands)
        )
        if valid:
            return True, ""
        expected = describe_shape(opcode.args)
        actual = describe_shape(op.kind for op in operands)
        return False, f"{opcode.mnemonic} expected {expected} but got {actual}"

    # =========================================================================
    # Directives
    # =========================================================================

    def _parse_directive(self, source: SourceLine, offset: int) -> Directive:
        name = source.operator
        text = source.operand
        operands: list[Operand] = []
        value = 0

        if name == "START":
            if not source.label:
                raise self._directive_error(source, ERR_START_LABEL, column=1)
            if not text:
                raise self._directive_error(source, ERR_START_OPERAND)
            value = parse_hex_address(text)
            if value is None:
                raise self._directive_error(source, ERR_START_HEX, f"'{text}'")
            offset = value
            operands.append(Operand.integer(value))

        elif name in RESERVE_DIRECTIVES:
            if not text.isdigit():
                raise self._directive_error(
                    source, ERR_OPERAND,
                    f"{name} needs a decimal count, got '{text}'",
                )
            value = int(text)
            operands.append(Operand.integer(value))

        elif name in DATA_DIRECTIVES:
            if not text:
                raise self._directive_error(source, ERR_OPERAND, f"{name} needs a value")
            try:
                operands.append(parse_literal(text, DATA_WIDTH[name]))
            except ValueError as e:
                raise self._directive_error(source, ERR_OPERAND, str(e)) from None

        elif name == "BASE":
            if not text:
                raise self._directive_error(source, ERR_OPERAND, "BASE needs an address")
            operands.append(classify(text))

        elif name == "END":
            if text:
                operands.append(classify(text))

        return Directive(
            location=self._location(source, 1),
            offset=offset,
            label=source.label,
            operator=name,
            operands=operands,
            operand_text=text,
            comment=source.comment,
            value=value,
        )

    def _directive_error(
        self, source: SourceLine, code: int, detail: str = "", column: int = OPERAND_COLUMN
    ) -> DirectiveError:
        return DirectiveError(
            code, detail,
            location=self._location(source, column),
            source_line=source.text,
        )
