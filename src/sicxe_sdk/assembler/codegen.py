"""
SIC/XE Two-Pass Assembly Driver
===============================

This module drives assembly of SIC/XE source in two passes and hands the
result to the object writer.

Pass 1 (Parsing and Addresses)
------------------------------
- Parse every non-blank line into a statement
- Assign each statement the current program counter as its address
- Record every label in the symbol table
- Advance the program counter by the statement size

A line that fails to parse is reported and dropped; it takes up no space,
and the lines after it are still assembled.

Pass 2 (Symbol Resolution)
--------------------------
- Replace every symbolic instruction operand with its address
- Optionally pick PC-relative or base-relative displacements
- Warn about format 3 addresses that do not fit in 12 bits

Phase Gate
----------
Errors do not stop a pass, but they stop the next phase: if pass 1
reported errors, pass 2 and object generation do nothing apart from
logging a notice.

State Machine
-------------
    FRESH -> PASS1_RUNNING -> PASS1_DONE -> PASS2_RUNNING -> PASS2_DONE
          -> OBJECT_GENERATED
"""

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, Optional
import logging

from sicxe_sdk.config import AssemblerConfig
from sicxe_sdk.cpu import DATA_DIRECTIVES
from sicxe_sdk.errors import (
    AssemblerError,
    DisplacementError,
    DuplicateSymbolError,
    ErrorCollector,
    OperandValidationError,
    PhaseError,
    SourceLocation,
    TooManyErrors,
    UnresolvedSymbolError,
    error_message,
)
from sicxe_sdk.assembler.lexer import OPERAND_COLUMN
from sicxe_sdk.assembler.objfile import ObjectProgram, ObjectWriter
from sicxe_sdk.assembler.operands import Flag, Operand, OperandKind
from sicxe_sdk.assembler.parser import (
    Comment,
    Directive,
    Instruction,
    ParseResult,
    Parser,
    Statement,
)

# Logger for this module
logger = logging.getLogger(__name__)

PC_RELATIVE_RANGE = range(-2048, 2048)
BASE_RELATIVE_RANGE = range(0, 4096)
DIRECT_RANGE = range(0, 4096)


# =============================================================================
# Driver State and Program Descriptor
# =============================================================================

class AssemblerState(Enum):
    """Where the driver is in the assembly pipeline."""
    FRESH = auto()
    PASS1_RUNNING = auto()
    PASS1_DONE = auto()
    PASS2_RUNNING = auto()
    PASS2_DONE = auto()
    OBJECT_GENERATED = auto()


@dataclass(frozen=True)
class ProgramDescriptor:
    """
    Program metadata needed for the Header record.

    Attributes:
        name: Label of the START directive ("" if there is none)
        start: Load address from START (0 if there is none)
        length: Final program counter minus start
    """
    name: str
    start: int
    length: int


# =============================================================================
# Symbol Table Helpers
# =============================================================================

def find_similar_symbols(name: str, symbols: Iterable[str]) -> list[str]:
    """
    Find symbols with similar names for error hints.

    Uses Levenshtein distance; at most 3 suggestions.
    """
    similar = []
    for sym in symbols:
        if abs(len(sym) - len(name)) <= 1 and _edit_distance(name, sym) <= 2:
            similar.append(sym)
    return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1
    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current = [i + 1]
        for j, c2 in enumerate(s2):
            current.append(min(
                previous[j + 1] + 1,
                current[j] + 1,
                previous[j] + (c1 != c2),
            ))
        previous = current
    return previous[-1]


def resolve_symbols(
    statements: Iterable[Statement],
    symbols: dict[str, int],
) -> list[UnresolvedSymbolError]:
    """
    Rewrite symbolic instruction operands into integer addresses.

    Directives and comments are left alone. A symbol missing from the
    table stays symbolic and is reported. Running this again over the
    same statements changes nothing.

    Returns:
        One error per unresolved reference
    """
    errors = []
    for stmt in statements:
        if not isinstance(stmt, Instruction):
            continue
        for index, operand in enumerate(stmt.operands):
            if operand.kind is not OperandKind.SYMBOL:
                continue
            if operand.value in symbols:
                stmt.operands[index] = Operand.integer(symbols[operand.value])
            else:
                errors.append(UnresolvedSymbolError(
                    operand.value,
                    location=SourceLocation(
                        stmt.location.filename, stmt.line, OPERAND_COLUMN
                    ),
                    similar_symbols=find_similar_symbols(operand.value, symbols),
                ))
    return errors


# =============================================================================
# Driver
# =============================================================================

class CodeGenerator:
    """
    Two-pass assembly driver.

    The driver owns the program counter, the statement list, the symbol
    table and the error log.

    Usage:
        codegen = CodeGenerator()
        codegen.pass1(source.splitlines())
        codegen.pass2()
        program = codegen.generate_object()
        if program is not None:
            print(program.to_text())
    """

    def __init__(
        self,
        config: Optional[AssemblerConfig] = None,
        filename: str = "<input>",
    ):
        self.config = config or AssemblerConfig()
        self.filename = filename
        self._parser = Parser(filename)
        self._errors = ErrorCollector(self.config.max_errors)
        self._writer = ObjectWriter(self.config.text_record_limit)

        self._state = AssemblerState.FRESH
        self._statements: list[Statement] = []
        self._symbols: dict[str, int] = {}
        self._symbol_lines: dict[str, int] = {}
        self._pc = 0
        self._start = 0
        self._name = ""
        self._program: Optional[ObjectProgram] = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def state(self) -> AssemblerState:
        return self._state

    @property
    def statements(self) -> list[Statement]:
        return self._statements

    @property
    def symbols(self) -> dict[str, int]:
        return self._symbols

    @property
    def pc(self) -> int:
        """Current program counter."""
        return self._pc

    @property
    def errors(self) -> ErrorCollector:
        return self._errors

    def has_errors(self) -> bool:
        return self._errors.has_errors()

    def get_error_report(self) -> str:
        return self._errors.report()

    def get_symbols(self) -> dict[str, int]:
        return dict(self._symbols)

    def get_program(self) -> ProgramDescriptor:
        return ProgramDescriptor(self._name, self._start, self._pc - self._start)

    def get_object(self) -> Optional[ObjectProgram]:
        return self._program

    # =========================================================================
    # Pass 1
    # =========================================================================

    def parse_lines(self, lines: Iterable[str]) -> list[ParseResult]:
        """
        Parse lines, placing each good statement at the program counter.

        Blank lines are skipped but keep their line number. Failed lines
        are reported and take up no space.

        Returns:
            One result per non-blank line
        """
        results = []
        for number, text in enumerate(lines, start=1):
            if not text.strip():
                continue
            result = self._parser.try_parse_line(text, number, self._pc)
            results.append(result)
            if result.ok:
                self._place(result.statement)
            else:
                logger.error(f"line {number}: {result.error.message}")
                self._errors.add(result.error)
        return results

    def pass1(self, lines: Iterable[str]) -> bool:
        """
        Run pass 1 over source lines.

        Reaching the error limit stops parsing but still ends the pass.

        Returns:
            True if no errors have been reported

        Raises:
            PhaseError: Pass 1 has already run
        """
        if self._state is not AssemblerState.FRESH:
            raise PhaseError(f"pass 1 cannot run in state {self._state.name}")

        self._state = AssemblerState.PASS1_RUNNING
        try:
            self.parse_lines(lines)
        except TooManyErrors as e:
            logger.error(e.message)
        self._state = AssemblerState.PASS1_DONE

        logger.debug(
            f"Pass 1: {len(self._statements)} statements, "
            f"{len(self._symbols)} symbols, PC={self._pc:06X}"
        )
        return not self.has_errors()

    def _place(self, stmt: Statement) -> None:
        """Add a parsed statement, define its label and advance the PC."""
        self._statements.append(stmt)

        if isinstance(stmt, Comment):
            return

        if isinstance(stmt, Directive) and stmt.name == "START":
            self._name = stmt.label
            self._start = stmt.value
            self._pc = stmt.value
            self._define(stmt.label, stmt.value, stmt)
            return

        if stmt.label:
            self._define(stmt.label, stmt.offset, stmt)

        if isinstance(stmt, Instruction) and not stmt.valid:
            self._operand_mismatch(stmt)

        if isinstance(stmt, Directive):
            if stmt.is_reserve:
                logger.debug(f"line {stmt.line}: {stmt.name} reserves {stmt.size} bytes")
            elif stmt.operands and stmt.operands[0].is_symbol and stmt.name in DATA_DIRECTIVES:
                message = f"line {stmt.line}: {stmt.name} {stmt.operands[0]} emitted as zero bytes"
                logger.warning(message)
                self._errors.add_warning(message)

        self._pc += stmt.size

    def _define(self, name: str, value: int, stmt: Statement) -> None:
        if name in self._symbols:
            error = DuplicateSymbolError(
                name,
                location=SourceLocation(self.filename, stmt.line, 1),
                original_line=self._symbol_lines[name],
            )
            logger.error(f"line {stmt.line}: {error.message}")
            self._errors.add(error)
            return
        self._symbols[name] = value
        self._symbol_lines[name] = stmt.line

    def _operand_mismatch(self, stmt: Instruction) -> None:
        if self.config.strict_operands:
            logger.error(f"line {stmt.line}: {stmt.diagnostic}")
            self._errors.add(OperandValidationError(
                stmt.diagnostic,
                location=SourceLocation(self.filename, stmt.line, OPERAND_COLUMN),
            ))
        else:
            logger.warning(f"line {stmt.line}: {stmt.diagnostic}")
            self._errors.add_warning(f"line {stmt.line}: {stmt.diagnostic}")

    # =========================================================================
    # Pass 2
    # =========================================================================

    def pass2(self) -> bool:
        """
        Run pass 2: resolve symbolic operands.

        Refused (returns False without doing anything) when pass 1
        reported errors.

        Returns:
            True if pass 2 ran and reported no errors

        Raises:
            PhaseError: Pass 1 has not run, or pass 2 already ran
        """
        if self._state is not AssemblerState.PASS1_DONE:
            raise PhaseError(f"pass 2 cannot run in state {self._state.name}")

        if self.has_errors():
            logger.warning(
                f"Pass 2 skipped: {self._errors.error_count()} error(s) in pass 1"
            )
            return False

        self._state = AssemblerState.PASS2_RUNNING

        try:
            for error in resolve_symbols(self._statements, self._symbols):
                logger.error(f"line {error.line}: {error.message}")
                self._errors.add(error)

            if self.config.relative_addressing:
                self._select_displacements()
        except TooManyErrors as e:
            logger.error(e.message)

        if not self.has_errors():
            self._check_direct_range()

        self._state = AssemblerState.PASS2_DONE
        logger.debug(f"Pass 2: {self._errors.error_count()} error(s)")
        return not self.has_errors()

    def _select_displacements(self) -> None:
        """Pick PC-relative or base-relative addressing for format 3."""
        base: Optional[int] = None

        for stmt in self._statements:
            if isinstance(stmt, Directive):
                if stmt.name == "BASE":
                    base = self._base_value(stmt)
                elif stmt.name == "NOBASE":
                    base = None
                continue

            if not isinstance(stmt, Instruction) or stmt.format != 3:
                continue
            if not stmt.references or not stmt.operands:
                continue
            if stmt.operands[0].kind is not OperandKind.INTEGER:
                continue

            try:
                self._relocate(stmt, base)
            except AssemblerError as e:
                logger.error(f"line {stmt.line}: {e.message}")
                self._errors.add(e)

    def _base_value(self, stmt: Directive) -> Optional[int]:
        operand = stmt.operands[0]
        if operand.kind is OperandKind.INTEGER:
            return operand.value
        if operand.value in self._symbols:
            return self._symbols[operand.value]
        error = UnresolvedSymbolError(
            operand.value,
            location=SourceLocation(self.filename, stmt.line, OPERAND_COLUMN),
            similar_symbols=find_similar_symbols(operand.value, self._symbols),
        )
        logger.error(f"line {stmt.line}: {error.message}")
        self._errors.add(error)
        return None

    @staticmethod
    def _relocate(stmt: Instruction, base: Optional[int]) -> None:
        """Choose the displacement for one format 3 instruction."""
        stmt.flags -= {Flag.PC_RELATIVE, Flag.BASE_RELATIVE}
        stmt.displacement = None
        target = stmt.target

        disp = target - (stmt.offset + stmt.size)
        if disp in PC_RELATIVE_RANGE:
            stmt.flags.add(Flag.PC_RELATIVE)
            stmt.displacement = disp
            return

        if base is not None and target - base in BASE_RELATIVE_RANGE:
            stmt.flags.add(Flag.BASE_RELATIVE)
            stmt.displacement = target - base
            return

        if target in DIRECT_RANGE:
            return

        raise DisplacementError(stmt.mnemonic, target, location=stmt.location)

    def _check_direct_range(self) -> None:
        """
        Warn about format 3 addresses that lose bits in the 12-bit field.

        Covers every format 3 instruction left without a displacement:
        all of them when relative addressing is off, and numeric
        constants when it is on.
        """
        for stmt in self._statements:
            if not isinstance(stmt, Instruction) or stmt.format != 3:
                continue
            if stmt.displacement is not None or not stmt.operands:
                continue
            if stmt.operands[0].kind is not OperandKind.INTEGER:
                continue

            target = stmt.target
            if target in DIRECT_RANGE:
                continue
            message = (
                f"line {stmt.line}: {error_message(DisplacementError.code)}: "
                f"{stmt.mnemonic} target {target:06X} truncated to "
                f"{target & 0xFFF:03X}, use +{stmt.mnemonic}"
            )
            logger.warning(message)
            self._errors.add_warning(message)

    # =========================================================================
    # Object Generation
    # =========================================================================

    def generate_object(self) -> Optional[ObjectProgram]:
        """
        Render the object program.

        Refused (returns None) when any error has been reported.

        Raises:
            PhaseError: Pass 2 has not run
        """
        if self.has_errors():
            logger.warning(
                f"Object generation skipped: {self._errors.error_count()} error(s)"
            )
            return None

        if self._state not in (AssemblerState.PASS2_DONE, AssemblerState.OBJECT_GENERATED):
            raise PhaseError(f"object generation cannot run in state {self._state.name}")

        program = self.get_program()
        self._program = self._writer.build(
            self._statements, program.name, program.start, program.length
        )
        self._state = AssemblerState.OBJECT_GENERATED
        logger.info(
            f"Generated {len(self._program.texts)} text record(s) for "
            f"'{program.name}' ({program.length} bytes at {program.start:06X})"
        )
        return self._program

    # =========================================================================
    # Listing and Symbol Files
    # =========================================================================

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        One line per statement: source line, address, object code, label,
        operator, operand and comment. Invalid instructions are followed by
        their diagnostic. The symbol table closes the listing.
        """
        lines = []
        lines.append("SIC/XE Assembler Listing")
        lines.append("=" * 72)
        lines.append("")
        lines.append("Line  Loc     Object    Source")
        lines.append("-" * 72)

        for stmt in self._statements:
            if isinstance(stmt, Comment):
                lines.append(f"{stmt.line:4d}  {'':6}  {'':8}  {stmt.content}")
                continue
            code = stmt.assemble()
            source = f"{stmt.label:<8}{stmt.operator:<7}{stmt.operand_text:<20}{stmt.comment}"
            lines.append(f"{stmt.line:4d}  {stmt.offset:06X}  {code:<8}  {source.rstrip()}")
            if isinstance(stmt, Instruction) and not stmt.valid:
                lines.append(f"{'':4}  *** {stmt.diagnostic}")

        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, value in sorted(self._symbols.items()):
            lines.append(f"{name:20s} = {value:06X}")
        return "\n".join(lines)

    def write_listing(self, filepath: str | Path) -> None:
        """Write the assembly listing file."""
        with open(filepath, "w") as f:
            f.write(self.get_listing())
            f.write("\n")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by sicasm\n")
            for name, value in sorted(self._symbols.items()):
                f.write(f"{name} {value:06X}\n")
