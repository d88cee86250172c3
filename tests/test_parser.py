# =============================================================================
# test_parser.py - Statement Parser Unit Tests
# =============================================================================
# Tests for turning source lines into statements and encoding them.
#
# Test coverage includes:
#   - Format selection (1, 2, 3 and extended 4)
#   - Addressing flags and n/i bits
#   - Object code for every format
#   - Operand validation (kept, never raised)
#   - Directive parsing, sizes and data encoding
#   - Error codes and columns for malformed lines
# =============================================================================

import pytest
from sicxe_sdk.assembler.lexer import format_line
from sicxe_sdk.assembler.operands import Flag, Operand, OperandKind
from sicxe_sdk.assembler.parser import (
    Comment,
    Directive,
    Instruction,
    Parser,
)
from sicxe_sdk.cpu import MNEMONICS, is_directive, is_register, is_valid_instruction
from sicxe_sdk.errors import (
    DirectiveError,
    InvalidExtendFlagError,
    UnknownOperatorError,
)


# =============================================================================
# Helper Functions
# =============================================================================

def parse(label="", operator="", operand="", comment="", offset=0x1000):
    """Parse one line built from its fields, placed at offset."""
    return Parser("<test>").parse_line(format_line(label, operator, operand, comment), 1, offset)


def resolved(stmt, address):
    """Replace the first operand with a resolved address."""
    stmt.operands[0] = Operand.integer(address)
    return stmt


# =============================================================================
# Table Lookup Tests
# =============================================================================

class TestLookups:
    """Test opcode, register and directive lookups."""

    def test_valid_instruction(self):
        assert is_valid_instruction("lda")
        assert is_valid_instruction("RSUB")
        assert not is_valid_instruction("+LDA")
        assert not is_valid_instruction("START")
        assert "TIXR" in MNEMONICS

    def test_register(self):
        assert is_register("x")
        assert is_register("SW")
        assert not is_register("Y")

    def test_directive(self):
        assert is_directive("nobase")
        assert not is_directive("LDA")


# =============================================================================
# Format Selection Tests
# =============================================================================

class TestFormatSelection:
    """Test choosing the instruction format."""

    def test_default_format_3(self):
        stmt = parse("", "LDA", "FIVE")
        assert isinstance(stmt, Instruction)
        assert stmt.format == 3
        assert stmt.size == 3
        assert Flag.EXTENDED not in stmt.flags

    def test_extended_format_4(self):
        stmt = parse("", "+JSUB", "RDREC")
        assert stmt.format == 4
        assert stmt.size == 4
        assert Flag.EXTENDED in stmt.flags
        assert stmt.mnemonic == "JSUB"

    def test_extended_on_format_2_rejected(self):
        with pytest.raises(InvalidExtendFlagError) as exc_info:
            parse("", "+ADDR", "A,S")
        assert exc_info.value.code == 6
        assert exc_info.value.location.column == 9

    def test_format_2(self):
        stmt = parse("", "COMPR", "A,S")
        assert stmt.format == 2
        assert stmt.size == 2

    def test_format_1(self):
        stmt = parse("", "FIX")
        assert stmt.format == 1
        assert stmt.size == 1

    def test_sic_instructions_flagged(self):
        """Instructions inherited from SIC carry the sicxe flag."""
        assert Flag.SICXE in parse("", "LDA", "FIVE").flags
        assert Flag.SICXE not in parse("", "LDB", "FIVE").flags


# =============================================================================
# Addressing Tests
# =============================================================================

class TestAddressing:
    """Test operand markers and the n/i bits."""

    def test_immediate(self):
        stmt = parse("", "LDA", "#5")
        assert Flag.IMMEDIATE in stmt.flags
        assert stmt.operands == [Operand.integer(5)]
        assert stmt.addressing_bits() == 0b01

    def test_indirect(self):
        stmt = parse("", "J", "@RETADR")
        assert Flag.INDIRECT in stmt.flags
        assert stmt.addressing_bits() == 0b10

    def test_simple(self):
        assert parse("", "LDA", "FIVE").addressing_bits() == 0b00

    def test_relative_flags_select_11(self):
        stmt = parse("", "LDA", "FIVE")
        stmt.flags.add(Flag.PC_RELATIVE)
        assert stmt.addressing_bits() == 0b11

    def test_indexed(self):
        """',X' sets the indexed flag and is removed from the operands."""
        stmt = parse("", "LDCH", "BUFFER,X")
        assert Flag.INDEXED in stmt.flags
        assert stmt.operands == [Operand.symbol("BUFFER")]
        assert stmt.references == ("BUFFER",)

    def test_x_register_kept_for_register_instructions(self):
        """In format 2, X names the index register."""
        stmt = parse("", "CLEAR", "X")
        assert Flag.INDEXED not in stmt.flags
        assert stmt.operands == [Operand.register("X")]


# =============================================================================
# Encoding Tests
# =============================================================================

class TestEncoding:
    """Test object code for each format."""

    def test_immediate_constant(self):
        assert parse("", "LDA", "#5").assemble() == "010005"

    def test_rsub(self):
        assert parse("", "RSUB").assemble() == "4C0000"

    def test_simple_address(self):
        assert resolved(parse("", "LDA", "FIVE"), 0x0103).assemble() == "000103"

    def test_indirect_address(self):
        assert resolved(parse("", "J", "@RETADR"), 0x0233).assemble() == "3E0233"

    def test_indexed_address(self):
        stmt = resolved(parse("", "LDCH", "BUFFER,X"), 0x0039)
        assert stmt.assemble() == "508039"

    def test_address_keeps_low_12_bits(self):
        """Format 3 has room for 12 address bits only."""
        assert resolved(parse("", "LDA", "FIVE"), 0x1003).assemble() == "000003"
        stmt = resolved(parse("", "LDCH", "BUFFER,X"), 0x1039)
        assert stmt.assemble() == "508039"

    def test_extended(self):
        stmt = resolved(parse("", "+JSUB", "RDREC"), 0x1036)
        assert stmt.assemble() == "48101036"

    def test_extended_immediate(self):
        assert parse("", "+LDT", "#4096").assemble() == "75101000"

    def test_format_2_registers(self):
        assert parse("", "ADDR", "A,S").assemble() == "9004"
        assert parse("", "COMPR", "A,T").assemble() == "A005"

    def test_format_2_single_register(self):
        assert parse("", "CLEAR", "X").assemble() == "B410"
        assert parse("", "TIXR", "T").assemble() == "B850"

    def test_format_2_numeric(self):
        assert parse("", "SHIFTL", "A,4").assemble() == "A404"
        assert parse("", "SVC", "5").assemble() == "B050"

    def test_format_1(self):
        assert parse("", "FIX").assemble() == "C4"
        assert parse("", "TIO").assemble() == "F8"

    def test_unresolved_symbol_encodes_zero(self):
        assert parse("", "LDA", "FIVE").assemble() == "000000"


# =============================================================================
# Operand Validation Tests
# =============================================================================

class TestOperandValidation:
    """Mismatches are recorded on the statement, never raised."""

    def test_valid(self):
        stmt = parse("", "ADDR", "A,S")
        assert stmt.valid
        assert stmt.diagnostic == ""

    def test_missing_register(self):
        stmt = parse("", "ADDR", "A")
        assert not stmt.valid
        assert stmt.diagnostic == "ADDR expected (register, register) but got (register)"

    def test_missing_operand(self):
        stmt = parse("", "LDA")
        assert not stmt.valid
        assert stmt.diagnostic == "LDA expected (general) but got ()"

    def test_wrong_kind(self):
        stmt = parse("", "SHIFTL", "A,B")
        assert not stmt.valid
        assert "(register, numeric)" in stmt.diagnostic

    def test_extra_operand(self):
        assert not parse("", "RSUB", "FIVE").valid


# =============================================================================
# Directive Tests
# =============================================================================

class TestStartDirective:
    """Test START parsing and its error codes."""

    def test_start(self):
        stmt = parse("COPY", "START", "1000", offset=0)
        assert isinstance(stmt, Directive)
        assert stmt.value == 0x1000
        assert stmt.offset == 0x1000
        assert stmt.label == "COPY"

    def test_missing_label(self):
        with pytest.raises(DirectiveError) as exc_info:
            parse("", "START", "1000")
        assert exc_info.value.code == 2
        assert exc_info.value.location.column == 1

    def test_missing_operand(self):
        with pytest.raises(DirectiveError) as exc_info:
            parse("COPY", "START")
        assert exc_info.value.code == 3

    def test_non_hex_operand(self):
        with pytest.raises(DirectiveError) as exc_info:
            parse("COPY", "START", "10G0")
        assert exc_info.value.code == 4
        assert exc_info.value.location.column == 16


class TestStorageDirectives:
    """Test RESW/RESB/BYTE/WORD sizes and data."""

    def test_resw(self):
        stmt = parse("TABLE", "RESW", "3")
        assert stmt.is_reserve
        assert stmt.size == 9
        assert stmt.assemble() == ""

    def test_resb(self):
        stmt = parse("BUFFER", "RESB", "10")
        assert stmt.size == 10

    def test_reserve_count_must_be_decimal(self):
        with pytest.raises(DirectiveError) as exc_info:
            parse("BUFFER", "RESB", "ABC")
        assert exc_info.value.code == 7

    def test_byte_chars(self):
        stmt = parse("EOF", "BYTE", "C'EOF'")
        assert stmt.size == 3
        assert stmt.assemble() == "454F46"

    def test_byte_hex(self):
        stmt = parse("OUTPUT", "BYTE", "X'05'")
        assert stmt.size == 1
        assert stmt.assemble() == "05"

    def test_word(self):
        stmt = parse("FIVE", "WORD", "5")
        assert stmt.size == 3
        assert stmt.assemble() == "000005"

    def test_word_negative(self):
        assert parse("M1", "WORD", "-1").assemble() == "FFFFFF"

    def test_word_symbol_emits_zero(self):
        stmt = parse("PTR", "WORD", "BUFFER")
        assert stmt.operands[0].kind is OperandKind.SYMBOL
        assert stmt.assemble() == "000000"

    def test_byte_too_wide(self):
        with pytest.raises(DirectiveError) as exc_info:
            parse("B", "BYTE", "X'F1F2'")
        assert exc_info.value.code == 7

    def test_byte_needs_value(self):
        with pytest.raises(DirectiveError):
            parse("B", "BYTE")


class TestOtherDirectives:
    """Test END, BASE and NOBASE."""

    def test_end(self):
        stmt = parse("", "END", "FIRST")
        assert stmt.size == 0
        assert stmt.operands == [Operand.symbol("FIRST")]

    def test_end_without_operand(self):
        assert parse("", "END").operands == []

    def test_base(self):
        stmt = parse("", "BASE", "LENGTH")
        assert stmt.size == 0
        assert stmt.operands == [Operand.symbol("LENGTH")]

    def test_base_needs_operand(self):
        with pytest.raises(DirectiveError):
            parse("", "BASE")

    def test_nobase(self):
        stmt = parse("", "NOBASE")
        assert stmt.size == 0
        assert stmt.assemble() == ""


# =============================================================================
# Line-Level Tests
# =============================================================================

class TestParseLine:
    """Test comments, unknown operators and result wrapping."""

    def test_comment(self):
        stmt = Parser().parse_line(". copy file", 1, 0x1000)
        assert isinstance(stmt, Comment)
        assert stmt.content == ". copy file"
        assert stmt.size == 0
        assert stmt.assemble() == ""

    def test_unknown_operator(self):
        with pytest.raises(UnknownOperatorError) as exc_info:
            parse("", "FOOBAR", "1")
        error = exc_info.value
        assert error.code == 5
        assert error.operator == "FOOBAR"
        assert error.location.column == 9

    def test_try_parse_line_ok(self):
        result = Parser().try_parse_line(format_line("", "RSUB"), 4, 0)
        assert result.ok
        assert result.line == 4
        assert isinstance(result.statement, Instruction)

    def test_try_parse_line_error(self):
        result = Parser().try_parse_line(format_line("", "FOOBAR"), 4, 0)
        assert not result.ok
        assert result.statement is None
        assert isinstance(result.error, UnknownOperatorError)

    def test_offset_fixed_once_assigned(self):
        stmt = parse("", "RSUB")
        with pytest.raises(AttributeError):
            stmt.offset = 0

    def test_source_fields_kept(self):
        stmt = parse("CLOOP", "+JSUB", "RDREC", "read record")
        assert stmt.label == "CLOOP"
        assert stmt.operator == "+JSUB"
        assert stmt.operand_text == "RDREC"
        assert stmt.comment == "read record"
        assert stmt.offset == 0x1000
