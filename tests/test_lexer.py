# =============================================================================
# test_lexer.py - Line Tokenizer Unit Tests
# =============================================================================
# Tests for the SIC/XE fixed-column line tokenizer.
#
# Test coverage includes:
#   - Field slicing by absolute column
#   - Upper-casing of label and operator
#   - Full-line comments ('.' and ';')
#   - Tab expansion and trailing newline handling
#   - Label and operator syntax errors
# =============================================================================

import pytest
from sicxe_sdk.assembler.lexer import (
    ERR_LABEL,
    ERR_OPERATOR,
    format_line,
    is_comment_line,
    tokenize_line,
)
from sicxe_sdk.errors import AssemblySyntaxError


# =============================================================================
# Field Slicing Tests
# =============================================================================

class TestFieldSlicing:
    """Test that each field is taken from its fixed column range."""

    def test_all_fields(self):
        """Label, operator, operand and comment are all recognised."""
        line = tokenize_line(format_line("FIRST", "STL", "RETADR", "save return"), 3)
        assert line.line == 3
        assert line.label == "FIRST"
        assert line.operator == "STL"
        assert line.operand == "RETADR"
        assert line.comment == "save return"
        assert not line.is_comment

    def test_no_label(self):
        """A blank label column gives an empty label."""
        line = tokenize_line(format_line("", "RSUB"), 1)
        assert line.label == ""
        assert line.operator == "RSUB"
        assert line.operand == ""

    def test_literal_columns(self):
        """Fields are sliced at columns 0, 8, 15 and 35."""
        text = "FIVE    WORD   5"
        line = tokenize_line(text, 1)
        assert (line.label, line.operator, line.operand) == ("FIVE", "WORD", "5")

    def test_uppercases_label_and_operator(self):
        """Label and operator are upper-cased, the operand is kept as written."""
        line = tokenize_line(format_line("eof", "byte", "C'eof'"), 1)
        assert line.label == "EOF"
        assert line.operator == "BYTE"
        assert line.operand == "C'eof'"

    def test_extended_marker_kept(self):
        """The '+' extended marker stays on the operator."""
        line = tokenize_line(format_line("", "+JSUB", "RDREC"), 1)
        assert line.operator == "+JSUB"

    def test_operand_keeps_inner_spaces(self):
        """Only surrounding whitespace is stripped from the operand."""
        line = tokenize_line(format_line("MSG", "BYTE", "C'A B'"), 1)
        assert line.operand == "C'A B'"

    def test_tabs_expanded(self):
        """Tabs expand to 8-column stops before slicing."""
        line = tokenize_line("FIRST\tLDA\tFIVE", 1)
        assert line.label == "FIRST"
        assert line.operator == "LDA"
        assert line.operand == "FIVE"

    def test_trailing_newline_removed(self):
        """A trailing newline is not part of the line text."""
        line = tokenize_line(format_line("", "RSUB") + "\n", 1)
        assert line.text == "        RSUB"


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test full-line comment detection."""

    def test_dot_comment(self):
        line = tokenize_line(". read record into buffer", 4)
        assert line.is_comment
        assert line.comment == ". read record into buffer"
        assert line.operator == ""

    def test_semicolon_comment(self):
        line = tokenize_line("   ; indented note", 1)
        assert line.is_comment
        assert line.comment == "; indented note"

    def test_is_comment_line(self):
        assert is_comment_line(".")
        assert is_comment_line("  ;x")
        assert not is_comment_line("FIRST   LDA    FIVE")


# =============================================================================
# Syntax Error Tests
# =============================================================================

class TestSyntaxErrors:
    """Test label and operator validation."""

    def test_label_starting_with_digit(self):
        """Labels must start with a letter or underscore."""
        with pytest.raises(AssemblySyntaxError) as exc_info:
            tokenize_line(format_line("1ABC", "LDA", "FIVE"), 7, "prog.asm")
        error = exc_info.value
        assert error.code == ERR_LABEL
        assert error.location.line == 7
        assert error.location.column == 1
        assert "prog.asm:7:1" in str(error)

    def test_label_with_symbol(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            tokenize_line(format_line("A-B", "LDA", "FIVE"), 1)
        assert exc_info.value.code == ERR_LABEL

    def test_invalid_operator(self):
        """Operators are identifiers with an optional leading '+'."""
        with pytest.raises(AssemblySyntaxError) as exc_info:
            tokenize_line(format_line("", "L*A", "5"), 2)
        error = exc_info.value
        assert error.code == ERR_OPERATOR
        assert error.location.column == 9

    def test_missing_operator(self):
        """A label with no operator is an operator error."""
        with pytest.raises(AssemblySyntaxError) as exc_info:
            tokenize_line("FIRST", 1)
        assert exc_info.value.code == ERR_OPERATOR


# =============================================================================
# format_line Tests
# =============================================================================

class TestFormatLine:
    """Test laying fields out in columns."""

    def test_columns(self):
        text = format_line("COPY", "START", "1000", "copy file")
        assert text[0:4] == "COPY"
        assert text[8:13] == "START"
        assert text[15:19] == "1000"
        assert text[35:] == "copy file"

    def test_trailing_space_trimmed(self):
        assert format_line("", "RSUB") == "        RSUB"
