"""
SIC/XE Two-Pass Assembler
=========================

This module provides a two-pass assembler for the SIC/XE machine
described in Beck's "System Software". It converts fixed-column assembly
source into a textual object program made of Header, Text and End
records.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **tokenize_line**: Splits a source line into its fixed-column fields
- **Parser**: Parses lines into statements (instructions, directives, comments)
- **CodeGenerator**: Two-pass driver (addresses, symbols, resolution)
- **ObjectWriter**: Renders resolved statements into H/T/E records

Assembly Process
----------------
1. **Pass 1 (CodeGenerator.pass1)**:
   - Tokenize and parse each line into a statement
   - Assign addresses from the program counter
   - Build the symbol table

2. **Pass 2 (CodeGenerator.pass2)**:
   - Replace symbolic operands with addresses
   - Optionally choose PC-relative or base-relative displacements

3. **Object generation (CodeGenerator.generate_object)**:
   - Encode each statement and pack the bytes into Text records

Errors on a line are collected and do not stop the pass, but they stop
the next phase: no object program is produced from a source with errors.

Example Usage
-------------
>>> from sicxe_sdk.assembler import Assembler
>>> asm = Assembler()
>>> text = asm.assemble_string('''\\
... COPY    START  1000
... FIRST   LDA    #5
...         RSUB
... ''')
>>> asm.get_symbols()
{'COPY': 4096, 'FIRST': 4096}

Supported Features
------------------
- Full SIC/XE instruction set, formats 1 to 4
- Immediate (#), indirect (@), indexed (,X) and extended (+) addressing
- Directives START, END, BYTE, WORD, RESB, RESW, BASE, NOBASE
- Optional PC-relative / base-relative displacement selection
- Listing file generation
- Symbol table output
"""

from sicxe_sdk.assembler.assembler import Assembler, assemble, assemble_file
from sicxe_sdk.assembler.lexer import SourceLine, format_line, tokenize_line
from sicxe_sdk.assembler.operands import Flag, Operand, OperandKind
from sicxe_sdk.assembler.parser import (
    Comment,
    Directive,
    Instruction,
    ParseResult,
    Parser,
    Statement,
)
from sicxe_sdk.assembler.codegen import AssemblerState, CodeGenerator, ProgramDescriptor
from sicxe_sdk.assembler.objfile import (
    EndRecord,
    HeaderRecord,
    ObjectProgram,
    ObjectWriter,
    TextRecord,
)
from sicxe_sdk.cpu import ArgKind, OpcodeInfo, OPCODE_TABLE, MNEMONICS

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "SourceLine",
    "format_line",
    "tokenize_line",
    # Operands
    "Flag",
    "Operand",
    "OperandKind",
    # Parser
    "Parser",
    "ParseResult",
    "Statement",
    "Instruction",
    "Directive",
    "Comment",
    # Driver
    "AssemblerState",
    "CodeGenerator",
    "ProgramDescriptor",
    # Object program
    "ObjectWriter",
    "ObjectProgram",
    "HeaderRecord",
    "TextRecord",
    "EndRecord",
    # Opcodes
    "ArgKind",
    "OpcodeInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
]
