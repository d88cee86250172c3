"""
SIC/XE SDK - Assembler Toolchain for the SIC/XE Machine
=======================================================

This package provides an assembler for SIC/XE, the hypothetical computer
used to teach systems programming in Leland Beck's "System Software".

SIC/XE is a 24-bit word machine with 1 MB of byte-addressed memory and
four instruction formats. Programs are loaded from a textual object
program made of Header, Text and End records.

Main Components
---------------
- **assembler**: two-pass SIC/XE assembler (sicasm)
    Converts fixed-column assembly source (.asm) to an object program (.obj)

- **cpu**: SIC/XE definitions
    Opcode table, register numbers and assembler directives

Quick Start
-----------
Assemble a program:
    >>> from sicxe_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> text = asm.assemble_file("copy.asm")
    >>> asm.write_object("copy.obj")

Or use the command-line tool:
    $ sicasm copy.asm -o copy.obj -l copy.lst

Version History
---------------
1.0.0 - Initial release with the two-pass assembler and object writer
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sicxe_sdk.assembler import Assembler, assemble, assemble_file
from sicxe_sdk.config import AssemblerConfig
from sicxe_sdk.errors import (
    SicxeError,
    AssemblerError,
    AssemblySyntaxError,
    UnknownOperatorError,
    InvalidExtendFlagError,
    DirectiveError,
    DuplicateSymbolError,
    UnresolvedSymbolError,
    OperandValidationError,
    DisplacementError,
    PhaseError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerConfig",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "SicxeError",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnknownOperatorError",
    "InvalidExtendFlagError",
    "DirectiveError",
    "DuplicateSymbolError",
    "UnresolvedSymbolError",
    "OperandValidationError",
    "DisplacementError",
    "PhaseError",
]
