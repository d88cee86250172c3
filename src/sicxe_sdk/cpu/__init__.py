"""
SIC/XE SDK CPU Package
======================

This package contains the SIC/XE architecture definitions shared by the
assembler and its tooling: the opcode table, the register file and the
directive set.

The tables are built once at import time and never modified afterwards,
so they can be shared freely.

Usage:
    from sicxe_sdk.cpu import (
        ArgKind,
        OpcodeInfo,
        OPCODE_TABLE,
        get_opcode,
    )
"""

from sicxe_sdk.cpu.sicxe import (
    # Core types
    ArgKind,
    OpcodeInfo,
    # Master instruction database
    OPCODE_TABLE,
    MNEMONICS,
    SIC_INSTRUCTIONS,
    # Registers and directives
    REGISTERS,
    DIRECTIVES,
    RESERVE_DIRECTIVES,
    DATA_DIRECTIVES,
    DATA_WIDTH,
    FORMAT_SIZES,
    # Lookup functions
    get_opcode,
    get_register,
    is_register,
    is_directive,
    is_valid_instruction,
)

__all__ = [
    "ArgKind",
    "OpcodeInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
    "SIC_INSTRUCTIONS",
    "REGISTERS",
    "DIRECTIVES",
    "RESERVE_DIRECTIVES",
    "DATA_DIRECTIVES",
    "DATA_WIDTH",
    "FORMAT_SIZES",
    "get_opcode",
    "get_register",
    "is_register",
    "is_directive",
    "is_valid_instruction",
]
