"""
SIC/XE Instruction Set Definition
=================================

This module defines the SIC/XE instruction set: opcodes, supported
instruction formats, declared argument kinds, the register file and the
assembler directives.

Instruction Formats
-------------------
SIC/XE instructions come in four sizes:

1. **Format 1** (1 byte): opcode only (e.g. FIX, HIO)
   +--------+
   |   op   |
   +--------+

2. **Format 2** (2 bytes): opcode + two register nibbles (e.g. ADDR A,S)
   +--------+----+----+
   |   op   | r1 | r2 |
   +--------+----+----+

3. **Format 3** (3 bytes): 6-bit opcode, n/i bits, x/b/p/e flags, 12-bit
   displacement (e.g. LDA BUFFER)
   +------+-+-+-+-+-+-+------------+
   |  op  |n|i|x|b|p|e|    disp    |
   +------+-+-+-+-+-+-+------------+

4. **Format 4** (4 bytes): as format 3 with e=1 and a 20-bit address,
   selected in source with a leading '+' (e.g. +JSUB RDREC)

Argument Kinds
--------------
The table declares, for each mnemonic, the kind of each argument:

- **register**: a register name (A, X, L, B, S, T, F, PC, SW)
- **numeric**: an integer constant (SVC n, SHIFTL r1,n)
- **general**: anything (memory address, symbol, constant)

Reference
---------
- Leland L. Beck, "System Software: An Introduction to Systems Programming"
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Argument Kind Enumeration
# =============================================================================

class ArgKind(Enum):
    """Declared argument kind for an opcode operand position."""
    REGISTER = "register"
    NUMERIC = "numeric"
    GENERAL = "general"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Opcode Information
# =============================================================================

@dataclass(frozen=True)
class OpcodeInfo:
    """
    Static description of one SIC/XE instruction.

    Frozen so the shared table cannot be modified at runtime.

    Attributes:
        mnemonic: Instruction name (uppercase)
        args: Declared argument kinds, in operand order
        formats: Supported instruction formats (1, 2, 3 or 4)
        code: Base opcode byte
        sicxe: True for instructions carried over from the base SIC machine
    """
    mnemonic: str
    args: tuple[ArgKind, ...]
    formats: tuple[int, ...]
    code: int
    sicxe: bool = False

    @property
    def supports_extended(self) -> bool:
        """True if the '+' extended format may be used."""
        return 4 in self.formats

    def __repr__(self) -> str:
        fmts = "/".join(str(f) for f in self.formats)
        return f"OpcodeInfo({self.mnemonic}, code=${self.code:02X}, formats={fmts})"


# =============================================================================
# Opcode Table
# =============================================================================

_R = ArgKind.REGISTER
_N = ArgKind.NUMERIC
_M = ArgKind.GENERAL

# Instructions already present on the original SIC machine
SIC_INSTRUCTIONS = frozenset({
    "LDA", "LDX", "LDL", "STA", "STX", "STL", "ADD", "SUB", "MUL", "DIV",
    "COMP", "TIX", "JEQ", "JGT", "JLT", "J", "AND", "OR", "JSUB", "RSUB",
    "LDCH", "STCH",
})

_DEFINITIONS: list[tuple[str, tuple[ArgKind, ...], tuple[int, ...], int]] = [
    # =========================================================================
    # FORMAT 3/4: memory reference
    # =========================================================================
    ("ADD",    (_M,), (3, 4), 0x18),
    ("ADDF",   (_M,), (3, 4), 0x58),
    ("AND",    (_M,), (3, 4), 0x40),
    ("COMP",   (_M,), (3, 4), 0x28),
    ("COMPF",  (_M,), (3, 4), 0x88),
    ("DIV",    (_M,), (3, 4), 0x24),
    ("DIVF",   (_M,), (3, 4), 0x64),
    ("J",      (_M,), (3, 4), 0x3C),
    ("JEQ",    (_M,), (3, 4), 0x30),
    ("JGT",    (_M,), (3, 4), 0x34),
    ("JLT",    (_M,), (3, 4), 0x38),
    ("JSUB",   (_M,), (3, 4), 0x48),
    ("LDA",    (_M,), (3, 4), 0x00),
    ("LDB",    (_M,), (3, 4), 0x68),
    ("LDCH",   (_M,), (3, 4), 0x50),
    ("LDF",    (_M,), (3, 4), 0x70),
    ("LDL",    (_M,), (3, 4), 0x08),
    ("LDS",    (_M,), (3, 4), 0x6C),
    ("LDT",    (_M,), (3, 4), 0x74),
    ("LDX",    (_M,), (3, 4), 0x04),
    ("LPS",    (_M,), (3, 4), 0xD0),
    ("MUL",    (_M,), (3, 4), 0x20),
    ("MULF",   (_M,), (3, 4), 0x60),
    ("OR",     (_M,), (3, 4), 0x44),
    ("RD",     (_M,), (3, 4), 0xD8),
    ("RSUB",   (),    (3, 4), 0x4C),
    ("SSK",    (_M,), (3, 4), 0xEC),
    ("STA",    (_M,), (3, 4), 0x0C),
    ("STB",    (_M,), (3, 4), 0x78),
    ("STCH",   (_M,), (3, 4), 0x54),
    ("STF",    (_M,), (3, 4), 0x80),
    ("STI",    (_M,), (3, 4), 0xD4),
    ("STL",    (_M,), (3, 4), 0x14),
    ("STS",    (_M,), (3, 4), 0x7C),
    ("STSW",   (_M,), (3, 4), 0xE8),
    ("STT",    (_M,), (3, 4), 0x84),
    ("STX",    (_M,), (3, 4), 0x10),
    ("SUB",    (_M,), (3, 4), 0x1C),
    ("SUBF",   (_M,), (3, 4), 0x5C),
    ("TD",     (_M,), (3, 4), 0xE0),
    ("TIX",    (_M,), (3, 4), 0x2C),
    ("WD",     (_M,), (3, 4), 0xDC),

    # =========================================================================
    # FORMAT 2: register-register
    # =========================================================================
    ("ADDR",   (_R, _R), (2,), 0x90),
    ("CLEAR",  (_R,),    (2,), 0xB4),
    ("COMPR",  (_R, _R), (2,), 0xA0),
    ("DIVR",   (_R, _R), (2,), 0x9C),
    ("MULR",   (_R, _R), (2,), 0x98),
    ("RMO",    (_R, _R), (2,), 0xAC),
    ("SHIFTL", (_R, _N), (2,), 0xA4),
    ("SHIFTR", (_R, _N), (2,), 0xA8),
    ("SUBR",   (_R, _R), (2,), 0x94),
    ("SVC",    (_N,),    (2,), 0xB0),
    ("TIXR",   (_R,),    (2,), 0xB8),

    # =========================================================================
    # FORMAT 1: no operand
    # =========================================================================
    ("FIX",    (), (1,), 0xC4),
    ("FLOAT",  (), (1,), 0xC0),
    ("HIO",    (), (1,), 0xF4),
    ("NORM",   (), (1,), 0xC8),
    ("SIO",    (), (1,), 0xF0),
    ("TIO",    (), (1,), 0xF8),
]

OPCODE_TABLE: dict[str, OpcodeInfo] = {
    name: OpcodeInfo(name, args, formats, code, name in SIC_INSTRUCTIONS)
    for name, args, formats, code in _DEFINITIONS
}

MNEMONICS = frozenset(OPCODE_TABLE)


# =============================================================================
# Registers
# =============================================================================

REGISTERS: dict[str, int] = {
    "A": 0,
    "X": 1,
    "L": 2,
    "B": 3,
    "S": 4,
    "T": 5,
    "F": 6,
    "PC": 8,
    "SW": 9,
}


# =============================================================================
# Assembler Directives
# =============================================================================

DIRECTIVES = frozenset({"START", "END", "RESW", "RESB", "BYTE", "WORD", "BASE", "NOBASE"})

# Directives that reserve storage without emitting object bytes
RESERVE_DIRECTIVES = frozenset({"RESW", "RESB"})

# Directives that emit literal data
DATA_DIRECTIVES = frozenset({"BYTE", "WORD"})

# Byte width of a numeric or X'..' literal for each data directive
DATA_WIDTH: dict[str, int] = {"BYTE": 1, "WORD": 3}

# Bytes per instruction format
FORMAT_SIZES: dict[int, int] = {1: 1, 2: 2, 3: 3, 4: 4}


# =============================================================================
# Lookup Functions
# =============================================================================

def get_opcode(mnemonic: str) -> Optional[OpcodeInfo]:
    """
    Look up an instruction by mnemonic (case-insensitive).

    A leading '+' is not stripped here; callers handle the extended marker.
    """
    return OPCODE_TABLE.get(mnemonic.upper())


def get_register(name: str) -> Optional[int]:
    """Return the register number for a register name, or None."""
    return REGISTERS.get(name.upper())


def is_register(name: str) -> bool:
    """True if name is a register name (case-insensitive)."""
    return name.upper() in REGISTERS


def is_directive(name: str) -> bool:
    """True if name is an assembler directive (case-insensitive)."""
    return name.upper() in DIRECTIVES


def is_valid_instruction(mnemonic: str) -> bool:
    return mnemonic.upper() in MNEMONICS
