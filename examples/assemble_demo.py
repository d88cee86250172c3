#!/usr/bin/env python3
"""
SIC/XE Assembler Demo
=====================

This script demonstrates how to use the SIC/XE SDK assembler to:
1. Assemble a source file
2. Inspect the symbol table and program size
3. Compare direct and PC/base-relative encodings
4. Write the object, listing and symbol files

Usage:
    source .venv/bin/activate
    python examples/assemble_demo.py
"""

from pathlib import Path

from sicxe_sdk import Assembler, AssemblerConfig


def main():
    source = Path(__file__).with_name("copy.asm")
    output_dir = Path("trash")
    output_dir.mkdir(exist_ok=True)

    # ==========================================================================
    # 1. Assemble with direct addressing (the default)
    # ==========================================================================
    print(f"Assembling {source.name}...")
    asm = Assembler()
    text = asm.assemble_file(source)
    if text is None:
        print(asm.get_error_report())
        return

    # ==========================================================================
    # 2. Program information
    # ==========================================================================
    program = asm.get_program()
    print(f"  Program: {program.name}")
    print(f"  Start:   {program.start:06X}")
    print(f"  Length:  {program.length:06X} ({program.length} bytes)")
    print(f"  Symbols: {len(asm.get_symbols())}")
    print()
    print(text)

    # Direct format 3 addresses keep only their low 12 bits
    print(asm.get_error_report())
    print()

    # ==========================================================================
    # 3. Same source with PC-relative / base-relative displacements
    # ==========================================================================
    relative = Assembler(AssemblerConfig(relative_addressing=True))
    text = relative.assemble_file(source)
    if text is None:
        print(relative.get_error_report())
        return
    print("With relative addressing:")
    print(text)

    # ==========================================================================
    # 4. Write output files
    # ==========================================================================
    relative.write_object(output_dir / "copy.obj")
    relative.write_listing(output_dir / "copy.lst")
    relative.write_symbols(output_dir / "copy.sym")
    print(f"Wrote copy.obj, copy.lst and copy.sym to {output_dir}/")


if __name__ == "__main__":
    main()
