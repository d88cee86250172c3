"""
SIC/XE Assembler - Main Interface
=================================

This module provides the Assembler class, the primary interface for
assembling SIC/XE source code. It runs the two passes of the driver and
produces the object program, a listing and a symbol file.

Example Usage
-------------
>>> from sicxe_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> text = asm.assemble_string('''\\
... MAIN    START  0
... FIRST   LDA    FIVE
... FIVE    WORD   5
...         END    MAIN
... ''')
>>> print(text)
HMAIN  000000000006
T00000006000003000005
E000000

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ sicasm copy.asm -o copy.obj -l copy.lst -s copy.sym

Options:
    -o, --output FILE      Output object file
    -l, --listing FILE     Generate listing file
    -s, --symbols FILE     Generate symbol file
    --strict               Operand mismatches are errors
    --relative             PC/base-relative displacements
    -v, --verbose          Verbose output
"""

from pathlib import Path
from typing import Optional
import logging

from sicxe_sdk.config import AssemblerConfig
from sicxe_sdk.errors import AssemblerError
from sicxe_sdk.assembler.codegen import CodeGenerator, ProgramDescriptor
from sicxe_sdk.assembler.objfile import ObjectProgram
from sicxe_sdk.assembler.parser import Statement

# Logger for this module
logger = logging.getLogger(__name__)


class Assembler:
    """
    Main SIC/XE assembler class.

    Each call to assemble_string/assemble_file starts from a fresh driver,
    so one Assembler can be reused for several sources; the accessors
    report on the most recent run.

    Attributes:
        config: Assembler configuration
        verbose: If True, log progress at INFO level
    """

    def __init__(self, config: Optional[AssemblerConfig] = None, verbose: bool = False):
        """
        Initialize the assembler.

        Args:
            config: Assembler configuration (default: AssemblerConfig())
            verbose: Enable verbose progress messages
        """
        self.config = config or AssemblerConfig()
        self._verbose = verbose
        self._codegen = CodeGenerator(self.config)

    def _note(self, message: str) -> None:
        if self._verbose:
            logger.info(message)
        else:
            logger.debug(message)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> Optional[str]:
        """
        Assemble source code from a string.

        The pipeline is:
        1. Pass 1: parse lines, assign addresses, build the symbol table
        2. Pass 2: resolve symbolic operands
        3. Render the object program

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Object program text, or None if assembly reported errors,
            including reaching max_errors (see has_errors() and
            get_error_report())
        """
        self._codegen = CodeGenerator(self.config, filename=filename)

        self._note(f"Assembling {filename}...")
        self._codegen.pass1(source.splitlines())
        self._note(f"Parsed {len(self._codegen.statements)} statements")

        if not self._codegen.pass2():
            return None

        program = self._codegen.generate_object()
        if program is None:
            return None

        self._note(f"Generated {program.header.length} bytes in {len(program.texts)} text records")
        return program.to_text()

    def assemble_file(self, filepath: str | Path) -> Optional[str]:
        """
        Assemble source code from a file.

        Raises:
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_statements(self) -> list[Statement]:
        return self._codegen.statements

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping symbol names to addresses
        """
        return self._codegen.get_symbols()

    def get_program(self) -> ProgramDescriptor:
        """Program name, start address and length."""
        return self._codegen.get_program()

    def get_object(self) -> Optional[ObjectProgram]:
        return self._codegen.get_object()

    def get_object_text(self) -> Optional[str]:
        program = self._codegen.get_object()
        return program.to_text() if program else None

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Available after any run, including one that reported errors.
        """
        return self._codegen.get_listing()

    def write_object(self, filepath: str | Path) -> None:
        """
        Write the object program file.

        Raises:
            AssemblerError: No object program was produced
        """
        program = self._codegen.get_object()
        if program is None:
            raise AssemblerError("no object program to write (assembly failed or not run)")
        program.write(filepath)
        self._note(f"Wrote {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing file shows addresses, object code, source fields and
        the symbol table.
        """
        self._codegen.write_listing(filepath)
        self._note(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """Write symbol table file."""
        self._codegen.write_symbols(filepath)
        self._note(f"Wrote symbols to {filepath}")

    # =========================================================================
    # Error Handling
    # =========================================================================

    def has_errors(self) -> bool:
        """
        Check if assembly produced errors.

        Returns:
            True if errors occurred
        """
        return self._codegen.has_errors()

    def get_error_report(self) -> str:
        """
        Get formatted error report.

        Returns:
            Error report string
        """
        return self._codegen.get_error_report()


# =============================================================================
# Convenience Functions
# =============================================================================

def _failure(asm: Assembler, filename: str) -> AssemblerError:
    count = asm._codegen.errors.error_count()
    return AssemblerError(
        f"assembly of {filename} failed with {count} error(s):\n\n"
        f"{asm.get_error_report()}"
    )


def assemble(source: str, filename: str = "<input>",
             config: Optional[AssemblerConfig] = None) -> str:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors
        config: Assembler configuration

    Returns:
        Object program text

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(config)
    text = asm.assemble_string(source, filename)
    if text is None:
        raise _failure(asm, filename)
    return text


def assemble_file(filepath: str | Path,
                  config: Optional[AssemblerConfig] = None) -> str:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(config)
    text = asm.assemble_file(filepath)
    if text is None:
        raise _failure(asm, str(filepath))
    return text
