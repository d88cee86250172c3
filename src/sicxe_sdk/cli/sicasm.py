"""
sicasm - SIC/XE Assembler Command-Line Interface
================================================

This module implements the command-line interface for the SIC/XE
assembler.

Usage Examples
--------------
Basic assembly:
    $ sicasm copy.asm

With output file:
    $ sicasm copy.asm -o copy.obj

Generate all output files:
    $ sicasm copy.asm -o copy.obj -l copy.lst -s copy.sym

PC/base-relative displacements, strict operand checks:
    $ sicasm --relative --strict copy.asm

Verbose mode:
    $ sicasm -v copy.asm

Environment
-----------
SICXE_STRICT_OPERANDS, SICXE_RELATIVE_ADDRESSING and SICXE_MAX_ERRORS
set the defaults; command-line flags override them.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click

from sicxe_sdk import __version__
from sicxe_sdk.assembler import Assembler
from sicxe_sdk.config import AssemblerConfig
from sicxe_sdk.cli.errors import ExitCode, handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output object file (default: input.obj)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Treat operand count/type mismatches as errors",
)
@click.option(
    "--relative",
    is_flag=True,
    help="Use PC-relative or base-relative displacements in format 3",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sicasm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    strict: bool,
    relative: bool,
    verbose: bool,
) -> None:
    """
    Assemble SIC/XE source code.

    INPUT_FILE is the fixed-column assembly source file (.asm).

    The assembler produces an object program of Header, Text and End
    records, one per line.

    \b
    Examples:
        sicasm copy.asm              # Outputs copy.obj
        sicasm copy.asm -o out.obj   # Specify output file
        sicasm copy.asm -l copy.lst  # Also write a listing
    """
    setup_logging(verbose)

    config = AssemblerConfig.from_env()
    if strict:
        config.strict_operands = True
    if relative:
        config.relative_addressing = True

    output_file = output if output is not None else input_file.with_suffix(".obj")
    asm = Assembler(config, verbose=verbose)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)

        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            if listing:
                asm.write_listing(listing)
            sys.exit(ExitCode.BUILD_ERROR)

        asm.write_object(output_file)
        if verbose:
            click.echo(f"Wrote {output_file}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            program = asm.get_program()
            click.echo(
                f"Assembly complete: '{program.name}' {program.length} bytes "
                f"at {program.start:06X}"
            )
            click.echo(f"Defined {len(asm.get_symbols())} symbols")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
