"""
CLI Error Handling
==================

Maps exceptions raised while running sicasm to a message on stderr and
an exit code.

Assembler errors carry a numeric code from the error catalogue; the
message shows it as a tag, for example:

    Assembly error [E09]: copy.asm:4:16: error: unresolved symbol 'RETADX'
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from sicxe_sdk.errors import AssemblerError, PhaseError, SicxeError


class ExitCode(IntEnum):
    """Exit codes for sicasm."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Source did not assemble
    INVALID_ARGS = 2     # Bad arguments, unreadable or unwritable files
    INTERNAL_ERROR = 3   # Driver misuse or unexpected failure


def error_tag(error: SicxeError) -> str:
    """
    Return the catalogue tag for an error ("[E05]"), or "" if it has none.
    """
    code = getattr(error, "code", None)
    return f"[E{code:02d}]" if code is not None else ""


def format_cli_error(error: SicxeError, error_type: str | None = None) -> str:
    """Format an assembler error for stderr."""
    prefix = f"{error_type} error" if error_type else "Error"
    tag = error_tag(error)
    head = f"{prefix} {tag}" if tag else prefix
    return f"{head}: {error}"


def exit_code_for(error: Exception) -> ExitCode:
    """Pick the exit code for an exception."""
    # PhaseError means the driver was called out of order, not bad source
    if isinstance(error, PhaseError):
        return ExitCode.INTERNAL_ERROR
    if isinstance(error, AssemblerError):
        return ExitCode.BUILD_ERROR
    if isinstance(error, (click.BadParameter, OSError)):
        return ExitCode.INVALID_ARGS
    return ExitCode.INTERNAL_ERROR


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report an exception from the assembler CLI and exit.

    Args:
        error: The exception that was raised
        verbose: If True, print the traceback for internal errors
        error_type: Optional prefix for assembler errors (e.g., "Assembly")

    Raises:
        SystemExit: Always
    """
    code = exit_code_for(error)

    if isinstance(error, SicxeError):
        click.echo(format_cli_error(error, error_type), err=True)
    elif code is ExitCode.INVALID_ARGS:
        click.echo(f"Error: {error}", err=True)
    else:
        click.echo(f"Internal error: {error}", err=True)

    if code is ExitCode.INTERNAL_ERROR and verbose:
        traceback.print_exc()
    sys.exit(code)
